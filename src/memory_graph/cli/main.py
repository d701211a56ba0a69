#!/usr/bin/env python3
"""
Memory Graph CLI - serve and inspect the knowledge graph
"""

from __future__ import annotations

import json
import logging

import click
from rich.console import Console
from rich.table import Table

from memory_graph import __version__
from memory_graph.errors import KnowledgeGraphError, SchemaError
from memory_graph.knowledge_graph import KnowledgeGraph, KnowledgeGraphManager
from memory_graph.settings import settings

# stdout belongs to the MCP transport when serving
console = Console(stderr=True)
out = Console()

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def open_manager(db_path: str | None) -> KnowledgeGraphManager:
    """Build the manager from settings and initialize its schema.

    Schema failures are fatal: report and exit non-zero.
    """
    cfg = settings if db_path is None else settings.model_copy(update={"db_path": db_path})
    try:
        manager = KnowledgeGraphManager.from_settings(cfg)
    except (KnowledgeGraphError, RuntimeError) as e:
        console.print(f"[red]Cannot open knowledge graph:[/red] {e}")
        raise SystemExit(1) from e
    try:
        manager.initialize()
    except SchemaError as e:
        manager.close()
        console.print(f"[red]Schema initialization failed:[/red] {e}")
        raise SystemExit(1) from e
    return manager


def _print_graph(graph: KnowledgeGraph, as_json: bool) -> None:
    if as_json:
        out.print_json(json.dumps(graph.to_wire(), ensure_ascii=False))
        return

    if not graph.entities:
        out.print("[yellow]No entities found[/yellow]")
        return

    table = Table(title="Entities")
    table.add_column("Name", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Tags", style="green")
    table.add_column("Observations", style="white", overflow="fold")
    for e in graph.entities:
        table.add_row(e.name, e.entity_type, ", ".join(e.tags), "\n".join(e.observations))
    out.print(table)

    if graph.relations:
        rels = Table(title="Relations")
        rels.add_column("From", style="cyan")
        rels.add_column("Relation", style="yellow")
        rels.add_column("To", style="cyan")
        for r in graph.relations:
            rels.add_row(r.source, r.relation_type, r.target)
        out.print(rels)


@click.group()
@click.option("--db-path", default=None, help="Kuzu database path (default: MEMORY_GRAPH_DB_PATH)")
@click.pass_context
def cli(ctx, db_path):
    """Memory Graph - an agent's memory as a knowledge graph"""
    _configure_logging()
    ctx.obj = {"db_path": db_path}


@cli.command()
def version():
    """Print the package version"""
    out.print(__version__)


@cli.command()
@click.argument("db_path", required=False)
@click.pass_context
def serve(ctx, db_path):
    """Run the MCP server on stdio"""
    from memory_graph.server import run_stdio

    manager = open_manager(db_path or ctx.obj["db_path"])
    try:
        run_stdio(manager)
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        manager.close()


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def read(ctx, as_json):
    """Show the whole graph"""
    with open_manager(ctx.obj["db_path"]) as manager:
        _print_graph(manager.read_graph(), as_json)


@cli.command()
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def search(ctx, query, as_json):
    """Search entities by name, type or observation content"""
    with open_manager(ctx.obj["db_path"]) as manager:
        _print_graph(manager.search_nodes(query), as_json)


@cli.command(name="open")
@click.argument("names", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@click.pass_context
def open_(ctx, names, as_json):
    """Show specific entities and the relations between them"""
    with open_manager(ctx.obj["db_path"]) as manager:
        _print_graph(manager.open_nodes(list(names)), as_json)


@cli.command()
@click.pass_context
def tags(ctx):
    """List all tags"""
    with open_manager(ctx.obj["db_path"]) as manager:
        all_tags = manager.get_all_tags()

    if not all_tags:
        out.print("[yellow]No tags[/yellow]")
        return

    table = Table(title="Tags")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Description", style="white", overflow="fold")
    for t in all_tags:
        table.add_row(t.name, t.category or "", t.description or "")
    out.print(table)


@cli.command(name="tag-usage")
@click.pass_context
def tag_usage(ctx):
    """Show how many entities and observations use each tag"""
    with open_manager(ctx.obj["db_path"]) as manager:
        usage = manager.get_tag_usage()

    if not usage:
        out.print("[yellow]No tags[/yellow]")
        return

    table = Table(title="Tag usage")
    table.add_column("Tag", style="cyan")
    table.add_column("Entities", style="green", justify="right")
    table.add_column("Observations", style="blue", justify="right")
    for u in usage:
        table.add_row(u.tag, str(u.entity_count), str(u.observation_count))
    out.print(table)


def app() -> None:
    cli()


if __name__ == "__main__":
    app()

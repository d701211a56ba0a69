"""MCP adapter: every knowledge graph operation as a named tool.

Tool arguments are validated with pydantic models whose JSON schemas are
advertised as the tools' ``inputSchema``. Results are returned as JSON
text; the three delete tools answer with a fixed confirmation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import BaseModel, ConfigDict, Field

from memory_graph import __version__
from memory_graph.knowledge_graph import (
    Entity,
    KnowledgeGraphManager,
    ObservationAddition,
    ObservationDeletion,
    Relation,
    Tag,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "memory-graph"


class _Args(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NoArgs(_Args):
    pass


class EntitiesArgs(_Args):
    entities: list[Entity]


class RelationsArgs(_Args):
    relations: list[Relation]


class AddObservationsArgs(_Args):
    observations: list[ObservationAddition]


class EntityNamesArgs(_Args):
    entity_names: list[str] = Field(alias="entityNames")


class DeleteObservationsArgs(_Args):
    deletions: list[ObservationDeletion]


class SearchArgs(_Args):
    query: str = Field(
        description=(
            "The search query to match against entity names, types, and observation content"
        )
    )


class NamesArgs(_Args):
    names: list[str]


class TagsArgs(_Args):
    tags: list[Tag]


class EntityTagsArgs(_Args):
    entity_name: str = Field(alias="entityName")
    tag_names: list[str] = Field(alias="tagNames")


class ObservationTagsArgs(_Args):
    entity_name: str = Field(alias="entityName")
    observation_content: str = Field(alias="observationContent")
    tag_names: list[str] = Field(alias="tagNames")


class TagNameArgs(_Args):
    tag_name: str = Field(alias="tagName")


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args: type[_Args]
    call: Callable[[KnowledgeGraphManager, Any], Any]

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.args.model_json_schema(by_alias=True),
        )


def _delete_entities(m: KnowledgeGraphManager, a: EntityNamesArgs) -> str:
    m.delete_entities(a.entity_names)
    return "Entities deleted successfully"


def _delete_observations(m: KnowledgeGraphManager, a: DeleteObservationsArgs) -> str:
    m.delete_observations(a.deletions)
    return "Observations deleted successfully"


def _delete_relations(m: KnowledgeGraphManager, a: RelationsArgs) -> str:
    m.delete_relations(a.relations)
    return "Relations deleted successfully"


TOOLS: tuple[ToolSpec, ...] = (
    ToolSpec(
        "create_entities",
        "Create multiple new entities in the knowledge graph",
        EntitiesArgs,
        lambda m, a: m.create_entities(a.entities),
    ),
    ToolSpec(
        "create_relations",
        "Create multiple new relations between entities in the knowledge graph. "
        "Relations should be in active voice",
        RelationsArgs,
        lambda m, a: m.create_relations(a.relations),
    ),
    ToolSpec(
        "add_observations",
        "Add new observations to existing entities in the knowledge graph",
        AddObservationsArgs,
        lambda m, a: m.add_observations(a.observations),
    ),
    ToolSpec(
        "delete_entities",
        "Delete multiple entities and their associated relations from the knowledge graph",
        EntityNamesArgs,
        _delete_entities,
    ),
    ToolSpec(
        "delete_observations",
        "Delete specific observations from entities in the knowledge graph",
        DeleteObservationsArgs,
        _delete_observations,
    ),
    ToolSpec(
        "delete_relations",
        "Delete multiple relations from the knowledge graph",
        RelationsArgs,
        _delete_relations,
    ),
    ToolSpec(
        "read_graph",
        "Read the entire knowledge graph",
        NoArgs,
        lambda m, a: m.read_graph(),
    ),
    ToolSpec(
        "search_nodes",
        "Search for nodes in the knowledge graph based on a query",
        SearchArgs,
        lambda m, a: m.search_nodes(a.query),
    ),
    ToolSpec(
        "open_nodes",
        "Open specific nodes in the knowledge graph by their names",
        NamesArgs,
        lambda m, a: m.open_nodes(a.names),
    ),
    ToolSpec(
        "create_tags",
        "Create new tags in the knowledge graph",
        TagsArgs,
        lambda m, a: m.create_tags(a.tags),
    ),
    ToolSpec(
        "tag_entity",
        "Add tags to an entity",
        EntityTagsArgs,
        lambda m, a: m.tag_entity(a.entity_name, a.tag_names),
    ),
    ToolSpec(
        "tag_observation",
        "Add tags to an observation",
        ObservationTagsArgs,
        lambda m, a: m.tag_observation(a.entity_name, a.observation_content, a.tag_names),
    ),
    ToolSpec(
        "get_entities_by_tag",
        "Get entities that have a specific tag",
        TagNameArgs,
        lambda m, a: m.get_entities_by_tag(a.tag_name),
    ),
    ToolSpec(
        "get_all_tags",
        "Retrieve all tags in the knowledge graph",
        NoArgs,
        lambda m, a: m.get_all_tags(),
    ),
    ToolSpec(
        "get_tag_usage",
        "Get usage statistics for tags",
        NoArgs,
        lambda m, a: m.get_tag_usage(),
    ),
    ToolSpec(
        "remove_tags_from_entity",
        "Remove tags from an entity",
        EntityTagsArgs,
        lambda m, a: m.remove_tags_from_entity(a.entity_name, a.tag_names),
    ),
)

_BY_NAME = {spec.name: spec for spec in TOOLS}


def _wire(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_wire(v) for v in value]
    return value


def dispatch(manager: KnowledgeGraphManager, name: str, arguments: dict[str, Any] | None) -> str:
    """Validate ``arguments``, run tool ``name`` and render its result as text."""
    spec = _BY_NAME.get(name)
    if spec is None:
        raise ValueError(f"Unknown tool: {name}")

    args = spec.args.model_validate(arguments or {})
    result = spec.call(manager, args)
    if isinstance(result, str):
        return result
    return json.dumps(_wire(result), indent=2, ensure_ascii=False)


def build_server(manager: KnowledgeGraphManager) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [spec.to_tool() for spec in TOOLS]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        logger.debug("call_tool %s", name)
        return [TextContent(type="text", text=dispatch(manager, name, arguments))]

    return server


async def serve(manager: KnowledgeGraphManager) -> None:
    server = build_server(manager)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("Knowledge Graph MCP Server running on stdio")
        await server.run(read_stream, write_stream, server.create_initialization_options())


def run_stdio(manager: KnowledgeGraphManager) -> None:
    asyncio.run(serve(manager))

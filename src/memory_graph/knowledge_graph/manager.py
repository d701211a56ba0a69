from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter

from ..errors import KnowledgeGraphError
from ..settings import MemoryGraphSettings
from .entities import EntityStore
from .kuzu_store import KuzuConfig, KuzuGraphStore
from .models import (
    AddedObservations,
    Entity,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    Relation,
    Tag,
    TagUsage,
)
from .neo4j_store import Neo4jConfig, Neo4jGraphStore
from .observations import ObservationStore
from .query_engine import GraphQueryEngine
from .relations import RelationStore
from .store import GraphStore
from .tags import TagStore

logger = logging.getLogger(__name__)

R = TypeVar("R")

_ENTITIES = TypeAdapter(list[Entity])
_RELATIONS = TypeAdapter(list[Relation])
_ADDITIONS = TypeAdapter(list[ObservationAddition])
_DELETIONS = TypeAdapter(list[ObservationDeletion])
_TAGS = TypeAdapter(list[Tag])
_NAMES = TypeAdapter(list[str])


def build_graph_store(cfg: MemoryGraphSettings) -> GraphStore:
    if cfg.backend == "neo4j":
        if not (cfg.neo4j_uri and cfg.neo4j_user and cfg.neo4j_password):
            raise RuntimeError(
                "Neo4j not configured. Set MEMORY_GRAPH_NEO4J_URI/USER/PASSWORD."
            )
        return Neo4jGraphStore(
            Neo4jConfig(
                uri=cfg.neo4j_uri,
                user=cfg.neo4j_user,
                password=cfg.neo4j_password,
                database=cfg.neo4j_database,
            )
        )
    return KuzuGraphStore(KuzuConfig(path=cfg.db_path))


class KnowledgeGraphManager:
    """Single entry point to the knowledge graph.

    Owns one storage handle for its lifetime. Every operation runs in one
    transaction: it either fully applies or, on any error, leaves the graph
    as it was and re-raises. Duplicates are never errors; they are simply
    missing from the returned lists.

    Inputs may be model instances or plain dicts using the camelCase wire
    keys (``entityType``, ``relationType``, ``from``/``to``, ``entityName``).
    """

    def __init__(self, store: GraphStore):
        self.store = store
        self.observations = ObservationStore(store)
        self.tags = TagStore(store, self.observations)
        self.entities = EntityStore(store, self.observations, self.tags)
        self.relations = RelationStore(store)
        self.queries = GraphQueryEngine(store, self.entities, self.relations, self.tags)
        self._closed = False

    @classmethod
    def open(cls, path: str) -> KnowledgeGraphManager:
        """Manager over a kuzu database at ``path`` (``:memory:`` for in-memory)."""
        return cls(KuzuGraphStore(KuzuConfig(path=path)))

    @classmethod
    def from_settings(cls, cfg: MemoryGraphSettings) -> KnowledgeGraphManager:
        return cls(build_graph_store(cfg))

    def __enter__(self) -> KnowledgeGraphManager:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def initialize(self) -> None:
        """Declare the schema. Idempotent; raises SchemaError on failure."""
        self.store.ensure_schema()
        logger.info("Knowledge graph schema ready")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.store.close()

    def _run(self, op: str, fn: Callable[..., R], *args: Any) -> R:
        try:
            with self.store.transaction():
                return fn(*args)
        except KnowledgeGraphError as e:
            logger.error("Error in %s: %s", op, e)
            raise

    # --- Entities / relations ---

    def create_entities(self, entities: list[Entity] | list[dict]) -> list[Entity]:
        items = _ENTITIES.validate_python(entities)
        created = self._run("create_entities", self.entities.create, items)
        logger.info("Created %d of %d entities", len(created), len(items))
        return created

    def delete_entities(self, entity_names: list[str]) -> None:
        self._run("delete_entities", self.entities.delete, _NAMES.validate_python(entity_names))

    def create_relations(self, relations: list[Relation] | list[dict]) -> list[Relation]:
        items = _RELATIONS.validate_python(relations)
        created = self._run("create_relations", self.relations.create, items)
        logger.info("Created %d of %d relations", len(created), len(items))
        return created

    def delete_relations(self, relations: list[Relation] | list[dict]) -> None:
        self._run("delete_relations", self.relations.delete, _RELATIONS.validate_python(relations))

    # --- Observations ---

    def add_observations(
        self, observations: list[ObservationAddition] | list[dict]
    ) -> list[AddedObservations]:
        items = _ADDITIONS.validate_python(observations)
        return self._run("add_observations", self.observations.add, items)

    def delete_observations(self, deletions: list[ObservationDeletion] | list[dict]) -> None:
        items = _DELETIONS.validate_python(deletions)
        self._run("delete_observations", self.observations.delete, items)

    # --- Tags ---

    def create_tags(self, tags: list[Tag] | list[dict]) -> list[Tag]:
        return self._run("create_tags", self.tags.create, _TAGS.validate_python(tags))

    def tag_entity(self, entity_name: str, tag_names: list[str]) -> list[str]:
        names = _NAMES.validate_python(tag_names)
        return self._run("tag_entity", self.tags.tag_entity, entity_name, names)

    def tag_observation(
        self, entity_name: str, observation_content: str, tag_names: list[str]
    ) -> list[str]:
        return self._run(
            "tag_observation",
            self.tags.tag_observation,
            entity_name,
            observation_content,
            _NAMES.validate_python(tag_names),
        )

    def remove_tags_from_entity(self, entity_name: str, tag_names: list[str]) -> list[str]:
        return self._run(
            "remove_tags_from_entity",
            self.tags.remove_from_entity,
            entity_name,
            _NAMES.validate_python(tag_names),
        )

    def get_all_tags(self) -> list[Tag]:
        return self._run("get_all_tags", self.tags.all)

    def get_tag_usage(self) -> list[TagUsage]:
        return self._run("get_tag_usage", self.tags.usage)

    # --- Queries ---

    def read_graph(self) -> KnowledgeGraph:
        graph = self._run("read_graph", self.queries.read_graph)
        logger.debug(
            "read_graph: %d entities, %d relations, %d tags",
            len(graph.entities),
            len(graph.relations),
            len(graph.tags or []),
        )
        return graph

    def search_nodes(self, query: str) -> KnowledgeGraph:
        return self._run("search_nodes", self.queries.search_nodes, query)

    def open_nodes(self, names: list[str]) -> KnowledgeGraph:
        return self._run("open_nodes", self.queries.open_nodes, _NAMES.validate_python(names))

    def get_entities_by_tag(self, tag_name: str) -> KnowledgeGraph:
        return self._run("get_entities_by_tag", self.queries.entities_by_tag, tag_name)

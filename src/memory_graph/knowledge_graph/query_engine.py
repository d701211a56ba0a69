from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from .entities import EntityStore
from .helpers import unique
from .models import Entity, KnowledgeGraph
from .relations import RelationStore
from .rows import NameRow
from .store import GraphStore
from .tags import TagStore


@dataclass(slots=True)
class GraphQueryEngine:
    """Read side of the graph.

    Matching happens in the database (Cypher); entities are then
    materialized with a fixed number of queries regardless of how many
    matched: one each for entities, observations, tags and relations.
    """

    store: GraphStore
    entities: EntityStore
    relations: RelationStore
    tags: TagStore

    def read_graph(self) -> KnowledgeGraph:
        return KnowledgeGraph(
            entities=self._materialize(None),
            relations=self.relations.induced(None),
            tags=self.tags.all(),
        )

    def search_nodes(self, query: str) -> KnowledgeGraph:
        lower = self.store.lowercase
        rows = self.store.query(
            f"""
            MATCH (e:Entity)
            WHERE {lower}(e.name) CONTAINS {lower}($q)
               OR {lower}(e.entityType) CONTAINS {lower}($q)
               OR EXISTS {{
                    MATCH (e)-[:HAS_OBSERVATION]->(o:Observation)
                    WHERE {lower}(o.content) CONTAINS {lower}($q)
               }}
            RETURN e.name AS name
            ORDER BY name
            """,
            {"q": query},
        )
        return self._subgraph([NameRow.decode(r).name for r in rows])

    def open_nodes(self, names: list[str]) -> KnowledgeGraph:
        return self._subgraph(unique(names))

    def entities_by_tag(self, tag_name: str) -> KnowledgeGraph:
        rows = self.store.query(
            """
            MATCH (e:Entity)-[:ENTITY_TAGGED_WITH]->(t:Tag {name: $tag})
            RETURN e.name AS name
            ORDER BY name
            """,
            {"tag": tag_name},
        )
        return self._subgraph([NameRow.decode(r).name for r in rows])

    def _subgraph(self, names: list[str]) -> KnowledgeGraph:
        entities = self._materialize(names)
        found = [e.name for e in entities]
        return KnowledgeGraph(entities=entities, relations=self.relations.induced(found))

    def _materialize(self, names: list[str] | None) -> list[Entity]:
        observations: dict[str, list[str]] = defaultdict(list)
        for obs in self.entities.observations.for_entities(names):
            observations[obs.entity_name].append(obs.content)

        tags: dict[str, list[str]] = defaultdict(list)
        for link in self.tags.for_entities(names):
            tags[link.entity_name].append(link.tag)

        return [
            Entity(
                name=row.name,
                entity_type=row.entity_type,
                observations=observations.get(row.name, []),
                tags=tags.get(row.name, []),
            )
            for row in self.entities.rows(names)
        ]

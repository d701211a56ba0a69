from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import EntityNotFoundError
from .helpers import entity_exists, name_filter, new_observation_id, unique, utc_now
from .models import AddedObservations, ObservationAddition, ObservationDeletion
from .rows import CountRow, ObservationIdRow, ObservationRow
from .store import GraphStore

logger = logging.getLogger(__name__)

_ORPHAN = "MATCH (o:Observation) WHERE NOT EXISTS { MATCH (o)<-[:HAS_OBSERVATION]-(:Entity) }"
_BY_CONTENT = (
    "MATCH (e:Entity {name: $entity})-[:HAS_OBSERVATION]->(o:Observation {content: $content})"
)


@dataclass(slots=True)
class ObservationStore:
    """Observations are facts owned by exactly one entity.

    Content is unique per owning entity; the surrogate ``id`` is what
    links and deletions address.
    """

    store: GraphStore

    def create(self, entity_name: str, content: str) -> str:
        obs_id = new_observation_id()
        self.store.query(
            "CREATE (o:Observation {id: $id, content: $content, createdAt: $createdAt})",
            {"id": obs_id, "content": content, "createdAt": utc_now()},
        )
        self.store.query(
            """
            MATCH (e:Entity {name: $entity}), (o:Observation {id: $id})
            CREATE (e)-[:HAS_OBSERVATION]->(o)
            """,
            {"entity": entity_name, "id": obs_id},
        )
        return obs_id

    def ids_for(self, entity_name: str, content: str) -> list[str]:
        rows = self.store.query(
            f"{_BY_CONTENT} RETURN o.id AS obsId", {"entity": entity_name, "content": content}
        )
        return [ObservationIdRow.decode(r).id for r in rows]

    def exists(self, entity_name: str, content: str) -> bool:
        rows = self.store.query(
            f"{_BY_CONTENT} RETURN count(*) AS n", {"entity": entity_name, "content": content}
        )
        return CountRow.first(rows) > 0

    def add(self, additions: list[ObservationAddition]) -> list[AddedObservations]:
        results: list[AddedObservations] = []
        for item in additions:
            if not entity_exists(self.store, item.entity_name):
                raise EntityNotFoundError(item.entity_name)

            added: list[str] = []
            for content in unique(item.contents):
                if self.exists(item.entity_name, content):
                    logger.debug("Observation already on %s: %r", item.entity_name, content)
                    continue
                self.create(item.entity_name, content)
                added.append(content)
            results.append(
                AddedObservations(entity_name=item.entity_name, added_observations=added)
            )
        return results

    def delete(self, deletions: list[ObservationDeletion]) -> None:
        for item in deletions:
            for content in item.observations:
                self.store.query(
                    f"{_BY_CONTENT} DETACH DELETE o",
                    {"entity": item.entity_name, "content": content},
                )

    def delete_owned(self, entity_name: str) -> None:
        self.store.query(
            """
            MATCH (e:Entity {name: $entity})-[:HAS_OBSERVATION]->(o:Observation)
            DETACH DELETE o
            """,
            {"entity": entity_name},
        )

    def sweep_orphans(self) -> int:
        """Delete every observation no entity owns any more.

        Scans all observations, so cost grows with the size of the graph.
        """
        n = CountRow.first(self.store.query(f"{_ORPHAN} RETURN count(o) AS n"))
        if n:
            self.store.query(f"{_ORPHAN} DETACH DELETE o")
            logger.info("Swept %d orphaned observations", n)
        return n

    def for_entities(self, names: list[str] | None = None) -> list[ObservationRow]:
        """Observations of the named entities (all when ``names`` is None), oldest first."""
        if names == []:
            return []
        q = f"""
        MATCH (e:Entity)-[:HAS_OBSERVATION]->(o:Observation)
        {name_filter("e", names)}
        RETURN e.name AS entity, o.id AS obsId, o.content AS content, o.createdAt AS createdAt
        ORDER BY createdAt, obsId
        """
        rows = self.store.query(q, {"names": names} if names is not None else None)
        return [ObservationRow.decode(r) for r in rows]

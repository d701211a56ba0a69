from __future__ import annotations

import logging
from dataclasses import dataclass

from .helpers import unique
from .models import Relation
from .rows import CountRow, RelationRow
from .store import GraphStore

logger = logging.getLogger(__name__)

_EDGE = (
    "MATCH (a:Entity {name: $source})-[r:RELATED_TO {relationType: $relationType}]->"
    "(b:Entity {name: $target})"
)


def _params(rel: Relation) -> dict[str, str]:
    return {"source": rel.source, "target": rel.target, "relationType": rel.relation_type}


@dataclass(slots=True)
class RelationStore:
    store: GraphStore

    def exists(self, rel: Relation) -> bool:
        return CountRow.first(self.store.query(f"{_EDGE} RETURN count(*) AS n", _params(rel))) > 0

    def endpoints_exist(self, rel: Relation) -> bool:
        rows = self.store.query(
            "MATCH (a:Entity {name: $source}), (b:Entity {name: $target}) RETURN count(*) AS n",
            {"source": rel.source, "target": rel.target},
        )
        return CountRow.first(rows) > 0

    def create(self, relations: list[Relation]) -> list[Relation]:
        created: list[Relation] = []
        for rel in unique(relations):
            if self.exists(rel):
                logger.debug(
                    "Relation %s -[%s]-> %s exists", rel.source, rel.relation_type, rel.target
                )
                continue
            if not self.endpoints_exist(rel):
                logger.debug(
                    "Skipping relation %s -[%s]-> %s: missing endpoint",
                    rel.source,
                    rel.relation_type,
                    rel.target,
                )
                continue
            self.store.query(
                """
                MATCH (a:Entity {name: $source}), (b:Entity {name: $target})
                CREATE (a)-[:RELATED_TO {relationType: $relationType}]->(b)
                """,
                _params(rel),
            )
            created.append(rel)
        return created

    def delete(self, relations: list[Relation]) -> None:
        for rel in relations:
            self.store.query(f"{_EDGE} DELETE r", _params(rel))

    def induced(self, names: list[str] | None = None) -> list[Relation]:
        """Relations whose both endpoints are in ``names`` (every relation when None)."""
        if names == []:
            return []
        where = "" if names is None else "WHERE a.name IN $names AND b.name IN $names"
        rows = self.store.query(
            f"""
            MATCH (a:Entity)-[r:RELATED_TO]->(b:Entity)
            {where}
            RETURN a.name AS source, b.name AS target, r.relationType AS relationType
            ORDER BY source, target, relationType
            """,
            {"names": names} if names is not None else None,
        )
        return [
            Relation(source=r.source, target=r.target, relation_type=r.relation_type)
            for r in map(RelationRow.decode, rows)
        ]

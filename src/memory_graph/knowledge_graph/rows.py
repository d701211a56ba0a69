"""Typed rows, one per query shape.

Stores decode engine rows here, right at the query boundary, so the rest
of the package never touches loosely-typed dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

Row = dict[str, Any]


@dataclass(frozen=True, slots=True)
class CountRow:
    n: int

    @classmethod
    def first(cls, rows: list[Row]) -> int:
        if not rows:
            return 0
        return int(rows[0]["n"] or 0)


@dataclass(frozen=True, slots=True)
class NameRow:
    name: str

    @classmethod
    def decode(cls, row: Row) -> NameRow:
        return cls(name=row["name"])


@dataclass(frozen=True, slots=True)
class EntityRow:
    name: str
    entity_type: str

    @classmethod
    def decode(cls, row: Row) -> EntityRow:
        return cls(name=row["name"], entity_type=row["entityType"] or "")


@dataclass(frozen=True, slots=True)
class ObservationRow:
    entity_name: str
    id: str
    content: str
    created_at: str

    @classmethod
    def decode(cls, row: Row) -> ObservationRow:
        return cls(
            entity_name=row["entity"],
            id=row["obsId"],
            content=row["content"],
            created_at=row["createdAt"] or "",
        )


@dataclass(frozen=True, slots=True)
class ObservationIdRow:
    id: str

    @classmethod
    def decode(cls, row: Row) -> ObservationIdRow:
        return cls(id=row["obsId"])


@dataclass(frozen=True, slots=True)
class EntityTagRow:
    entity_name: str
    tag: str

    @classmethod
    def decode(cls, row: Row) -> EntityTagRow:
        return cls(entity_name=row["entity"], tag=row["tag"])


@dataclass(frozen=True, slots=True)
class RelationRow:
    source: str
    target: str
    relation_type: str

    @classmethod
    def decode(cls, row: Row) -> RelationRow:
        return cls(source=row["source"], target=row["target"], relation_type=row["relationType"])


@dataclass(frozen=True, slots=True)
class TagRow:
    name: str
    category: str
    description: str

    @classmethod
    def decode(cls, row: Row) -> TagRow:
        return cls(
            name=row["name"],
            category=row["category"] or "",
            description=row["description"] or "",
        )


@dataclass(frozen=True, slots=True)
class TagUsageRow:
    tag: str
    entity_count: int
    observation_count: int

    @classmethod
    def decode(cls, row: Row) -> TagUsageRow:
        return cls(
            tag=row["tag"],
            entity_count=int(row["entityCount"]),
            observation_count=int(row["observationCount"]),
        )

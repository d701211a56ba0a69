from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TypeVar

from .rows import CountRow
from .store import GraphStore

T = TypeVar("T")


def unique(items: Iterable[T]) -> list[T]:
    """Drop repeats, keeping first occurrences in order."""
    seen: set[T] = set()
    out: list[T] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def new_observation_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


def name_filter(var: str, names: list[str] | None, param: str = "names") -> str:
    """WHERE clause restricting ``var.name`` to ``$names``; empty when unscoped."""
    if names is None:
        return ""
    return f"WHERE {var}.name IN ${param}"


def entity_exists(store: GraphStore, name: str) -> bool:
    rows = store.query("MATCH (e:Entity {name: $name}) RETURN count(*) AS n", {"name": name})
    return CountRow.first(rows) > 0


def tag_exists(store: GraphStore, name: str) -> bool:
    rows = store.query("MATCH (t:Tag {name: $name}) RETURN count(*) AS n", {"name": name})
    return CountRow.first(rows) > 0

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Protocol


class GraphStore(Protocol):
    """Abstraction for the backing graph database.

    Queries are Cypher with ``$name`` parameters; values are never
    interpolated into query text.
    """

    # Name of the engine's lower-case string function.
    lowercase: str

    def ensure_schema(self) -> None: ...

    def query(self, cypher: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]: ...

    def transaction(self) -> AbstractContextManager[GraphStore]: ...

    def close(self) -> None: ...

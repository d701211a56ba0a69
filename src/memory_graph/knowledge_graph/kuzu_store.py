from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import kuzu

from ..errors import SchemaError, StorageError
from .schema import KUZU_SCHEMA

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


@dataclass(slots=True)
class KuzuConfig:
    path: str = IN_MEMORY
    # 0 lets kuzu pick its default buffer pool
    buffer_pool_size: int = 0


class KuzuGraphStore:
    """Embedded Kuzu-backed graph store.

    Owns one database and one connection for its whole lifetime. Manual
    transactions are opened on that connection; nested scopes join the
    outermost one.
    """

    lowercase = "lower"

    def __init__(self, cfg: KuzuConfig | None = None):
        self.cfg = cfg or KuzuConfig()
        if self.cfg.path == IN_MEMORY:
            location = IN_MEMORY
        else:
            db_path = Path(self.cfg.path).expanduser()
            db_path.parent.mkdir(parents=True, exist_ok=True)
            location = str(db_path)

        try:
            self._db = kuzu.Database(location, buffer_pool_size=self.cfg.buffer_pool_size)
            self._conn = kuzu.Connection(self._db)
        except RuntimeError as e:
            raise StorageError(f"Failed to open kuzu database at {location}: {e}") from e
        self._tx_depth = 0
        self._closed = False
        logger.info("Opened kuzu graph at %s", location)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._conn.close()
        self._db.close()

    def ensure_schema(self) -> None:
        try:
            for stmt in KUZU_SCHEMA:
                self._conn.execute(stmt)
        except RuntimeError as e:
            logger.error("Error initializing schema: %s", e)
            raise SchemaError(f"Failed to initialize kuzu schema: {e}") from e

    def query(self, cypher: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        try:
            res = self._conn.execute(cypher, params or {})
        except RuntimeError as e:
            raise StorageError(str(e)) from e
        if isinstance(res, list):
            res = res[-1]
        columns = res.get_column_names()
        rows: list[dict[str, Any]] = []
        while res.has_next():
            rows.append(dict(zip(columns, res.get_next())))
        return rows

    @contextmanager
    def transaction(self) -> Iterator[KuzuGraphStore]:
        if self._tx_depth:
            self._tx_depth += 1
            try:
                yield self
            finally:
                self._tx_depth -= 1
            return

        self._execute_control("BEGIN TRANSACTION")
        self._tx_depth = 1
        try:
            yield self
        except BaseException:
            self._tx_depth = 0
            self._rollback()
            raise
        self._tx_depth = 0
        self._execute_control("COMMIT")

    def _execute_control(self, stmt: str) -> None:
        try:
            self._conn.execute(stmt)
        except RuntimeError as e:
            raise StorageError(f"{stmt} failed: {e}") from e

    def _rollback(self) -> None:
        try:
            self._conn.execute("ROLLBACK")
        except RuntimeError as e:
            # A failed statement can end the transaction on the engine side.
            logger.debug("ROLLBACK after failure: %s", e)

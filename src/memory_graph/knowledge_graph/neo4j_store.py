from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from ..errors import SchemaError, StorageError
from .schema import NEO4J_SCHEMA

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Neo4jConfig:
    uri: str
    user: str
    password: str
    database: str = "neo4j"


class Neo4jGraphStore:
    """Neo4j-backed graph store.

    Maintains node key constraints instead of declared tables. Outside a
    transaction scope every query runs in its own auto-commit session.

    Dependency: neo4j>=5 (optional extra).
    """

    lowercase = "toLower"

    def __init__(self, cfg: Neo4jConfig):
        self.cfg = cfg
        from neo4j import GraphDatabase  # type: ignore
        from neo4j.exceptions import DriverError, Neo4jError  # type: ignore

        self._errors: tuple[type[Exception], ...] = (Neo4jError, DriverError)
        # Driver is thread-safe; sessions are lightweight.
        self._driver = GraphDatabase.driver(cfg.uri, auth=(cfg.user, cfg.password))
        self._session = None
        self._tx = None
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._driver.close()

    def ensure_schema(self) -> None:
        try:
            with self._driver.session(database=self.cfg.database) as s:
                for q in NEO4J_SCHEMA:
                    s.run(q)
        except self._errors as e:
            logger.error("Error initializing schema: %s", e)
            raise SchemaError(f"Failed to initialize neo4j schema: {e}") from e

    def query(self, cypher: str, params: dict[str, Any] | None = None) -> list[dict[str, Any]]:
        try:
            if self._tx is not None:
                return [dict(r) for r in self._tx.run(cypher, params or {})]
            with self._driver.session(database=self.cfg.database) as s:
                return [dict(r) for r in s.run(cypher, params or {})]
        except self._errors as e:
            raise StorageError(str(e)) from e

    @contextmanager
    def transaction(self) -> Iterator[Neo4jGraphStore]:
        if self._tx is not None:
            yield self
            return

        try:
            self._session = self._driver.session(database=self.cfg.database)
            self._tx = self._session.begin_transaction()
        except self._errors as e:
            self._release()
            raise StorageError(f"BEGIN failed: {e}") from e

        try:
            yield self
        except BaseException:
            tx, self._tx = self._tx, None
            try:
                tx.rollback()
            except self._errors as e:
                logger.debug("rollback after failure: %s", e)
            finally:
                self._release()
            raise

        tx, self._tx = self._tx, None
        try:
            tx.commit()
        except self._errors as e:
            raise StorageError(f"COMMIT failed: {e}") from e
        finally:
            self._release()

    def _release(self) -> None:
        self._tx = None
        if self._session is not None:
            self._session.close()
            self._session = None

from __future__ import annotations


class KnowledgeGraphError(Exception):
    """Base class for every error raised by the knowledge graph."""


class EntityNotFoundError(KnowledgeGraphError, LookupError):
    def __init__(self, name: str):
        super().__init__(f"Entity with name {name} not found")
        self.name = name


class StorageError(KnowledgeGraphError):
    """The storage engine rejected or failed a query.

    The engine's own exception is chained as ``__cause__``.
    """


class SchemaError(StorageError):
    """Schema initialization failed; the graph cannot be served."""

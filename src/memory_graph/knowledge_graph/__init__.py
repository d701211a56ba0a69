"""Knowledge graph subsystem.

This module provides:
- The data model (entities, relations, observations, tags)
- A graph store abstraction with Kuzu (embedded) and Neo4j implementations
- Per-collection stores and a query engine composed behind one manager

All queries are parameterized Cypher; every manager operation is one
transaction.
"""

from .kuzu_store import KuzuConfig, KuzuGraphStore
from .manager import KnowledgeGraphManager, build_graph_store
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
from .store import GraphStore

__all__ = [
    "AddedObservations",
    "Entity",
    "GraphStore",
    "KnowledgeGraph",
    "KnowledgeGraphManager",
    "KuzuConfig",
    "KuzuGraphStore",
    "Neo4jConfig",
    "Neo4jGraphStore",
    "ObservationAddition",
    "ObservationDeletion",
    "Relation",
    "Tag",
    "TagUsage",
    "build_graph_store",
]

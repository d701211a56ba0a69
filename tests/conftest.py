"""
Shared pytest fixtures.

Every test gets its own in-memory kuzu database, so tests never share
graph state.
"""

import pytest

from memory_graph.knowledge_graph import KnowledgeGraphManager


@pytest.fixture
def manager():
    mgr = KnowledgeGraphManager.open(":memory:")
    mgr.initialize()
    yield mgr
    mgr.close()


@pytest.fixture
def seeded(manager):
    """A small graph: two people, a company, relations, tags."""
    manager.create_entities(
        [
            {
                "name": "John_Smith",
                "entityType": "person",
                "observations": ["Speaks fluent Spanish", "Graduated in 2019"],
                "tags": ["vip"],
            },
            {
                "name": "Jane_Doe",
                "entityType": "person",
                "observations": ["Likes chess"],
            },
            {
                "name": "Anthropic",
                "entityType": "organization",
                "observations": ["AI safety company"],
                "tags": ["company"],
            },
        ]
    )
    manager.create_relations(
        [
            {"from": "John_Smith", "to": "Anthropic", "relationType": "works_at"},
            {"from": "Jane_Doe", "to": "John_Smith", "relationType": "knows"},
        ]
    )
    return manager

"""Schema declarations for the five graph collections.

Every statement is idempotent so initialization can run on each start.
"""

from __future__ import annotations

NODE_TABLES = ("Entity", "Observation", "Tag")
REL_TABLES = ("HAS_OBSERVATION", "RELATED_TO", "ENTITY_TAGGED_WITH", "OBSERVATION_TAGGED_WITH")

KUZU_SCHEMA: tuple[str, ...] = (
    """
    CREATE NODE TABLE IF NOT EXISTS Entity(
        name STRING,
        entityType STRING,
        PRIMARY KEY(name)
    )
    """,
    """
    CREATE NODE TABLE IF NOT EXISTS Observation(
        id STRING,
        content STRING,
        createdAt STRING,
        PRIMARY KEY(id)
    )
    """,
    """
    CREATE NODE TABLE IF NOT EXISTS Tag(
        name STRING,
        category STRING,
        description STRING,
        PRIMARY KEY(name)
    )
    """,
    "CREATE REL TABLE IF NOT EXISTS HAS_OBSERVATION(FROM Entity TO Observation)",
    "CREATE REL TABLE IF NOT EXISTS RELATED_TO(FROM Entity TO Entity, relationType STRING)",
    "CREATE REL TABLE IF NOT EXISTS ENTITY_TAGGED_WITH(FROM Entity TO Tag)",
    "CREATE REL TABLE IF NOT EXISTS OBSERVATION_TAGGED_WITH(FROM Observation TO Tag)",
)

# Neo4j is schema-optional: relationship types need no declaration, node
# keys are enforced with uniqueness constraints.
NEO4J_SCHEMA: tuple[str, ...] = (
    "CREATE CONSTRAINT entity_name IF NOT EXISTS FOR (n:Entity) REQUIRE n.name IS UNIQUE",
    "CREATE CONSTRAINT observation_id IF NOT EXISTS FOR (n:Observation) REQUIRE n.id IS UNIQUE",
    "CREATE CONSTRAINT tag_name IF NOT EXISTS FOR (n:Tag) REQUIRE n.name IS UNIQUE",
    "CREATE INDEX entity_type IF NOT EXISTS FOR (n:Entity) ON (n.entityType)",
)

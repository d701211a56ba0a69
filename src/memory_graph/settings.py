from __future__ import annotations

from typing import Literal

from pydantic import Field

try:
    from pydantic_settings import BaseSettings, SettingsConfigDict
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "pydantic-settings is required. Install with: pip install pydantic-settings"
    ) from e


class MemoryGraphSettings(BaseSettings):
    """Unified configuration for Memory Graph.

    Environment variables are prefixed with MEMORY_GRAPH_.
    """

    model_config = SettingsConfigDict(env_prefix="MEMORY_GRAPH_", extra="ignore")

    # --- Core ---
    log_level: str = Field(default="INFO", description="Python logging level")

    # --- Storage ---
    backend: Literal["kuzu", "neo4j"] = Field(default="kuzu", description="kuzu|neo4j")
    db_path: str = Field(
        default="~/.memory_graph/kuzu",
        description="Kuzu database location; ':memory:' for an in-memory graph",
    )

    # --- Neo4j ---
    neo4j_uri: str | None = Field(default=None)
    neo4j_user: str | None = Field(default=None)
    neo4j_password: str | None = Field(default=None)
    neo4j_database: str = Field(default="neo4j")


settings = MemoryGraphSettings()

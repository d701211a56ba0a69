"""Memory Graph - an agent's long-term memory as a knowledge graph."""

__version__ = "0.7.0"

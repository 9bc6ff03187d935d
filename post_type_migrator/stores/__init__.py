"""
Content store adapters.

The migration job only depends on :class:`ContentStore`.  Two
implementations ship with the tool: an in-memory store and a DuckDB
store that mirrors the WordPress post and taxonomy tables.
"""

from .base import STATUS_ANY, ContentStore, StoreError
from .duckdb_store import DuckDBContentStore
from .memory import InMemoryContentStore

__all__ = [
    "STATUS_ANY",
    "ContentStore",
    "StoreError",
    "DuckDBContentStore",
    "InMemoryContentStore",
]

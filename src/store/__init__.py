"""Storage module - in-memory per-file index store."""

from .index_store import IndexStore

__all__ = [
    "IndexStore",
]

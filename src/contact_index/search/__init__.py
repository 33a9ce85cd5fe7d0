"""Name prefix index and the manager that keeps contact indexes in sync."""

from contact_index.search.index import SearchIndex, TrieNode
from contact_index.search.manager import (
    DuplicateContactError,
    IdSpaceExhaustedError,
    IndexManager,
)
from contact_index.search.schemas import SearchResponse

__all__ = [
    "DuplicateContactError",
    "IdSpaceExhaustedError",
    "IndexManager",
    "SearchIndex",
    "SearchResponse",
    "TrieNode",
]

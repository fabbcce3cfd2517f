"""
Installed-component cache.

Tracks which version of each setup component is installed on a node:
- CacheEntry: one `identity:version` record
- CacheIndex: ordered entries with upsert by identity
- CacheStore: the cache file in the node root
"""

from .index import CacheIndex
from .models import DELIMITER, CacheEntry, UpsertOutcome
from .store import CACHE_FILENAME, CacheStore

__all__ = [
    "CACHE_FILENAME",
    "DELIMITER",
    "CacheEntry",
    "CacheIndex",
    "CacheStore",
    "UpsertOutcome",
]

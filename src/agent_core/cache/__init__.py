"""Content-addressed result cache with lazy TTL expiry and global capacity."""

from agent_core.cache.keys import canonical_serialize, create_cache_key
from agent_core.cache.models import CachedResult, CacheStats
from agent_core.cache.result_cache import ResultCache
from agent_core.cache.store import CacheStore, InMemoryCacheStore

__all__ = [
    "CacheStats",
    "CacheStore",
    "CachedResult",
    "InMemoryCacheStore",
    "ResultCache",
    "canonical_serialize",
    "create_cache_key",
]

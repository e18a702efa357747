"""
Gameday caching package.

Provides the TTL cache and the resolver that fronts the Stats API with it.
Entries are short-lived and never hold failed lookups.
"""

from .resolver import CachedResourceResolver, cache_key, normalize_person_ids
from .ttl_cache import TTLCache, CacheEntry

__all__ = ["CachedResourceResolver", "cache_key", "normalize_person_ids", "TTLCache", "CacheEntry"]

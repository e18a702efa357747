"""
Cache-fronted access to the three Stats API resource kinds.
"""

import hashlib
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence, Tuple, Union

from shared.logging import get_logger

from ..domain.resources import ResourceKind
from .ttl_cache import TTLCache, MISSING

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.statsapi_client import StatsApiClient
    from shared.metrics import MetricsCollector


def normalize_person_ids(person_ids: Iterable[Union[int, str]]) -> list:
    """Stringify, strip and deduplicate IDs, keeping first-seen order."""
    seen = set()
    ordered = []
    for person_id in person_ids:
        value = str(person_id).strip()
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def _sort_key(person_id: str) -> Tuple[int, Union[int, str]]:
    return (0, int(person_id)) if person_id.isdigit() else (1, person_id)


def cache_key(kind: ResourceKind, params: Any) -> str:
    """Deterministic cache key for a resource query.

    People batches are keyed on a digest of the full sorted ID set so that
    batches sharing a long common prefix never collide.
    """
    if kind is ResourceKind.SCHEDULE:
        return f"{kind.value}-{params}"
    if kind is ResourceKind.GAME_FEED:
        return f"{kind.value}-{params}"
    if kind is ResourceKind.PEOPLE:
        ids = sorted(normalize_person_ids(params), key=_sort_key)
        digest = hashlib.md5(",".join(ids).encode("utf-8")).hexdigest()
        return f"{kind.value}-{digest}"
    raise ValueError(f"Unknown resource kind: {kind!r}")


class CachedResourceResolver:
    """Serve Stats API resources from the TTL cache, fetching on miss.

    Failures are never cached: an ``UpstreamError`` propagates unchanged and
    the next call for the same key goes upstream again.
    """

    def __init__(
        self,
        cache: TTLCache,
        client: "StatsApiClient",
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.client = client
        self.metrics = metrics
        self.logger = get_logger("gameday.resolver")

    async def resolve(self, kind: ResourceKind, params: Any) -> Tuple[Any, bool]:
        """Return ``(value, from_cache)`` for a resource query."""
        key = cache_key(kind, params)

        cached = self.cache.get(key, MISSING)
        if cached is not MISSING:
            self.logger.info("Cache hit", resource=kind.value, key=key)
            self._count("cache_hits_total", kind)
            return cached, True

        self.logger.info("Cache miss", resource=kind.value, key=key)
        self._count("cache_misses_total", kind)

        value = await self._fetch(kind, params)
        self.cache.set(key, value)
        return value, False

    async def get_schedule(self, date: str) -> Tuple[Any, bool]:
        return await self.resolve(ResourceKind.SCHEDULE, date)

    async def get_game_feed(self, game_pk: Union[int, str]) -> Tuple[Any, bool]:
        return await self.resolve(ResourceKind.GAME_FEED, game_pk)

    async def get_people_batch(self, person_ids: Sequence[Union[int, str]]) -> Tuple[Any, bool]:
        return await self.resolve(ResourceKind.PEOPLE, person_ids)

    async def _fetch(self, kind: ResourceKind, params: Any) -> Any:
        if kind is ResourceKind.SCHEDULE:
            return await self.client.fetch_schedule(params)
        if kind is ResourceKind.GAME_FEED:
            return await self.client.fetch_game_feed(params)
        return await self.client.fetch_people_batch(list(params))

    def _count(self, metric_name: str, kind: ResourceKind) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, resource=kind.value)

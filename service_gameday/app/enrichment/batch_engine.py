"""
Batched people enrichment with per-batch failure isolation.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Tuple, Union

from shared.errors import PartialBatchFailure, UpstreamError
from shared.logging import get_logger

from ..adapters.statsapi_client import MAX_PEOPLE_PER_REQUEST
from ..caching.resolver import normalize_person_ids
from ..domain.models import EnrichedPlayer
from ..domain.resources import ResourceKind
from .outcomes import settle_all

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..caching.resolver import CachedResourceResolver
    from shared.metrics import MetricsCollector


DEFAULT_BATCH_SIZE = 40


@dataclass
class PeopleBatchReport:
    """Merged people across batches plus the batches that failed."""

    people: List[Dict[str, Any]] = field(default_factory=list)
    batch_count: int = 0
    cached_batches: int = 0
    failures: List[PartialBatchFailure] = field(default_factory=list)
    envelope: Dict[str, Any] = field(default_factory=dict)

    @property
    def all_cached(self) -> bool:
        return self.batch_count > 0 and self.cached_batches == self.batch_count

    def to_payload(self) -> Dict[str, Any]:
        """Upstream-shaped body: the first successful envelope with merged people."""
        payload = dict(self.envelope)
        payload["people"] = list(self.people)
        return payload


class BatchEnrichmentEngine:
    """Resolve large person-ID sets as bounded batches through the resolver.

    IDs are deduplicated in first-seen order and split into consecutive
    batches. Batches are issued concurrently and joined in submission order.
    A failed batch only removes its own members from the result; the engine
    raises only when every batch fails.
    """

    def __init__(
        self,
        resolver: "CachedResourceResolver",
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        metrics: Optional["MetricsCollector"] = None,
    ):
        if not 1 <= batch_size <= MAX_PEOPLE_PER_REQUEST:
            raise ValueError(f"batch_size must be between 1 and {MAX_PEOPLE_PER_REQUEST}")
        self.resolver = resolver
        self.batch_size = batch_size
        self.metrics = metrics
        self.logger = get_logger("gameday.batch_engine")

    def partition(self, person_ids: Iterable[Union[int, str]]) -> List[List[str]]:
        """Split deduplicated IDs into consecutive groups of at most ``batch_size``."""
        ordered = normalize_person_ids(person_ids)
        return [ordered[i:i + self.batch_size] for i in range(0, len(ordered), self.batch_size)]

    async def fetch_people(self, person_ids: Iterable[Union[int, str]]) -> PeopleBatchReport:
        """Resolve every batch and merge the raw people records."""
        batches = self.partition(person_ids)
        report = PeopleBatchReport(batch_count=len(batches))
        if not batches:
            return report

        outcomes = await settle_all(self._resolve_batch(batch) for batch in batches)

        for index, (batch, outcome) in enumerate(zip(batches, outcomes)):
            if not outcome.ok:
                if not isinstance(outcome.error, Exception):
                    raise outcome.error
                failure = PartialBatchFailure(index, batch, outcome.error)
                self.logger.warning(
                    "People batch failed",
                    batch_index=index,
                    batch_size=len(batch),
                    error=str(outcome.error),
                )
                self._count("failure")
                report.failures.append(failure)
                continue

            payload, from_cache = outcome.value
            self._count("success")
            if from_cache:
                report.cached_batches += 1
            if not report.envelope:
                report.envelope = {key: value for key, value in payload.items() if key != "people"}
            report.people.extend(self._order_batch(batch, payload))

        if len(report.failures) == len(batches):
            self.logger.error("All people batches failed", batch_count=len(batches))
            raise report.failures[0].cause

        if report.failures:
            self.logger.info(
                "People enrichment completed with missing batches",
                batch_count=len(batches),
                failed_batches=[failure.batch_index for failure in report.failures],
                people=len(report.people),
            )
        return report

    async def enrich_people(self, person_ids: Iterable[Union[int, str]]) -> List[EnrichedPlayer]:
        """Enriched players for ``person_ids`` in first-seen input order."""
        report = await self.fetch_people(person_ids)
        return [EnrichedPlayer.from_person(person) for person in report.people]

    async def _resolve_batch(self, batch: List[str]) -> Tuple[Dict[str, Any], bool]:
        """Resolve one batch, rejecting bodies that do not carry a list of person records."""
        payload, from_cache = await self.resolver.get_people_batch(batch)
        people = (payload.get("people") or []) if isinstance(payload, dict) else None
        if not isinstance(people, list) or not all(isinstance(person, dict) for person in people):
            raise UpstreamError(ResourceKind.PEOPLE.value, None, "People response is not an object with a list of people")
        return payload, from_cache

    @staticmethod
    def _order_batch(batch: List[str], payload: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Order a batch's people by their position in the requested IDs."""
        positions = {person_id: position for position, person_id in enumerate(batch)}
        people = payload.get("people") or []
        return sorted(people, key=lambda person: positions.get(str(person.get("id")), len(batch)))

    def _count(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("people_batches_total", outcome=outcome)

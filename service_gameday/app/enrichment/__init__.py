"""
Enrichment pipeline: batched people lookups and per-game aggregation.
"""

from .aggregator import AggregationResult, GameAggregator, extract_roster_ids
from .batch_engine import BatchEnrichmentEngine, PeopleBatchReport
from .outcomes import Outcome, settle_all

__all__ = [
    "AggregationResult",
    "GameAggregator",
    "extract_roster_ids",
    "BatchEnrichmentEngine",
    "PeopleBatchReport",
    "Outcome",
    "settle_all",
]

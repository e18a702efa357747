"""
Per-game aggregation: live feed, roster enrichment and nationality tallies.
"""

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from shared.errors import PerGameFailure
from shared.logging import get_logger

from ..domain.models import Game, GameAggregate, GamePk, nested_get
from ..domain.nationality import filter_by_nationality, normalize_code, tally_nationalities
from .outcomes import settle_all

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..caching.resolver import CachedResourceResolver
    from .batch_engine import BatchEnrichmentEngine
    from shared.metrics import MetricsCollector


# Boxscore player keys look like "ID660271"
_ID_PREFIX = re.compile(r"^\D+")


def extract_roster_ids(feed: Dict[str, Any]) -> List[str]:
    """Person IDs from both boxscore rosters, away team first."""
    person_ids: List[str] = []
    for side in ("away", "home"):
        players = nested_get(feed, "liveData", "boxscore", "teams", side, "players") or {}
        for key in players:
            person_id = _ID_PREFIX.sub("", str(key))
            if person_id:
                person_ids.append(person_id)
    return person_ids


@dataclass
class AggregationResult:
    """Enriched games keyed by gamePk, plus the games whose task failed."""

    games: Dict[GamePk, GameAggregate] = field(default_factory=dict)
    failures: Dict[GamePk, PerGameFailure] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "games": {str(game_pk): aggregate.to_dict() for game_pk, aggregate in self.games.items()},
            "failed": {str(game_pk): failure.message for game_pk, failure in self.failures.items()},
        }


class GameAggregator:
    """Fan out one enrichment task per game and settle them all."""

    def __init__(
        self,
        resolver: "CachedResourceResolver",
        engine: "BatchEnrichmentEngine",
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.resolver = resolver
        self.engine = engine
        self.metrics = metrics
        self.logger = get_logger("gameday.aggregator")

    async def aggregate(self, games: Sequence[Game], nationality: Optional[str] = None) -> AggregationResult:
        """Enrich every game concurrently; one game's failure never affects another."""
        code = normalize_code(nationality) if nationality else None
        outcomes = await settle_all(self._aggregate_game(game, code) for game in games)

        result = AggregationResult()
        for game, outcome in zip(games, outcomes):
            if outcome.ok:
                result.games[game.game_pk] = outcome.value
                self._count("success")
                continue

            if not isinstance(outcome.error, Exception):
                raise outcome.error
            failure = PerGameFailure(game.game_pk, outcome.error)
            self.logger.warning("Game enrichment failed", game_pk=game.game_pk, error=str(outcome.error))
            self._count("failure")
            result.failures[game.game_pk] = failure

        self.logger.info(
            "Aggregation completed",
            games=len(games),
            enriched=len(result.games),
            failed=len(result.failures),
            nationality=code,
        )
        return result

    async def _aggregate_game(self, game: Game, code: Optional[str]) -> GameAggregate:
        feed, _ = await self.resolver.get_game_feed(game.game_pk)

        person_ids = extract_roster_ids(feed)
        if not person_ids:
            self.logger.warning("No player ids found in boxscore", game_pk=game.game_pk)
        players = await self.engine.enrich_people(person_ids)

        return GameAggregate(
            game_pk=game.game_pk,
            players=players,
            nationalities=tally_nationalities(players),
            linescore=nested_get(feed, "liveData", "linescore") or game.linescore,
            game_state=nested_get(feed, "gameData", "status", "detailedState") or game.status,
            nationality_filter=code,
            matching_players=filter_by_nationality(players, code) if code else None,
        )

    def _count(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("game_aggregations_total", outcome=outcome)

"""
Gameday gateway service: caching proxy and per-game enrichment over the MLB Stats API.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from shared.base_service import BaseService
from shared.errors import ValidationError

from .adapters.statsapi_client import StatsApiClient
from .caching.resolver import CachedResourceResolver
from .caching.ttl_cache import TTLCache
from .domain.models import games_from_schedule
from .domain.nationality import NATIONALITY_DISPLAY_NAMES, is_known_code, normalize_code
from .enrichment.aggregator import GameAggregator
from .enrichment.batch_engine import BatchEnrichmentEngine


class GamedayService(BaseService):
    """Gameday gateway service implementation."""

    def __init__(
        self,
        statsapi_client: Optional[StatsApiClient] = None,
        cache: Optional[TTLCache] = None,
        **config_overrides: Any,
    ):
        super().__init__("gameday", 8000, **config_overrides)
        self.statsapi_client = statsapi_client if statsapi_client is not None else StatsApiClient(
            self.config.statsapi_base_url,
            sport_id=self.config.sport_id,
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics,
        )
        # One cache per process, shared by every request
        self.cache = cache if cache is not None else TTLCache(default_ttl=self.config.cache_ttl_seconds)
        self.resolver = CachedResourceResolver(self.cache, self.statsapi_client, metrics=self.metrics)
        self.batch_engine = BatchEnrichmentEngine(
            self.resolver,
            batch_size=self.config.people_batch_size,
            metrics=self.metrics,
        )
        self.aggregator = GameAggregator(self.resolver, self.batch_engine, metrics=self.metrics)

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.statsapi_client.close()

        self._setup_gameday_routes()
        self._mount_static_assets()

        # Expose service instance via app state for introspection/testing
        self.app.state.gameday_service = self

    def _setup_gameday_routes(self):
        """Set up the proxy and aggregation routes."""

        @self.app.get("/api/schedule")
        async def get_schedule(date: Optional[str] = Query(None)):
            """Schedule for a date, passed through from the Stats API."""
            schedule_date = self._require_date(date)
            payload, from_cache = await self.resolver.get_schedule(schedule_date)
            return self._proxy_response(payload, from_cache)

        @self.app.get("/api/gamefeed/{game_pk}")
        async def get_game_feed(game_pk: str):
            """Live feed for a game, passed through from the Stats API."""
            payload, from_cache = await self.resolver.get_game_feed(game_pk)
            return self._proxy_response(payload, from_cache)

        @self.app.get("/api/people")
        async def get_people(person_ids: Optional[str] = Query(None, alias="personIds")):
            """People by comma-separated ids, fetched in batches and merged."""
            ids = [value.strip() for value in (person_ids or "").split(",") if value.strip()]
            if not ids:
                raise ValidationError("The personIds query parameter is required")

            report = await self.batch_engine.fetch_people(ids)
            headers = {
                "X-People-Batches": str(report.batch_count),
                "X-People-Failed-Batches": str(len(report.failures)),
            }
            return self._proxy_response(report.to_payload(), report.all_cached, headers)

        @self.app.get("/api/games")
        async def get_games(
            date: Optional[str] = Query(None),
            nationality: Optional[str] = Query(None),
        ):
            """Games for a date with enriched rosters and nationality tallies."""
            schedule_date = self._require_date(date)
            code = self._optional_nationality(nationality)

            payload, from_cache = await self.resolver.get_schedule(schedule_date)
            games = games_from_schedule(payload)
            result = await self.aggregator.aggregate(games, code)

            cards: List[Dict[str, Any]] = []
            for game in games:
                card = game.to_card()
                aggregate = result.games.get(game.game_pk)
                if aggregate is not None:
                    card.update(aggregate.to_dict())
                    card["enriched"] = True
                else:
                    card["enriched"] = False
                    failure = result.failures.get(game.game_pk)
                    card["error"] = failure.message if failure else None
                cards.append(card)

            return {
                "date": schedule_date,
                "nationality": code,
                "schedule_cached": from_cache,
                "total_games": len(games),
                "enriched_games": len(result.games),
                "failed_games": [str(game_pk) for game_pk in result.failures],
                "games": cards,
            }

        @self.app.get("/api/cache/stats")
        async def get_cache_stats():
            """Cache statistics."""
            return self.cache.stats()

    def _mount_static_assets(self):
        """Serve the browser client from the configured directory, if present."""
        static_dir = self.config.static_dir
        if not static_dir:
            return

        path = Path(static_dir)
        if not path.is_dir():
            self.logger.info("Static client directory not found, skipping mount", path=str(path))
            return

        self.app.mount("/", StaticFiles(directory=str(path), html=True), name="client")

    async def _check_dependencies(self) -> Dict[str, str]:
        # The Stats API is not probed; health must not spend upstream calls
        return {"cache": "ok"}

    @staticmethod
    def _require_date(value: Optional[str]) -> str:
        if not value:
            raise ValidationError("The date query parameter is required")
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date().isoformat()
        except ValueError:
            raise ValidationError(
                "The date query parameter must be an ISO date (YYYY-MM-DD)",
                details={"date": value},
            ) from None

    @staticmethod
    def _optional_nationality(value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not is_known_code(value):
            raise ValidationError(
                f"Unknown nationality code: {value}",
                details={"supported": sorted(NATIONALITY_DISPLAY_NAMES)},
            )
        return normalize_code(value)

    @staticmethod
    def _proxy_response(
        payload: Any,
        from_cache: bool,
        headers: Optional[Dict[str, str]] = None,
    ) -> JSONResponse:
        response_headers = {"X-Cache": "HIT" if from_cache else "MISS"}
        response_headers.update(headers or {})
        return JSONResponse(content=payload, headers=response_headers)


def create_app(**kwargs: Any) -> FastAPI:
    """Create FastAPI application."""
    service = GamedayService(**kwargs)
    return service.app


if __name__ == "__main__":
    service = GamedayService()
    service.run()

"""
MLB Stats API client for the Gameday gateway.
"""

from contextlib import nullcontext
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Union

import httpx

from shared.errors import UpstreamError
from shared.logging import get_logger

from ..domain.resources import ResourceKind

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


MAX_PEOPLE_PER_REQUEST = 40
SCHEDULE_HYDRATE = "team,venue,probablePitcher,linescore"


class StatsApiClient:
    """Thin async client for the schedule, live feed and people endpoints.

    Every call is a single GET. Non-2xx responses and transport failures
    raise ``UpstreamError`` immediately; there are no retries here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        sport_id: int = 1,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.sport_id = sport_id
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("gameday.statsapi_client")
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get the pooled HTTP client, creating it on first use."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def current_season() -> int:
        """Season used for the people stats hydration, evaluated per call."""
        return datetime.now().year

    async def fetch_schedule(self, date: str) -> Dict[str, Any]:
        """Fetch the schedule for one calendar date."""
        params = {"sportId": self.sport_id, "date": date, "hydrate": SCHEDULE_HYDRATE}
        return await self._get(ResourceKind.SCHEDULE, "/v1/schedule", params)

    async def fetch_game_feed(self, game_pk: Union[int, str]) -> Dict[str, Any]:
        """Fetch the live feed (boxscore, linescore, status) of a game."""
        return await self._get(ResourceKind.GAME_FEED, f"/v1.1/game/{game_pk}/feed/live")

    async def fetch_people_batch(self, person_ids: Sequence[Union[int, str]]) -> Dict[str, Any]:
        """Fetch up to 40 people in a single request."""
        if not person_ids:
            raise ValueError("person_ids must not be empty")
        if len(person_ids) > MAX_PEOPLE_PER_REQUEST:
            raise ValueError(f"At most {MAX_PEOPLE_PER_REQUEST} person ids per request, got {len(person_ids)}")

        params = {
            "personIds": ",".join(str(person_id) for person_id in person_ids),
            "hydrate": f"currentTeam,stats(type=season,season={self.current_season()}),draftYear",
        }
        return await self._get(ResourceKind.PEOPLE, "/v1/people", params)

    async def _get(
        self,
        resource: ResourceKind,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Execute one GET and map failures to ``UpstreamError``."""
        timer = (
            self.metrics.time_operation("upstream_request_duration_seconds", resource=resource.value)
            if self.metrics
            else nullcontext()
        )
        outcome = "error"
        try:
            with timer:
                data = await self._request(resource, path, params)
            outcome = "success"
            self.logger.debug("Stats API response received", resource=resource.value, path=path)
            return data
        finally:
            if self.metrics:
                self.metrics.increment_counter("upstream_requests_total", resource=resource.value, outcome=outcome)

    async def _request(
        self,
        resource: ResourceKind,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send the GET and decode the body, raising ``UpstreamError`` on any failure."""
        try:
            response = await self._get_client().get(path, params=params)
        except httpx.HTTPError as exc:
            self.logger.error(
                "Stats API request failed",
                resource=resource.value,
                path=path,
                error=str(exc) or exc.__class__.__name__,
            )
            raise UpstreamError(resource.value, None, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            self.logger.error(
                "Stats API returned an error status",
                resource=resource.value,
                path=path,
                status_code=response.status_code,
                response=response.text[:500],
            )
            raise UpstreamError(
                resource.value,
                response.status_code,
                f"Unexpected status {response.status_code}",
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(resource.value, response.status_code, "Response body is not valid JSON") from exc

        if not isinstance(data, dict):
            self.logger.error(
                "Stats API returned a non-object body",
                resource=resource.value,
                path=path,
                body_type=type(data).__name__,
            )
            raise UpstreamError(resource.value, response.status_code, "Response body is not a JSON object")

        return data

"""
Mock MLB Stats API server providing schedule, live feed and people endpoints.
"""

from collections import Counter
from datetime import date as date_type
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import FastAPI, HTTPException, Query

from shared.logging import get_logger
from shared.test_helpers import COPYRIGHT, create_feed, create_game, create_person, create_schedule


TEAMS = [
    ("New York Yankees", "Yankee Stadium"),
    ("Boston Red Sox", "Fenway Park"),
    ("Los Angeles Dodgers", "Dodger Stadium"),
    ("San Diego Padres", "Petco Park"),
    ("Seattle Mariners", "T-Mobile Park"),
    ("Houston Astros", "Minute Maid Park"),
]

BIRTH_COUNTRIES = [
    "USA",
    "Dominican Republic",
    "Venezuela",
    "USA",
    "Cuba",
    "Japan",
    "Puerto Rico",
    "Mexico",
    "USA",
    "Lithuania",
]

POSITIONS = ["P", "C", "1B", "2B", "3B", "SS", "LF", "CF", "RF", "DH"]

GAMES_PER_DATE = len(TEAMS) // 2
ROSTER_SIZE = 26


class MockStatsApiServer:
    """Mock Stats API implementation with deterministic sample data.

    Every valid date has the same number of games. Game ids are derived from
    the date so a feed can be served for any game listed in a schedule, and
    people are synthesized from their id.
    """

    def __init__(self, port: int = 8090, failing_game_pks: Optional[Iterable[int]] = None):
        self.port = port
        self.logger = get_logger("mock.statsapi")
        self.app = FastAPI(title="Mock Stats API", version="1.0.0")

        self.failing_game_pks: Set[int] = set(failing_game_pks or [])
        self.request_counts: Counter = Counter()
        self.people_requests: List[List[str]] = []

        self._setup_routes()

    @staticmethod
    def game_pks_for(day: date_type) -> List[int]:
        base = int(day.strftime("%y%m%d")) * 10
        return [base + index for index in range(GAMES_PER_DATE)]

    @staticmethod
    def roster_for(game_pk: int, side: str) -> List[int]:
        offset = 0 if side == "away" else ROSTER_SIZE
        start = 600000 + (game_pk % 10) * 100 + offset
        return list(range(start, start + ROSTER_SIZE))

    def build_schedule(self, day: date_type) -> Dict[str, Any]:
        games = []
        for index, game_pk in enumerate(self.game_pks_for(day)):
            home_team, venue = TEAMS[index * 2]
            away_team, _ = TEAMS[index * 2 + 1]
            games.append(
                create_game(
                    game_pk,
                    home_team=home_team,
                    away_team=away_team,
                    venue=venue,
                    game_date=f"{day.isoformat()}T23:05:00Z",
                    probable_pitchers={
                        "away": self.roster_for(game_pk, "away")[0],
                        "home": self.roster_for(game_pk, "home")[0],
                    },
                )
            )
        return create_schedule(day.isoformat(), games)

    def build_feed(self, game_pk: int) -> Dict[str, Any]:
        return create_feed(game_pk, self.roster_for(game_pk, "away"), self.roster_for(game_pk, "home"))

    @staticmethod
    def build_person(person_id: int) -> Dict[str, Any]:
        return create_person(
            person_id,
            birth_country=BIRTH_COUNTRIES[person_id % len(BIRTH_COUNTRIES)],
            position=POSITIONS[person_id % len(POSITIONS)],
        )

    def reset(self) -> None:
        self.request_counts.clear()
        self.people_requests.clear()

    def _setup_routes(self):
        """Set up mock API routes."""

        @self.app.get("/api/v1/schedule")
        async def schedule(
            date: str = Query(...),
            sportId: int = Query(1),
            hydrate: Optional[str] = Query(None),
        ):
            self.request_counts["schedule"] += 1
            try:
                day = date_type.fromisoformat(date)
            except ValueError:
                raise HTTPException(status_code=400, detail=f"Invalid date: {date}")

            self.logger.info("Schedule requested", date=date, sport_id=sportId)
            return self.build_schedule(day)

        @self.app.get("/api/v1.1/game/{game_pk}/feed/live")
        async def game_feed(game_pk: int):
            self.request_counts["gamefeed"] += 1
            if game_pk in self.failing_game_pks:
                raise HTTPException(status_code=503, detail="Feed temporarily unavailable")

            self.logger.info("Game feed requested", game_pk=game_pk)
            return self.build_feed(game_pk)

        @self.app.get("/api/v1/people")
        async def people(
            personIds: str = Query(...),
            hydrate: Optional[str] = Query(None),
        ):
            self.request_counts["people"] += 1
            ids = [value.strip() for value in personIds.split(",") if value.strip()]
            self.people_requests.append(ids)
            if not all(value.isdigit() for value in ids):
                raise HTTPException(status_code=400, detail="personIds must be numeric")

            self.logger.info("People requested", count=len(ids))
            return {"copyright": COPYRIGHT, "people": [self.build_person(int(value)) for value in ids]}

        @self.app.get("/mock/stats")
        async def stats():
            """Request counts per resource, for local debugging."""
            return {
                "requests": dict(self.request_counts),
                "people_batch_sizes": [len(ids) for ids in self.people_requests],
            }

        @self.app.post("/mock/reset")
        async def reset():
            self.reset()
            return {"message": "Request counters reset"}


def create_app():
    """Create mock Stats API application."""
    server = MockStatsApiServer()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)

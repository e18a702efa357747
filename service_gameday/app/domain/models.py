"""
Domain models for schedule games and enriched players.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .nationality import NationalityTally, nationality_code


GamePk = Union[int, str]

HEADSHOT_URL_TEMPLATE = (
    "https://img.mlbstatic.com/mlb-photos/image/upload/"
    "d_people:generic_headshot.png/w_80,h_80,c_fill,g_face,q_auto:best/"
    "v1/people/{person_id}/headshot/67/current"
)

# Placeholders applied when rendering game cards, never inside the pipeline
DEFAULT_HOME_TEAM = "Home Team"
DEFAULT_AWAY_TEAM = "Away Team"
DEFAULT_VENUE = "Unknown Venue"
DEFAULT_SERIES_DESCRIPTION = "Regular Season"
DEFAULT_GAME_STATE = "Scheduled"
DEFAULT_POSITION = "N/A"


def nested_get(payload: Optional[Dict[str, Any]], *path: str) -> Any:
    """Walk nested dictionaries, returning None as soon as a level is missing."""
    current: Any = payload
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


@dataclass(frozen=True)
class EnrichedPlayer:
    """Biographical view of a person returned by the people endpoint."""

    person_id: Union[int, str]
    full_name: str
    birth_country: Optional[str] = None
    position: Optional[str] = None

    @classmethod
    def from_person(cls, person: Dict[str, Any]) -> "EnrichedPlayer":
        return cls(
            person_id=person.get("id"),
            full_name=person.get("fullName") or "",
            birth_country=person.get("birthCountry"),
            position=nested_get(person, "primaryPosition", "abbreviation"),
        )

    @property
    def nationality_code(self) -> Optional[str]:
        return nationality_code(self.birth_country)

    @property
    def headshot_url(self) -> str:
        return HEADSHOT_URL_TEMPLATE.format(person_id=self.person_id)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the player to a JSON-friendly dictionary."""
        return {
            "id": self.person_id,
            "full_name": self.full_name,
            "birth_country": self.birth_country,
            "nationality": self.nationality_code,
            "position": self.position or DEFAULT_POSITION,
            "headshot_url": self.headshot_url,
        }


@dataclass(frozen=True)
class Game:
    """A game entry from the schedule response. Read-only once fetched."""

    game_pk: GamePk
    home_team: Optional[str] = None
    away_team: Optional[str] = None
    venue: Optional[str] = None
    game_date: Optional[str] = None
    status: Optional[str] = None
    abstract_state: Optional[str] = None
    series_description: Optional[str] = None
    probable_pitchers: Dict[str, int] = field(default_factory=dict)
    linescore: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, game: Dict[str, Any]) -> "Game":
        probable_pitchers = {}
        for side in ("away", "home"):
            pitcher_id = nested_get(game, "teams", side, "probablePitcher", "id")
            if pitcher_id is not None:
                probable_pitchers[side] = pitcher_id

        return cls(
            game_pk=game["gamePk"],
            home_team=nested_get(game, "teams", "home", "team", "name"),
            away_team=nested_get(game, "teams", "away", "team", "name"),
            venue=nested_get(game, "venue", "name"),
            game_date=game.get("gameDate"),
            status=nested_get(game, "status", "detailedState"),
            abstract_state=nested_get(game, "status", "abstractGameState"),
            series_description=game.get("seriesDescription"),
            probable_pitchers=probable_pitchers,
            linescore=game.get("linescore"),
        )

    @property
    def is_live(self) -> bool:
        return self.abstract_state == "Live"

    def to_card(self) -> Dict[str, Any]:
        """Render the game header with placeholders for missing fields."""
        return {
            "game_pk": self.game_pk,
            "home_team": self.home_team or DEFAULT_HOME_TEAM,
            "away_team": self.away_team or DEFAULT_AWAY_TEAM,
            "venue": self.venue or DEFAULT_VENUE,
            "game_date": self.game_date,
            "status": self.status or DEFAULT_GAME_STATE,
            "is_live": self.is_live,
            "series_description": self.series_description or DEFAULT_SERIES_DESCRIPTION,
            "probable_pitchers": dict(self.probable_pitchers),
        }


def games_from_schedule(payload: Dict[str, Any]) -> List[Game]:
    """Flatten every date block of a schedule response into games."""
    games: List[Game] = []
    for date_block in payload.get("dates") or []:
        for game in date_block.get("games") or []:
            games.append(Game.from_payload(game))
    return games


@dataclass
class GameAggregate:
    """Enrichment result for one game."""

    game_pk: GamePk
    players: List[EnrichedPlayer]
    nationalities: NationalityTally
    linescore: Optional[Dict[str, Any]] = None
    game_state: Optional[str] = None
    nationality_filter: Optional[str] = None
    matching_players: Optional[List[EnrichedPlayer]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "game_pk": self.game_pk,
            "game_state": self.game_state,
            "linescore": self.linescore,
            "players": [player.to_dict() for player in self.players],
            "nationalities": self.nationalities.to_dict(highlighted=self.nationality_filter),
        }
        if self.nationality_filter is not None:
            payload["nationality_filter"] = self.nationality_filter
            payload["matching_players"] = [player.to_dict() for player in self.matching_players or []]
        return payload

"""
Birth-country to nationality-code mapping and per-game tallies.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .models import EnrichedPlayer


logger = get_logger("gameday.nationality")

# Stats API birthCountry values -> three-letter nationality codes
COUNTRY_TO_NATIONALITY_CODE: Dict[str, str] = {
    "USA": "USA",
    "United States": "USA",
    "Dominican Republic": "DOM",
    "Venezuela": "VEN",
    "Puerto Rico": "PUR",
    "Cuba": "CUB",
    "Mexico": "MEX",
    "Japan": "JPN",
    "Korea": "KOR",
    "Korea, Republic of": "KOR",
    "South Korea": "KOR",
    "Canada": "CAN",
    "Panama": "PAN",
    "Colombia": "COL",
    "Curacao": "CUR",
    "Aruba": "ARU",
    "Netherlands": "NED",
    "Australia": "AUS",
    "Taiwan": "TWN",
    "Nicaragua": "NIC",
}

NATIONALITY_DISPLAY_NAMES: Dict[str, str] = {
    "USA": "United States",
    "DOM": "Dominican Republic",
    "VEN": "Venezuela",
    "PUR": "Puerto Rico",
    "CUB": "Cuba",
    "MEX": "Mexico",
    "JPN": "Japan",
    "KOR": "Korea",
    "CAN": "Canada",
    "PAN": "Panama",
    "COL": "Colombia",
    "CUR": "Curacao",
    "ARU": "Aruba",
    "NED": "Netherlands",
    "AUS": "Australia",
    "TWN": "Taiwan",
    "NIC": "Nicaragua",
}


def normalize_code(code: str) -> str:
    return code.strip().upper()


def is_known_code(code: str) -> bool:
    """Whether ``code`` is produced by the birth-country table."""
    return normalize_code(code) in NATIONALITY_DISPLAY_NAMES


def nationality_code(birth_country: Optional[str]) -> Optional[str]:
    """Map an upstream birth country to its code, or None when unmapped."""
    if not birth_country:
        return None
    return COUNTRY_TO_NATIONALITY_CODE.get(birth_country.strip())


def display_name(code: str) -> str:
    """Human-readable name for a code; unknown codes are returned as-is."""
    return NATIONALITY_DISPLAY_NAMES.get(code, code)


@dataclass
class NationalityTally:
    """Players per nationality for one game.

    ``counts`` is ordered by player count, descending. Players whose birth
    country is not in the lookup table are counted under ``unmapped`` and
    players without a birth country under ``unknown``.
    """

    counts: Dict[str, int] = field(default_factory=dict)
    unmapped: Dict[str, int] = field(default_factory=dict)
    unknown: int = 0

    @property
    def unmapped_total(self) -> int:
        return sum(self.unmapped.values())

    def to_dict(self, highlighted: Optional[str] = None) -> Dict[str, Any]:
        return {
            "counts": [
                {
                    "code": code,
                    "name": display_name(code),
                    "count": count,
                    "highlighted": code == highlighted,
                }
                for code, count in self.counts.items()
            ],
            "unmapped": dict(self.unmapped),
            "unmapped_total": self.unmapped_total,
            "unknown": self.unknown,
        }


def tally_nationalities(players: Iterable["EnrichedPlayer"]) -> NationalityTally:
    """Count players per nationality code."""
    counts: Counter = Counter()
    unmapped: Counter = Counter()
    unknown = 0

    for player in players:
        if not player.birth_country:
            unknown += 1
            continue
        code = nationality_code(player.birth_country)
        if code is None:
            logger.warning(
                "Unmapped birth country",
                birth_country=player.birth_country,
                person_id=player.person_id,
            )
            unmapped[player.birth_country] += 1
        else:
            counts[code] += 1

    # Counter.most_common keeps first-seen order among equal counts
    return NationalityTally(
        counts=dict(counts.most_common()),
        unmapped=dict(unmapped),
        unknown=unknown,
    )


def filter_by_nationality(players: Iterable["EnrichedPlayer"], code: str) -> List["EnrichedPlayer"]:
    """Players whose birth country maps to ``code``. Unmapped countries never match."""
    wanted = normalize_code(code)
    return [player for player in players if nationality_code(player.birth_country) == wanted]

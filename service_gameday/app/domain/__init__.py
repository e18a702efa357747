"""
Domain helpers for the Gameday service.

Exports the data model shared by the pipeline and the HTTP layer.
"""

from .models import EnrichedPlayer, Game, GameAggregate, games_from_schedule
from .nationality import NationalityTally, tally_nationalities, filter_by_nationality
from .resources import ResourceKind

__all__ = [
    "EnrichedPlayer",
    "Game",
    "GameAggregate",
    "games_from_schedule",
    "NationalityTally",
    "tally_nationalities",
    "filter_by_nationality",
    "ResourceKind",
]

"""
Cacheable Stats API resource kinds.
"""

from enum import Enum


class ResourceKind(str, Enum):
    """The three upstream query shapes the gateway caches.

    The value doubles as the cache key prefix and the metrics label.
    """

    SCHEDULE = "schedule"
    GAME_FEED = "gamefeed"
    PEOPLE = "people"

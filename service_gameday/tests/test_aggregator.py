"""
Unit tests for per-game aggregation.
"""

import pytest

from service_gameday.app.caching.resolver import CachedResourceResolver
from service_gameday.app.caching.ttl_cache import TTLCache
from service_gameday.app.domain.models import games_from_schedule
from service_gameday.app.enrichment.aggregator import GameAggregator, extract_roster_ids
from service_gameday.app.enrichment.batch_engine import BatchEnrichmentEngine
from shared.errors import PerGameFailure, UpstreamError
from shared.metrics import MetricsCollector
from shared.test_helpers import (
    FakeClock,
    FakeStatsApiClient,
    create_feed,
    create_game,
    create_person,
    create_schedule,
)


DATE = "2024-05-20"


@pytest.fixture
def client():
    people = (
        [create_person(i, birth_country="Dominican Republic") for i in range(1, 4)]
        + [create_person(i, birth_country="Japan") for i in range(4, 6)]
        + [create_person(6, birth_country="USA")]
        + [create_person(7, birth_country="Lithuania")]
        + [create_person(8, birth_country=None)]
        + [create_person(i) for i in range(100, 200)]
    )
    return FakeStatsApiClient(
        schedules={
            DATE: create_schedule(
                DATE,
                [create_game(1001), create_game(1002), create_game(1003, detailed_state="Final")],
            )
        },
        feeds={
            1001: create_feed(1001, [1, 2, 4], [3, 5, 6]),
            1002: create_feed(1002, [100, 101], [102]),
            1003: create_feed(1003, [7, 8], [1], detailed_state="Final"),
        },
        people=people,
    )


@pytest.fixture
def metrics():
    return MetricsCollector("gameday")


@pytest.fixture
def aggregator(client, metrics):
    resolver = CachedResourceResolver(TTLCache(clock=FakeClock()), client, metrics=metrics)
    engine = BatchEnrichmentEngine(resolver, metrics=metrics)
    return GameAggregator(resolver, engine, metrics=metrics)


@pytest.fixture
def games(client):
    return games_from_schedule(client.schedules[DATE])


class TestExtractRosterIds:
    """Roster extraction from the live feed boxscore."""

    def test_away_then_home_with_prefix_stripped(self):
        feed = create_feed(1001, [660271, 592450], [545361])

        assert extract_roster_ids(feed) == ["660271", "592450", "545361"]

    def test_missing_boxscore_yields_no_ids(self):
        assert extract_roster_ids({"gamePk": 1001, "liveData": {}}) == []
        assert extract_roster_ids({}) == []


class TestGameAggregator:
    """Test cases for GameAggregator."""

    @pytest.mark.asyncio
    async def test_aggregates_every_game(self, aggregator, games):
        result = await aggregator.aggregate(games)

        assert set(result.games) == {1001, 1002, 1003}
        assert result.failures == {}

        first = result.games[1001]
        assert [player.person_id for player in first.players] == [1, 2, 4, 3, 5, 6]
        assert first.nationalities.counts == {"DOM": 3, "JPN": 2, "USA": 1}
        assert first.game_state == "In Progress"
        assert first.linescore["currentInning"] == 5

    @pytest.mark.asyncio
    async def test_failing_game_is_isolated(self, aggregator, games, client, metrics):
        client.fail_feed(1002)

        result = await aggregator.aggregate(games)

        assert set(result.games) == {1001, 1003}
        assert isinstance(result.failures[1002], PerGameFailure)
        assert isinstance(result.failures[1002].cause, UpstreamError)
        assert result.games[1001].nationalities.counts["DOM"] == 3
        assert metrics.sample_value("game_aggregations_total", outcome="failure") == 1
        assert metrics.sample_value("game_aggregations_total", outcome="success") == 2

    @pytest.mark.asyncio
    async def test_game_fails_when_all_people_batches_fail(self, aggregator, games, client):
        client.fail_people("100")

        result = await aggregator.aggregate(games)

        assert set(result.failures) == {1002}
        assert set(result.games) == {1001, 1003}

    @pytest.mark.asyncio
    async def test_unmapped_and_unknown_countries_are_counted_separately(self, aggregator, games):
        result = await aggregator.aggregate(games)

        tally = result.games[1003].nationalities
        assert tally.counts == {"DOM": 1}
        assert tally.unmapped == {"Lithuania": 1}
        assert tally.unknown == 1

    @pytest.mark.asyncio
    async def test_nationality_filter(self, aggregator, games):
        result = await aggregator.aggregate(games, nationality="jpn")

        aggregate = result.games[1001]
        assert aggregate.nationality_filter == "JPN"
        assert [player.person_id for player in aggregate.matching_players] == [4, 5]

        payload = aggregate.to_dict()
        highlighted = [entry["code"] for entry in payload["nationalities"]["counts"] if entry["highlighted"]]
        assert highlighted == ["JPN"]
        assert result.games[1002].matching_players == []

    @pytest.mark.asyncio
    async def test_shared_players_reuse_cached_batches_on_repeat(self, aggregator, games, client):
        await aggregator.aggregate(games)
        calls = client.call_count("people")

        await aggregator.aggregate(games)

        assert client.call_count("people") == calls
        assert client.call_count("gamefeed") == 3

    @pytest.mark.asyncio
    async def test_empty_game_list(self, aggregator):
        result = await aggregator.aggregate([])

        assert result.games == {}
        assert result.to_dict() == {"games": {}, "failed": {}}

"""
Unit tests for the Gameday service routes.
"""

import pytest
from fastapi.testclient import TestClient

from service_gameday.app.caching.ttl_cache import TTLCache
from service_gameday.app.main import GamedayService, create_app
from shared.test_helpers import (
    FakeClock,
    FakeStatsApiClient,
    create_feed,
    create_game,
    create_person,
    create_schedule,
)


DATE = "2024-05-20"


class TestGamedayService:
    """Test cases for GamedayService."""

    @pytest.fixture
    def statsapi(self):
        """Fake Stats API with two games on one date."""
        return FakeStatsApiClient(
            schedules={DATE: create_schedule(DATE, [create_game(745000), create_game(745001, venue=None)])},
            feeds={
                745000: create_feed(745000, [1, 2], [3]),
                745001: create_feed(745001, [4], [5]),
            },
            people=[
                create_person(1, birth_country="Venezuela"),
                create_person(2, birth_country="USA"),
                create_person(3, birth_country="Venezuela"),
                create_person(4, birth_country="Japan"),
                create_person(5, birth_country="Cuba"),
            ]
            + [create_person(i) for i in range(100, 190)],
        )

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def service(self, statsapi, clock):
        """Create GamedayService instance."""
        return GamedayService(statsapi_client=statsapi, cache=TTLCache(clock=clock), static_dir=None)

    @pytest.fixture
    def client(self, service):
        """Create test client."""
        return TestClient(service.app)

    def test_injected_dependencies_are_kept_when_empty(self, statsapi):
        cache = TTLCache(clock=FakeClock())

        service = GamedayService(statsapi_client=statsapi, cache=cache, static_dir=None)

        assert len(cache) == 0
        assert service.cache is cache
        assert service.resolver.cache is cache
        assert service.statsapi_client is statsapi

    def test_health_endpoint(self, client, statsapi):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "gameday"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"cache": "ok"}
        assert statsapi.call_count("schedule") == 0

    def test_metrics_endpoint(self, client):
        client.get("/api/schedule", params={"date": DATE})

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "cache_misses_total" in response.text
        assert "http_requests_total" in response.text

    def test_schedule_requires_date(self, client, statsapi):
        response = client.get("/api/schedule")

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert statsapi.call_count("schedule") == 0

    def test_schedule_rejects_malformed_date(self, client, statsapi):
        response = client.get("/api/schedule", params={"date": "05/20/2024"})

        assert response.status_code == 400
        assert statsapi.call_count("schedule") == 0

    def test_schedule_passthrough_and_cache_header(self, client, statsapi):
        first = client.get("/api/schedule", params={"date": DATE})
        second = client.get("/api/schedule", params={"date": DATE})

        assert first.status_code == 200
        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert first.json() == statsapi.schedules[DATE]
        assert second.json() == first.json()
        assert statsapi.call_count("schedule") == 1
        assert "X-Request-ID" in first.headers

    def test_schedule_refetched_after_ttl(self, client, statsapi, clock):
        client.get("/api/schedule", params={"date": DATE})
        clock.advance(301)

        response = client.get("/api/schedule", params={"date": DATE})

        assert response.headers["X-Cache"] == "MISS"
        assert statsapi.call_count("schedule") == 2

    def test_upstream_failure_returns_500(self, client, statsapi):
        response = client.get("/api/schedule", params={"date": "2024-01-01"})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Could not fetch schedule data from the Stats API"
        assert "upstream_message" not in data.get("details", {})

    def test_game_feed_passthrough(self, client, statsapi):
        response = client.get("/api/gamefeed/745000")

        assert response.status_code == 200
        assert response.json()["gamePk"] == 745000

        statsapi.fail_feed(745001)
        failed = client.get("/api/gamefeed/745001")
        assert failed.status_code == 500
        assert failed.json()["error"] == "Could not fetch gamefeed data from the Stats API"

    def test_people_requires_ids(self, client, statsapi):
        assert client.get("/api/people").status_code == 400
        assert client.get("/api/people", params={"personIds": " , "}).status_code == 400
        assert statsapi.call_count("people") == 0

    def test_people_small_request_matches_upstream_shape(self, client, statsapi):
        response = client.get("/api/people", params={"personIds": "1,2,3"})

        assert response.status_code == 200
        data = response.json()
        assert [person["id"] for person in data["people"]] == [1, 2, 3]
        assert "copyright" in data
        assert response.headers["X-People-Batches"] == "1"
        assert response.headers["X-Cache"] == "MISS"

        again = client.get("/api/people", params={"personIds": "3,2,1"})
        assert again.headers["X-Cache"] == "HIT"
        assert statsapi.call_count("people") == 1

    def test_people_large_request_is_batched(self, client, statsapi):
        ids = ",".join(str(i) for i in range(100, 190))

        response = client.get("/api/people", params={"personIds": ids})

        assert response.status_code == 200
        assert len(response.json()["people"]) == 90
        assert response.headers["X-People-Batches"] == "3"
        assert [len(call) for call in statsapi.calls["people"]] == [40, 40, 10]

    def test_people_partial_failure(self, client, statsapi):
        statsapi.fail_people("150")
        ids = ",".join(str(i) for i in range(100, 190))

        response = client.get("/api/people", params={"personIds": ids})

        assert response.status_code == 200
        assert len(response.json()["people"]) == 50
        assert response.headers["X-People-Failed-Batches"] == "1"

    def test_people_all_batches_failing_returns_500(self, client, statsapi):
        statsapi.fail_people("1")

        response = client.get("/api/people", params={"personIds": "1,2"})

        assert response.status_code == 500
        assert response.json()["error"] == "Could not fetch people data from the Stats API"

    def test_games_aggregate(self, client):
        response = client.get("/api/games", params={"date": DATE})

        assert response.status_code == 200
        data = response.json()
        assert data["total_games"] == 2
        assert data["enriched_games"] == 2
        assert data["failed_games"] == []

        first, second = data["games"]
        assert first["enriched"] is True
        assert [player["id"] for player in first["players"]] == [1, 2, 3]
        assert first["nationalities"]["counts"][0] == {
            "code": "VEN",
            "name": "Venezuela",
            "count": 2,
            "highlighted": False,
        }
        assert second["venue"] == "Unknown Venue"

    def test_games_with_failed_game(self, client, statsapi):
        statsapi.fail_feed(745001)

        response = client.get("/api/games", params={"date": DATE})

        assert response.status_code == 200
        data = response.json()
        assert data["enriched_games"] == 1
        assert data["failed_games"] == ["745001"]
        assert data["games"][1]["enriched"] is False
        assert data["games"][1]["home_team"] == "New York Yankees"

    def test_games_nationality_filter(self, client):
        response = client.get("/api/games", params={"date": DATE, "nationality": "ven"})

        data = response.json()
        assert data["nationality"] == "VEN"
        assert [player["id"] for player in data["games"][0]["matching_players"]] == [1, 3]
        assert data["games"][1]["matching_players"] == []

    def test_games_unknown_nationality(self, client, statsapi):
        response = client.get("/api/games", params={"date": DATE, "nationality": "XXX"})

        assert response.status_code == 400
        assert "supported" in response.json()["details"]
        assert statsapi.call_count("schedule") == 0

    def test_cache_stats(self, client):
        client.get("/api/schedule", params={"date": DATE})
        client.get("/api/schedule", params={"date": DATE})

        stats = client.get("/api/cache/stats").json()

        assert stats["entries"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1

    def test_shutdown_closes_client(self, service, statsapi):
        with TestClient(service.app):
            pass

        assert statsapi.closed is True

    def test_static_client_mounted(self, statsapi, tmp_path):
        (tmp_path / "index.html").write_text("<html><body>Gameday</body></html>")
        app = create_app(statsapi_client=statsapi, static_dir=str(tmp_path))
        client = TestClient(app)

        response = client.get("/")

        assert response.status_code == 200
        assert "Gameday" in response.text
        assert client.get("/health").json()["service"] == "gameday"

    def test_missing_static_directory_is_skipped(self, statsapi, tmp_path):
        app = create_app(statsapi_client=statsapi, static_dir=str(tmp_path / "missing"))

        assert TestClient(app).get("/").status_code == 404

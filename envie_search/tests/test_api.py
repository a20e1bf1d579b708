from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import BATTLEKART_LAT, BATTLEKART_LNG
from envie_search.app import app, get_geocoder, get_repository, get_search_config
from envie_search.search.config import SearchConfig
from envie_search.search.errors import (
    INVALID_PARAMETERS_MESSAGE,
    MISSING_ENVIE_MESSAGE,
    NO_KEYWORDS_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    RepositoryError,
)

client = TestClient(app)

CONFIG = SearchConfig(default_lat=BATTLEKART_LAT, default_lng=BATTLEKART_LNG, production=False)


class FakeRepository:
    def __init__(self, venues=(), error: Exception | None = None):
        self.venues = list(venues)
        self.error = error

    def find_candidates(self, status, subscription=None):
        if self.error:
            raise self.error
        return [v for v in self.venues if subscription is None or v.subscription == subscription]

    def list_activities(self):
        return sorted({a for v in self.venues for a in v.activities})


@pytest.fixture
def use_repository():
    geocoder = MagicMock()
    geocoder.resolve.return_value = (BATTLEKART_LAT, BATTLEKART_LNG)

    def _install(repository, config=CONFIG):
        app.dependency_overrides[get_repository] = lambda: repository
        app.dependency_overrides[get_geocoder] = lambda: geocoder
        app.dependency_overrides[get_search_config] = lambda: config
        return geocoder

    yield _install
    app.dependency_overrides.clear()


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


class TestSearchEndpoint:
    def test_returns_ranked_results(self, use_repository, battlekart, m_beer):
        use_repository(FakeRepository([m_beer, battlekart]))

        resp = client.get("/recherche/envie", params={"envie": "faire du kart ce soir", "filter": "unknown"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert [r["name"] for r in body["results"]] == ["BattleKart Dijon", "M' Beer"]
        assert body["filter"] == "unknown"
        assert body["query"]["keywords"] == ["kart", "ce", "soir"]
        assert body["query"]["primaryKeywords"] == ["kart"]
        assert body["query"]["locationSource"] == "default"
        assert body["query"]["coordinates"] == {"lat": BATTLEKART_LAT, "lng": BATTLEKART_LNG}

    def test_uses_camel_case_keys(self, use_repository, battlekart):
        use_repository(FakeRepository([battlekart]))

        body = client.get("/recherche/envie", params={"envie": "kart"}).json()

        result = body["results"][0]
        for key in ("score", "thematicScore", "distance", "isOpen", "matchedTags", "primaryImage", "nextEvent"):
            assert key in result
        assert set(body["pagination"]) == {"currentPage", "totalPages", "totalResults", "hasMore", "limit"}

    def test_pagination_params(self, use_repository, battlekart, m_beer):
        use_repository(FakeRepository([battlekart, m_beer]))

        body = client.get(
            "/recherche/envie", params={"envie": "sortir boire ce soir", "limit": 1, "page": 2},
        ).json()

        assert len(body["results"]) == 1
        assert body["pagination"]["currentPage"] == 2
        assert body["pagination"]["totalPages"] == 2
        assert body["pagination"]["hasMore"] is False

    def test_place_name_is_geocoded(self, use_repository, battlekart):
        geocoder = use_repository(FakeRepository([battlekart]))

        body = client.get("/recherche/envie", params={"envie": "kart", "ville": "Quetigny"}).json()

        geocoder.resolve.assert_called_once_with("Quetigny")
        assert body["query"]["locationSource"] == "geocoded"

    def test_large_limit_is_clamped(self, use_repository, battlekart, m_beer):
        use_repository(FakeRepository([battlekart, m_beer]))

        resp = client.get("/recherche/envie", params={"envie": "sortir boire ce soir", "limit": 100})

        assert resp.status_code == 200
        assert resp.json()["pagination"]["limit"] == CONFIG.max_page_size

    def test_omitted_parameters_follow_config(self, use_repository, battlekart, m_beer):
        config = SearchConfig(
            default_lat=BATTLEKART_LAT, default_lng=BATTLEKART_LNG,
            default_radius_km=2.0, default_filter="cheap", default_page_size=1,
        )
        use_repository(FakeRepository([battlekart, m_beer]), config=config)

        body = client.get("/recherche/envie", params={"envie": "sortir boire ce soir"}).json()

        assert body["filter"] == "cheap"
        assert body["query"]["rayon"] == 2.0
        assert body["pagination"]["limit"] == 1
        assert len(body["results"]) == 1
        assert body["pagination"]["totalResults"] == 2


class TestSearchErrors:
    def test_missing_envie(self, use_repository):
        use_repository(FakeRepository())
        resp = client.get("/recherche/envie")
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": MISSING_ENVIE_MESSAGE}

    def test_stop_words_only(self, use_repository):
        use_repository(FakeRepository())
        resp = client.get("/recherche/envie", params={"envie": "envie de faire"})
        assert resp.status_code == 400
        assert resp.json()["error"] == NO_KEYWORDS_MESSAGE

    @pytest.mark.parametrize("params", [
        {"envie": "kart", "rayon": 0},
        {"envie": "kart", "page": 0},
        {"envie": "kart", "lat": "north"},
    ])
    def test_invalid_parameters(self, use_repository, params):
        use_repository(FakeRepository())
        resp = client.get("/recherche/envie", params=params)
        assert resp.status_code == 400
        assert resp.json()["error"] == INVALID_PARAMETERS_MESSAGE

    def test_repository_failure_shows_details_outside_production(self, use_repository):
        use_repository(FakeRepository(error=RepositoryError("db down")))
        resp = client.get("/recherche/envie", params={"envie": "kart"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": SEARCH_FAILED_MESSAGE, "details": "db down"}

    def test_repository_failure_hides_details_in_production(self, use_repository):
        config = SearchConfig(default_lat=BATTLEKART_LAT, default_lng=BATTLEKART_LNG, production=True)
        use_repository(FakeRepository(error=OSError("disk")), config=config)
        resp = client.get("/recherche/envie", params={"envie": "kart"})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": SEARCH_FAILED_MESSAGE}


class TestMetadata:
    def test_lists_strategies_and_activities(self, use_repository, battlekart, m_beer):
        use_repository(FakeRepository([battlekart, m_beer]))
        body = client.get("/metadata").json()
        assert body["filters"] == ["popular", "wanted", "cheap", "premium", "newest", "rating"]
        assert body["activities"] == ["bar_bières", "bar_jeux", "karting"]
        assert body["default_radius_km"] == 5.0


class TestAnalyticsEndpoints:
    def test_searches_are_recorded(self, use_repository, battlekart):
        use_repository(FakeRepository([battlekart]))
        client.get("/recherche/envie", params={"envie": "kart"})
        client.get("/recherche/envie", params={"envie": "piscine"})
        client.get("/recherche/envie")

        body = client.get("/analytics/search", params={"period": "7d"}).json()

        assert body["total_searches"] == 3
        assert {s["search_term"] for s in body["searches_without_results"]} == {"piscine", ""}

    def test_click_is_recorded(self):
        resp = client.post("/analytics/search/click", json={
            "searchTerm": "kart", "venueId": "battlekart", "venueName": "BattleKart Dijon",
        })
        assert resp.status_code == 200
        assert resp.json() == {"status": "recorded", "totalClicks": 1}

    def test_click_requires_venue(self):
        resp = client.post("/analytics/search/click", json={"searchTerm": "kart", "venueId": ""})
        assert resp.status_code == 400

    def test_rejects_unknown_period(self):
        assert client.get("/analytics/search", params={"period": "10y"}).status_code == 400

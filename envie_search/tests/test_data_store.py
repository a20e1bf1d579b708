import json

import pytest

from envie_search.search.config import DEFAULT_SEARCH_CONFIG
from envie_search.search.data_store import DataFrameVenueRepository
from envie_search.search.errors import RepositoryError
from envie_search.search.models import SubscriptionTier

RECORDS = [
    {
        "id": "1",
        "name": "BattleKart Dijon",
        "latitude": 47.306299,
        "longitude": 5.105076,
        "tags": [],
        "activities": ["karting", "bar_jeux"],
        "opening_hours": {"tuesday": {"is_open": True, "slots": [{"open": "14:00", "close": "23:00"}]}},
        "views_count": 10,
        "price_min": None,
        "subscription": "PREMIUM",
        "status": "approved",
        "created_at": "2025-10-11T09:12:00+00:00",
        "next_event": {"id": "e1", "title": "Grand Prix", "start_date": "2026-10-31T19:00:00+00:00"},
    },
    {
        "id": "2",
        "name": "M' Beer",
        "latitude": None,
        "longitude": None,
        "tags": [{"tag": "envie de dj ce soir", "weight": 10, "type": "manuel"}],
        "activities": ["bar_bières"],
        "opening_hours": None,
        "views_count": 5,
        "price_min": 4.5,
        "subscription": "FREE",
        "status": "approved",
        "created_at": "2025-10-16T18:40:00+00:00",
        "next_event": None,
    },
    {
        "id": "3",
        "name": "Karting du Lac",
        "activities": ["karting"],
        "subscription": "FREE",
        "status": "pending",
        "created_at": "2026-09-28T07:45:00+00:00",
    },
]


@pytest.fixture
def repository(tmp_path):
    path = tmp_path / "venues.json"
    path.write_text(json.dumps(RECORDS), encoding="utf-8")
    return DataFrameVenueRepository(path)


def test_filters_on_status(repository):
    venues = repository.find_candidates("approved")
    assert [v.id for v in venues] == ["1", "2"]


def test_filters_on_subscription(repository):
    venues = repository.find_candidates("approved", SubscriptionTier.PREMIUM)
    assert [v.name for v in venues] == ["BattleKart Dijon"]


def test_rows_become_typed_venues(repository):
    kart, beer = repository.find_candidates("approved")

    assert kart.opening_hours["tuesday"].slots[0].close == "23:00"
    assert kart.next_event.title == "Grand Prix"
    assert kart.price_min is None
    assert kart.subscription is SubscriptionTier.PREMIUM

    assert beer.latitude is None
    assert not beer.has_coordinates
    assert beer.opening_hours is None
    assert beer.tags[0].weight == 10
    assert beer.price_min == 4.5


def test_list_activities(repository):
    assert repository.list_activities() == ["bar_bières", "bar_jeux", "karting"]


def test_missing_file_raises_repository_error(tmp_path):
    with pytest.raises(RepositoryError):
        DataFrameVenueRepository(tmp_path / "absent.json").find_candidates("approved")


def test_unreadable_file_raises_repository_error(tmp_path):
    path = tmp_path / "venues.json"
    path.write_text("not json", encoding="utf-8")
    with pytest.raises(RepositoryError):
        DataFrameVenueRepository(path).find_candidates("approved")


def test_bundled_sample_data_loads():
    venues = DataFrameVenueRepository(DEFAULT_SEARCH_CONFIG.venues_path).find_candidates("approved")
    names = {v.name for v in venues}
    assert {"BattleKart Dijon", "M' Beer"} <= names
    assert "Karting du Lac" not in names

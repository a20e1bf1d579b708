from __future__ import annotations

from datetime import datetime

import pytest

from envie_search.analytics.clicks import clear_clicks
from envie_search.analytics.store import clear_searches
from envie_search.search.models import DaySchedule, SubscriptionTier, TimeSlot, Venue, VenueTag

# Tuesday 20:00, both scenario venues are open.
TUESDAY_EVENING = datetime(2024, 1, 2, 20, 0)

BATTLEKART_LAT, BATTLEKART_LNG = 47.306299, 5.105076
M_BEER_LAT, M_BEER_LNG = 47.304705, 5.115485


def make_venue(**overrides) -> Venue:
    data = {
        "id": "venue",
        "name": "Venue",
        "created_at": datetime(2025, 1, 1),
    }
    data.update(overrides)
    return Venue(**data)


def _every_day(open_: str, close: str) -> dict[str, DaySchedule]:
    days = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    return {day: DaySchedule(is_open=True, slots=(TimeSlot(open=open_, close=close),)) for day in days}


@pytest.fixture
def battlekart() -> Venue:
    return make_venue(
        id="battlekart",
        name="BattleKart Dijon",
        description="karting électrique, réalité augmentée et circuit interactif",
        latitude=BATTLEKART_LAT,
        longitude=BATTLEKART_LNG,
        activities=("karting", "bar_jeux"),
        opening_hours=_every_day("14:00", "23:00"),
        subscription=SubscriptionTier.PREMIUM,
    )


@pytest.fixture
def m_beer() -> Venue:
    return make_venue(
        id="m-beer",
        name="M' Beer",
        description="bar à bière XXL, boire un verre entre amis, soirée festive",
        latitude=M_BEER_LAT,
        longitude=M_BEER_LNG,
        activities=("bar_bières",),
        tags=(
            VenueTag(tag="envie de boire un excellent cocktail", weight=10),
            VenueTag(tag="envie de danser sur la piste de danse ce soir", weight=10),
            VenueTag(tag="envie de dj ce soir", weight=10),
            VenueTag(tag="envie de ecouter un concert en buvant une bière", weight=10),
            VenueTag(tag="envie de soirée", weight=3),
            VenueTag(tag="envie d'excellence", weight=3),
        ),
        opening_hours=_every_day("17:00", "02:00"),
    )


@pytest.fixture(autouse=True)
def _reset_analytics():
    clear_searches()
    clear_clicks()
    yield
    clear_searches()
    clear_clicks()

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .config import DEFAULT_SEARCH_CONFIG


class _Model(BaseModel):
    """Immutable model serialised with camelCase keys."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class SubscriptionTier(str, Enum):
    FREE = "FREE"
    PREMIUM = "PREMIUM"


class LocationSource(str, Enum):
    explicit = "explicit"
    geocoded = "geocoded"
    default = "default"


# ── Query side ───────────────────────────────────────────────────────────


class SearchQuery(_Model):
    envie: str | None = Field(default=None, description="Free-text desire, e.g. 'faire du kart ce soir'")
    ville: str | None = Field(default=None, description="Optional place name to geocode")
    lat: float | None = None
    lng: float | None = None
    rayon: float = Field(default=DEFAULT_SEARCH_CONFIG.default_radius_km, gt=0, description="Search radius in kilometres")
    filter: str = Field(default=DEFAULT_SEARCH_CONFIG.default_filter, description="Sort strategy key")
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_SEARCH_CONFIG.default_page_size, ge=1)


class KeywordSet(_Model):
    all: tuple[str, ...] = ()
    primary: tuple[str, ...] = ()
    context: tuple[str, ...] = ()
    generic: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.all

    def is_primary(self, keyword: str) -> bool:
        return keyword in self.primary

    def is_context(self, keyword: str) -> bool:
        return keyword in self.context


# ── Venue (read-only projection from the repository) ─────────────────────


class VenueTag(_Model):
    tag: str
    weight: int = 1
    type: str | None = None


class TimeSlot(_Model):
    open: str
    close: str
    name: str | None = None


class DaySchedule(_Model):
    is_open: bool = False
    slots: tuple[TimeSlot, ...] = ()


class EventRef(_Model):
    id: str
    title: str
    start_date: datetime


class Venue(_Model):
    id: str
    name: str
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    tags: tuple[VenueTag, ...] = ()
    activities: tuple[str, ...] = ()
    opening_hours: dict[str, DaySchedule] | None = None
    views_count: int = 0
    likes_count: int = 0
    price_min: float | None = None
    price_max: float | None = None
    avg_rating: float | None = None
    subscription: SubscriptionTier = SubscriptionTier.FREE
    status: str = "approved"
    created_at: datetime
    primary_image: str | None = None
    next_event: EventRef | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def average_price(self) -> float | None:
        if self.price_min is None or self.price_max is None:
            return None
        return (self.price_min + self.price_max) / 2


class ScoredVenue(Venue):
    score: float
    thematic_score: float
    proximity_bonus: float = 0.0
    distance: float | None = Field(default=None, description="Distance to the reference point in km")
    is_open: bool = True
    matched_tags: tuple[str, ...] = ()


# ── Response side ────────────────────────────────────────────────────────


class Coordinates(_Model):
    lat: float
    lng: float


class Pagination(_Model):
    current_page: int
    total_pages: int
    total_results: int
    has_more: bool
    limit: int


class QueryEcho(_Model):
    envie: str
    ville: str | None
    rayon: float
    keywords: list[str]
    primary_keywords: list[str]
    context_keywords: list[str]
    coordinates: Coordinates | None
    location_source: LocationSource


class SearchResponse(_Model):
    success: bool = True
    results: list[ScoredVenue]
    pagination: Pagination
    filter: str
    query: QueryEcho


class ErrorResponse(_Model):
    success: bool = False
    error: str
    details: str | None = None


class ClickRequest(_Model):
    search_term: str = Field(..., min_length=1)
    venue_id: str = Field(..., min_length=1)
    venue_name: str | None = None


class ClickResponse(_Model):
    status: str
    total_clicks: int

from __future__ import annotations

import math
from typing import Callable, Sequence

from .models import ScoredVenue, SubscriptionTier

MISSING_PRICE = 999.0

_TIER_RANK = {SubscriptionTier.PREMIUM: 2, SubscriptionTier.FREE: 1}


def order_by_relevance(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    """Final score descending, then distance ascending (unknown distance last)."""
    return sorted(
        venues,
        key=lambda v: (-v.score, v.distance if v.distance is not None else math.inf),
    )


def _cheapest_price(venue: ScoredVenue) -> float:
    prices = [p for p in (venue.price_min, venue.average_price) if p is not None]
    return min(prices) if prices else MISSING_PRICE


def _by_views(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(venues, key=lambda v: v.views_count, reverse=True)


def _by_likes(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(venues, key=lambda v: v.likes_count, reverse=True)


def _by_price(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(venues, key=_cheapest_price)


def _premium_first(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(
        venues,
        key=lambda v: (_TIER_RANK.get(v.subscription, 0), v.created_at.timestamp()),
        reverse=True,
    )


def _by_newest(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(venues, key=lambda v: v.created_at.timestamp(), reverse=True)


def _by_rating(venues: Sequence[ScoredVenue]) -> list[ScoredVenue]:
    return sorted(venues, key=lambda v: v.avg_rating or 0.0, reverse=True)


SORT_STRATEGIES: dict[str, Callable[[Sequence[ScoredVenue]], list[ScoredVenue]]] = {
    "popular": _by_views,
    "wanted": _by_likes,
    "cheap": _by_price,
    "premium": _premium_first,
    "newest": _by_newest,
    "rating": _by_rating,
}


def sort_venues(venues: Sequence[ScoredVenue], strategy: str | None) -> list[ScoredVenue]:
    """Apply a named sort strategy.

    All sorts are stable, so venues with equal keys keep the relevance order
    they arrived in. An unknown strategy leaves the order untouched.
    """
    sorter = SORT_STRATEGIES.get(strategy or "")
    if sorter is None:
        return list(venues)
    return sorter(venues)

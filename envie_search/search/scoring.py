"""
Relevance scoring for venues against an extracted keyword set.

Each signal (tags, name, description, activities, opening status) adds
points to a venue's thematic score. The thematic score gates inclusion in
the results; the proximity bonus is only added on top of it to build the
final score used for ranking.

The point values live in a ``ScoringProfile``:

* ``simple`` uses fixed points whatever the keyword class
  (tag weight x 10, name +20, description +10, activity +25).
* ``keyword_priority`` (canonical) makes primary keywords dominate:
  a primary keyword matching a tag scores a flat 150, and primary matches
  on name/description/activity score 2-4x a generic keyword, while context
  keywords ("ce", "soir") only add a few points.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from .geo import venue_distance_km
from .models import KeywordSet, ScoredVenue, Venue
from .opening_hours import is_open_now
from .wordlists import DEFAULT_WORD_LISTS, WordLists, normalize_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordPoints:
    primary: float
    context: float
    generic: float

    def for_keyword(self, keyword: str, keywords: KeywordSet) -> float:
        if keywords.is_primary(keyword):
            return self.primary
        if keywords.is_context(keyword):
            return self.context
        return self.generic


@dataclass(frozen=True)
class ScoringProfile:
    name: str
    name_points: KeywordPoints
    description_points: KeywordPoints
    activity_points: KeywordPoints
    tag_multiplier: float = 10.0
    context_tag_multiplier: float = 10.0
    # Flat points for a primary keyword matching a tag; None scores it like any other keyword.
    primary_tag_score: float | None = None
    generic_action_tag_score: float | None = None
    generic_tag_weight: int = 3
    use_associations: bool = False
    open_bonus: float = 15.0
    proximity_max: float = 50.0
    proximity_decay_per_km: float = 2.0


SIMPLE_PROFILE = ScoringProfile(
    name="simple",
    name_points=KeywordPoints(primary=20, context=20, generic=20),
    description_points=KeywordPoints(primary=10, context=10, generic=10),
    activity_points=KeywordPoints(primary=25, context=25, generic=25),
)

KEYWORD_PRIORITY_PROFILE = ScoringProfile(
    name="keyword_priority",
    name_points=KeywordPoints(primary=50, context=5, generic=20),
    description_points=KeywordPoints(primary=30, context=3, generic=10),
    activity_points=KeywordPoints(primary=100, context=10, generic=25),
    tag_multiplier=10.0,
    context_tag_multiplier=1.0,
    primary_tag_score=150.0,
    generic_action_tag_score=20.0,
    use_associations=True,
)

SCORING_PROFILES: dict[str, ScoringProfile] = {
    SIMPLE_PROFILE.name: SIMPLE_PROFILE,
    KEYWORD_PRIORITY_PROFILE.name: KEYWORD_PRIORITY_PROFILE,
}


def get_profile(name: str | None) -> ScoringProfile:
    """Return the named profile, falling back to ``keyword_priority``."""
    if name in SCORING_PROFILES:
        return SCORING_PROFILES[name]
    if name:
        logger.warning("Unknown scoring profile %r, using %s", name, KEYWORD_PRIORITY_PROFILE.name)
    return KEYWORD_PRIORITY_PROFILE


@dataclass(frozen=True)
class ScoreBreakdown:
    thematic_score: float
    matched_tags: tuple[str, ...]
    is_open: bool
    tag_score: float = 0.0
    name_score: float = 0.0
    description_score: float = 0.0
    activity_score: float = 0.0
    open_bonus: float = 0.0


def matches(text: str, keyword: str) -> bool:
    """Substring containment in either direction, so "kart" matches "karting" and back."""
    if not text or not keyword:
        return False
    return keyword in text or text in keyword


def _tag_points(
    tag_text: str,
    weight: int,
    keyword: str,
    keywords: KeywordSet,
    profile: ScoringProfile,
    word_lists: WordLists,
) -> float:
    if profile.primary_tag_score is not None and keywords.is_primary(keyword):
        if profile.generic_action_tag_score is not None and any(
            phrase in tag_text for phrase in word_lists.generic_action_tag_phrases
        ):
            return profile.generic_action_tag_score
        return profile.primary_tag_score

    if any(phrase in tag_text for phrase in word_lists.generic_tag_phrases):
        weight = min(weight, profile.generic_tag_weight)
    multiplier = profile.context_tag_multiplier if keywords.is_context(keyword) else profile.tag_multiplier
    return weight * multiplier


def _activity_matches(
    activity: str,
    keyword: str,
    profile: ScoringProfile,
    word_lists: WordLists,
) -> bool:
    if matches(activity, keyword):
        return True
    if not profile.use_associations:
        return False
    return any(fragment in activity for fragment in word_lists.associations.get(keyword, ()))


def score_venue(
    venue: Venue,
    keywords: KeywordSet,
    profile: ScoringProfile = KEYWORD_PRIORITY_PROFILE,
    *,
    now: datetime | None = None,
    word_lists: WordLists = DEFAULT_WORD_LISTS,
) -> ScoreBreakdown:
    """Compute the thematic score of *venue* for *keywords*."""
    tag_score = 0.0
    matched: dict[str, None] = {}
    for tag in venue.tags:
        tag_text = normalize_text(tag.tag)
        for keyword in keywords.all:
            if matches(tag_text, keyword):
                tag_score += _tag_points(tag_text, tag.weight, keyword, keywords, profile, word_lists)
                matched.setdefault(tag.tag, None)

    name_text = normalize_text(venue.name)
    description_text = normalize_text(venue.description)
    name_score = 0.0
    description_score = 0.0
    for keyword in keywords.all:
        if matches(name_text, keyword):
            name_score += profile.name_points.for_keyword(keyword, keywords)
        if matches(description_text, keyword):
            description_score += profile.description_points.for_keyword(keyword, keywords)

    activity_score = 0.0
    for activity in venue.activities:
        activity_text = normalize_text(activity)
        for keyword in keywords.all:
            if _activity_matches(activity_text, keyword, profile, word_lists):
                activity_score += profile.activity_points.for_keyword(keyword, keywords)

    thematic = tag_score + name_score + description_score + activity_score

    is_open = is_open_now(venue.opening_hours, now or datetime.now())
    open_bonus = 0.0
    # The open bonus never makes an irrelevant venue relevant.
    if is_open and thematic > 0:
        open_bonus = profile.open_bonus
        thematic += open_bonus

    return ScoreBreakdown(
        thematic_score=thematic,
        matched_tags=tuple(matched),
        is_open=is_open,
        tag_score=tag_score,
        name_score=name_score,
        description_score=description_score,
        activity_score=activity_score,
        open_bonus=open_bonus,
    )


def proximity_bonus(distance: float, profile: ScoringProfile = KEYWORD_PRIORITY_PROFILE) -> float:
    return max(0.0, profile.proximity_max - distance * profile.proximity_decay_per_km)


def score_candidates(
    venues: Sequence[Venue],
    keywords: KeywordSet,
    ref_lat: float | None,
    ref_lng: float | None,
    profile: ScoringProfile = KEYWORD_PRIORITY_PROFILE,
    *,
    now: datetime | None = None,
    word_lists: WordLists = DEFAULT_WORD_LISTS,
) -> list[ScoredVenue]:
    """Score every venue and attach distance, proximity bonus and final score."""
    now = now or datetime.now()
    scored: list[ScoredVenue] = []
    for venue in venues:
        breakdown = score_venue(venue, keywords, profile, now=now, word_lists=word_lists)
        distance = venue_distance_km(venue, ref_lat, ref_lng)

        bonus = 0.0
        if breakdown.thematic_score > 0 and distance is not None:
            bonus = proximity_bonus(distance, profile)

        logger.debug(
            "%s: tags=%s name=%s description=%s activities=%s open=%s proximity=%.1f",
            venue.name,
            breakdown.tag_score,
            breakdown.name_score,
            breakdown.description_score,
            breakdown.activity_score,
            breakdown.open_bonus,
            bonus,
        )

        scored.append(ScoredVenue(
            **dict(venue),
            score=round(breakdown.thematic_score + bonus, 2),
            thematic_score=breakdown.thematic_score,
            proximity_bonus=round(bonus, 2),
            distance=round(distance, 2) if distance is not None else None,
            is_open=breakdown.is_open,
            matched_tags=breakdown.matched_tags,
        ))
    return scored

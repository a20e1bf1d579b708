from __future__ import annotations

import logging
import threading
from datetime import datetime
from enum import Enum
from zoneinfo import ZoneInfo

from .config import DEFAULT_GEOCODER_CONFIG, DEFAULT_SEARCH_CONFIG, GeocoderConfig, SearchConfig
from .data_store import VenueRepository
from .errors import (
    MISSING_ENVIE_MESSAGE,
    NO_KEYWORDS_MESSAGE,
    RepositoryError,
    SearchCancelled,
    ValidationError,
)
from .geo import filter_by_radius
from .geocoding import Geocoder, resolve_location
from .keywords import extract_keywords
from .models import (
    Coordinates,
    QueryEcho,
    SearchQuery,
    SearchResponse,
    SubscriptionTier,
)
from .pagination import paginate
from .ranking import order_by_relevance, sort_venues
from .scoring import ScoringProfile, get_profile, score_candidates
from .wordlists import WordLists, load_word_lists

logger = logging.getLogger(__name__)


class SearchStage(str, Enum):
    validating = "Validating"
    extracting = "Extracting"
    resolving_location = "ResolvingLocation"
    fetching = "Fetching"
    geo_filtering = "GeoFiltering"
    scoring = "Scoring"
    relevance_filtering = "RelevanceFiltering"
    sorting = "Sorting"
    paginating = "Paginating"
    done = "Done"
    failed = "Failed"


def _local_now(config: SearchConfig) -> datetime:
    return datetime.now(ZoneInfo(config.timezone))


def search_venues(
    query: SearchQuery,
    repository: VenueRepository,
    geocoder: Geocoder | None = None,
    *,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    word_lists: WordLists | None = None,
    profile: ScoringProfile | None = None,
    now: datetime | None = None,
    cancel_event: threading.Event | None = None,
    geocoder_config: GeocoderConfig = DEFAULT_GEOCODER_CONFIG,
) -> SearchResponse:
    """Run one envie search from raw query to a ranked, paginated page.

    Raises ``ValidationError`` when the query has no text or no significant
    keyword, ``SearchCancelled`` when *cancel_event* is set before the
    candidate fetch, and ``RepositoryError`` when the fetch fails. Geocoding
    problems never fail the search.
    """
    word_lists = word_lists or load_word_lists(config.word_lists_path)
    profile = profile or get_profile(config.scoring_profile)
    now = now or _local_now(config)

    stage = SearchStage.validating
    try:
        logger.debug("Search stage: %s", stage.value)
        if not query.envie or not query.envie.strip():
            raise ValidationError(MISSING_ENVIE_MESSAGE)

        stage = SearchStage.extracting
        logger.debug("Search stage: %s", stage.value)
        keywords = extract_keywords(query.envie, word_lists)
        if keywords.is_empty:
            raise ValidationError(NO_KEYWORDS_MESSAGE)
        logger.info(
            "Envie %r: primary=%s context=%s generic=%s",
            query.envie, list(keywords.primary), list(keywords.context), list(keywords.generic),
        )

        stage = SearchStage.resolving_location
        logger.debug("Search stage: %s", stage.value)
        location = resolve_location(query, geocoder, config, geocoder_config)

        stage = SearchStage.fetching
        logger.debug("Search stage: %s", stage.value)
        if cancel_event is not None and cancel_event.is_set():
            raise SearchCancelled("Search cancelled before fetching candidates")
        subscription = SubscriptionTier.PREMIUM if query.filter == "premium" else None
        try:
            candidates = repository.find_candidates(config.status_filter, subscription)
        except RepositoryError:
            raise
        except Exception as exc:
            raise RepositoryError(str(exc)) from exc

        stage = SearchStage.geo_filtering
        logger.debug("Search stage: %s", stage.value)
        in_radius = filter_by_radius(candidates, location.lat, location.lng, query.rayon)

        stage = SearchStage.scoring
        logger.debug("Search stage: %s", stage.value)
        scored = score_candidates(
            in_radius, keywords, location.lat, location.lng, profile,
            now=now, word_lists=word_lists,
        )

        stage = SearchStage.relevance_filtering
        logger.debug("Search stage: %s", stage.value)
        relevant = [venue for venue in scored if venue.thematic_score > 0]
        logger.info(
            "Candidates=%d in_radius=%d relevant=%d",
            len(candidates), len(in_radius), len(relevant),
        )

        stage = SearchStage.sorting
        logger.debug("Search stage: %s", stage.value)
        ordered = sort_venues(order_by_relevance(relevant), query.filter)

        stage = SearchStage.paginating
        logger.debug("Search stage: %s", stage.value)
        page_size = min(query.limit, config.max_page_size)
        page, pagination = paginate(ordered, query.page, page_size)
    except Exception as exc:
        logger.debug("Search stage: %s (from %s: %s)", SearchStage.failed.value, stage.value, exc)
        raise

    logger.debug("Search stage: %s", SearchStage.done.value)
    return SearchResponse(
        results=page,
        pagination=pagination,
        filter=query.filter,
        query=QueryEcho(
            envie=query.envie,
            ville=query.ville,
            rayon=query.rayon,
            keywords=list(keywords.all),
            primary_keywords=list(keywords.primary),
            context_keywords=list(keywords.context),
            coordinates=Coordinates(lat=location.lat, lng=location.lng),
            location_source=location.source,
        ),
    )

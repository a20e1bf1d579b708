from __future__ import annotations

import logging
import time
from functools import lru_cache

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .analytics.aggregator import DEFAULT_PERIOD, compute_search_analytics
from .analytics.clicks import get_clicks, record_click
from .analytics.store import get_searches, record_search
from .search.config import DEFAULT_GEOCODER_CONFIG, DEFAULT_SEARCH_CONFIG, SearchConfig
from .search.data_store import DataFrameVenueRepository, VenueRepository
from .search.errors import (
    INVALID_PARAMETERS_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    RepositoryError,
    ValidationError,
)
from .search.geocoding import Geocoder, NominatimGeocoder
from .search.models import (
    ClickRequest,
    ClickResponse,
    ErrorResponse,
    SearchQuery,
    SearchResponse,
)
from .search.ranking import SORT_STRATEGIES
from .search.retrieval import search_venues

logger = logging.getLogger(__name__)

app = FastAPI(title="Envie Search API", version="1.0.0")


# ── Dependencies ─────────────────────────────────────────────────────────


def get_search_config() -> SearchConfig:
    return DEFAULT_SEARCH_CONFIG


@lru_cache(maxsize=1)
def get_repository() -> VenueRepository:
    return DataFrameVenueRepository(DEFAULT_SEARCH_CONFIG.venues_path)


@lru_cache(maxsize=1)
def get_geocoder() -> Geocoder:
    return NominatimGeocoder(DEFAULT_GEOCODER_CONFIG)


def _current_config() -> SearchConfig:
    # Exception handlers run outside dependency injection.
    return app.dependency_overrides.get(get_search_config, get_search_config)()


def _error_response(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True, exclude_none=True))


# ── Error handlers ───────────────────────────────────────────────────────


@app.exception_handler(ValidationError)
def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return _error_response(400, INVALID_PARAMETERS_MESSAGE, details)


@app.exception_handler(RepositoryError)
def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    logger.error("Venue repository failure on %s", request.url.path, exc_info=exc)
    details = None if _current_config().production else str(exc)
    return _error_response(500, SEARCH_FAILED_MESSAGE, details)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata(
    repository: VenueRepository = Depends(get_repository),
    config: SearchConfig = Depends(get_search_config),
) -> dict:
    list_activities = getattr(repository, "list_activities", None)
    return {
        "filters": list(SORT_STRATEGIES),
        "default_filter": config.default_filter,
        "default_radius_km": config.default_radius_km,
        "default_page_size": config.default_page_size,
        "max_page_size": config.max_page_size,
        "scoring_profile": config.scoring_profile,
        "activities": list_activities() if list_activities else [],
    }


@app.get("/recherche/envie", response_model=SearchResponse)
def recherche_envie(
    envie: str | None = Query(None, description="Free-text desire"),
    ville: str | None = Query(None),
    lat: float | None = Query(None),
    lng: float | None = Query(None),
    rayon: float | None = Query(None, gt=0),
    filter_: str | None = Query(None, alias="filter"),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    repository: VenueRepository = Depends(get_repository),
    geocoder: Geocoder = Depends(get_geocoder),
    config: SearchConfig = Depends(get_search_config),
) -> SearchResponse:
    # Omitted parameters take the injected config defaults.
    filter_ = filter_ or config.default_filter
    query = SearchQuery(
        envie=envie, ville=ville, lat=lat, lng=lng,
        rayon=rayon if rayon is not None else config.default_radius_km,
        filter=filter_, page=page,
        limit=limit if limit is not None else config.default_page_size,
    )

    start_time = time.time()
    response: SearchResponse | None = None
    try:
        response = search_venues(query, repository, geocoder, config=config)
        return response
    finally:
        elapsed_ms = round((time.time() - start_time) * 1000, 1)
        record_search(
            envie or "",
            strategy=filter_,
            result_count=response.pagination.total_results if response else 0,
            response_time_ms=elapsed_ms,
            success=response is not None,
            ville=ville,
            keywords=response.query.keywords if response else (),
        )


# ── Analytics endpoints ──────────────────────────────────────────────────


@app.post("/analytics/search/click", response_model=ClickResponse)
def search_click(body: ClickRequest) -> ClickResponse:
    record_click(body.search_term, body.venue_id, body.venue_name)
    return ClickResponse(status="recorded", total_clicks=len(get_clicks()))


@app.get("/analytics/search")
def search_analytics(period: str = Query(DEFAULT_PERIOD, pattern="^(7d|30d|90d|1y)$")) -> dict:
    return compute_search_analytics(get_searches(), get_clicks(), period)

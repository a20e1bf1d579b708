"""Place-name geocoding and reference point resolution."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from .config import DEFAULT_GEOCODER_CONFIG, DEFAULT_SEARCH_CONFIG, GeocoderConfig, SearchConfig
from .errors import GeocodingError
from .models import LocationSource, SearchQuery

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def resolve(self, place_name: str) -> tuple[float, float]:
        """Return ``(lat, lon)`` for *place_name* or raise ``GeocodingError``."""
        ...


class NominatimGeocoder:
    """Geocoder backed by the Nominatim (OpenStreetMap) search API."""

    def __init__(self, config: GeocoderConfig = DEFAULT_GEOCODER_CONFIG):
        self.config = config
        self.base_url = config.base_url
        self.headers = {"User-Agent": config.user_agent}

    def _build_params(self, place_name: str) -> dict[str, str | int]:
        query = place_name.strip()
        if self.config.country and self.config.country.lower() not in query.lower():
            query = f"{query}, {self.config.country}"
        return {"q": query, "format": "json", "limit": 1}

    def resolve(self, place_name: str) -> tuple[float, float]:
        if not self.config.enabled:
            raise GeocodingError("Geocoding is disabled")
        if not place_name or not place_name.strip():
            raise GeocodingError("Empty place name")

        try:
            response = requests.get(
                self.base_url,
                params=self._build_params(place_name),
                headers=self.headers,
                timeout=self.config.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise GeocodingError(f"Nominatim request failed for {place_name!r}: {exc}") from exc

        if not results:
            raise GeocodingError(f"No result for {place_name!r}")

        try:
            lat = float(results[0]["lat"])
            lon = float(results[0]["lon"])
        except (KeyError, TypeError, ValueError) as exc:
            raise GeocodingError(f"Malformed Nominatim result for {place_name!r}") from exc

        logger.debug("Geocoded %r to (%s, %s)", place_name, lat, lon)
        return lat, lon


@dataclass(frozen=True)
class ResolvedLocation:
    lat: float
    lng: float
    source: LocationSource


def _is_nearby_label(ville: str, config: GeocoderConfig) -> bool:
    return ville.strip().lower() in {label.lower() for label in config.nearby_labels}


def resolve_location(
    query: SearchQuery,
    geocoder: Geocoder | None,
    config: SearchConfig = DEFAULT_SEARCH_CONFIG,
    geocoder_config: GeocoderConfig = DEFAULT_GEOCODER_CONFIG,
) -> ResolvedLocation:
    """Pick the reference point for *query*.

    Explicit coordinates win. Otherwise the place name is geocoded; a
    geocoding failure falls back to the configured default point instead of
    failing the search. With neither, the default point is used.
    """
    if query.lat is not None and query.lng is not None:
        return ResolvedLocation(query.lat, query.lng, LocationSource.explicit)

    if query.ville and geocoder is not None and not _is_nearby_label(query.ville, geocoder_config):
        try:
            lat, lng = geocoder.resolve(query.ville)
            return ResolvedLocation(lat, lng, LocationSource.geocoded)
        except Exception:
            # Any geocoder failure degrades to the default point.
            logger.warning(
                "Could not geocode %r, using default reference point", query.ville, exc_info=True,
            )

    return ResolvedLocation(config.default_lat, config.default_lng, LocationSource.default)

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_PROCESSED_DIR = Path(__file__).resolve().parent.parent / "data" / "processed"


@dataclass(frozen=True)
class SearchConfig:
    # Dijon city centre
    default_lat: float = float(os.getenv("ENVIE_DEFAULT_LAT", "47.322"))
    default_lng: float = float(os.getenv("ENVIE_DEFAULT_LNG", "5.041"))
    default_radius_km: float = float(os.getenv("ENVIE_DEFAULT_RADIUS_KM", "5.0"))
    default_filter: str = os.getenv("ENVIE_DEFAULT_FILTER", "popular")
    default_page_size: int = int(os.getenv("ENVIE_DEFAULT_PAGE_SIZE", "15"))
    # Larger requested page sizes are clamped, not rejected.
    max_page_size: int = int(os.getenv("ENVIE_MAX_PAGE_SIZE", "50"))
    status_filter: str = "approved"
    scoring_profile: str = os.getenv("ENVIE_SCORING_PROFILE", "keyword_priority")
    timezone: str = os.getenv("ENVIE_TIMEZONE", "Europe/Paris")
    production: bool = os.getenv("ENVIE_ENV", "development").lower() == "production"
    venues_path: Path = Path(os.getenv("ENVIE_VENUES_PATH", str(_PROCESSED_DIR / "venues.json")))
    word_lists_path: str | None = os.getenv("ENVIE_WORD_LISTS_PATH") or None


@dataclass(frozen=True)
class GeocoderConfig:
    base_url: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
    country: str = "France"
    user_agent: str = "EnvieSearch/1.0"
    timeout: float = 5.0
    enabled: bool = os.getenv("ENVIE_GEOCODING", "true").lower() in ("true", "1", "yes")
    nearby_labels: tuple[str, ...] = ("autour de moi",)


DEFAULT_SEARCH_CONFIG = SearchConfig()
DEFAULT_GEOCODER_CONFIG = GeocoderConfig()

from __future__ import annotations

import math
from typing import Sequence

from .models import Venue

EARTH_RADIUS_KM = 6371.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, haversine formula."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = math.sin(delta_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    # Rounding can push a just outside [0, 1] for antipodal points.
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def venue_distance_km(venue: Venue, ref_lat: float | None, ref_lon: float | None) -> float | None:
    """Distance from the reference point to *venue*, or None when either side has no coordinates."""
    if ref_lat is None or ref_lon is None or not venue.has_coordinates:
        return None
    return distance_km(ref_lat, ref_lon, venue.latitude, venue.longitude)


def filter_by_radius(
    venues: Sequence[Venue],
    ref_lat: float,
    ref_lon: float,
    radius_km: float,
) -> list[Venue]:
    """Keep venues within *radius_km* of the reference point.

    A venue without coordinates is kept: missing geo data is not a reason
    to exclude it.
    """
    kept: list[Venue] = []
    for venue in venues:
        if not venue.has_coordinates:
            kept.append(venue)
            continue
        if distance_km(ref_lat, ref_lon, venue.latitude, venue.longitude) <= radius_km:
            kept.append(venue)
    return kept

from __future__ import annotations

import time
from typing import Any

_clicks: list[dict[str, Any]] = []


def normalize_term(search_term: str) -> str:
    return search_term.strip().lower()


def record_click(
    search_term: str,
    venue_id: str,
    venue_name: str | None = None,
    timestamp: float | None = None,
) -> None:
    """Record that a result of *search_term* was opened."""
    _clicks.append({
        "search_term": normalize_term(search_term),
        "venue_id": venue_id,
        "venue_name": venue_name or venue_id,
        "timestamp": time.time() if timestamp is None else timestamp,
    })


def get_clicks() -> list[dict[str, Any]]:
    return _clicks


def clear_clicks() -> None:
    _clicks.clear()

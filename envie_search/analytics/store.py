"""In-memory log of envie searches, bounded to the most recent entries."""
from __future__ import annotations

import time
from collections import deque
from typing import Any, Iterable

from .clicks import normalize_term

MAX_SEARCHES = 10_000

_searches: deque[dict[str, Any]] = deque(maxlen=MAX_SEARCHES)


def record_search(
    search_term: str,
    *,
    strategy: str,
    result_count: int,
    response_time_ms: float,
    success: bool = True,
    ville: str | None = None,
    keywords: Iterable[str] = (),
    timestamp: float | None = None,
) -> None:
    """Log one search. The term is normalised the same way as clicks so both group together."""
    _searches.append({
        "search_term": normalize_term(search_term),
        "ville": ville,
        "filter": strategy,
        "keywords": list(keywords),
        "result_count": result_count,
        "response_time_ms": response_time_ms,
        "success": success,
        "timestamp": time.time() if timestamp is None else timestamp,
    })


def get_searches(since: float | None = None) -> list[dict[str, Any]]:
    if since is None:
        return list(_searches)
    return [s for s in _searches if s["timestamp"] >= since]


def clear_searches() -> None:
    _searches.clear()

from __future__ import annotations

import time
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Any

PERIOD_DAYS = {"7d": 7, "30d": 30, "90d": 90, "1y": 365}
DEFAULT_PERIOD = "30d"
TOP_SEARCHES_LIMIT = 20


def _day(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


def compute_search_analytics(
    searches: list[dict[str, Any]],
    clicks: list[dict[str, Any]],
    period: str = DEFAULT_PERIOD,
    now: float | None = None,
) -> dict[str, Any]:
    if period not in PERIOD_DAYS:
        period = DEFAULT_PERIOD
    now = time.time() if now is None else now
    start = now - PERIOD_DAYS[period] * 24 * 60 * 60

    searches = [s for s in searches if s["timestamp"] >= start]
    period_clicks = [c for c in clicks if c["timestamp"] >= start]
    total = len(searches)

    # Average response time
    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Searches grouped by normalised term
    search_counter: Counter[str] = Counter()
    has_results: dict[str, bool] = {}
    for s in searches:
        term = s["search_term"]
        search_counter[term] += 1
        has_results[term] = has_results.get(term, False) or s.get("result_count", 0) > 0

    # Clicks per term and per venue
    click_counter: Counter[str] = Counter()
    venue_clicks: dict[str, Counter[str]] = defaultdict(Counter)
    venue_names: dict[str, str] = {}
    for c in period_clicks:
        click_counter[c["search_term"]] += 1
        venue_clicks[c["search_term"]][c["venue_id"]] += 1
        venue_names[c["venue_id"]] = c["venue_name"]

    top_searches = []
    for term, count in search_counter.most_common():
        term_clicks = click_counter.get(term, 0)
        top_searches.append({
            "search_term": term,
            "search_count": count,
            "click_count": term_clicks,
            "conversion_rate": round(term_clicks / count * 100),
            "top_clicked_venues": [
                {"venue_id": vid, "venue_name": venue_names[vid], "clicks": n}
                for vid, n in venue_clicks[term].most_common()
            ],
            "has_results": has_results[term],
        })

    # Searches that never returned anything
    without_results = [
        {"search_term": s["search_term"], "count": s["search_count"]}
        for s in top_searches
        if not s["has_results"]
    ]

    # Strategy usage
    strategy_usage = dict(Counter(s.get("filter", "popular") for s in searches))

    # Per-day trend
    searches_per_day: Counter[str] = Counter(_day(s["timestamp"]) for s in searches)
    clicks_per_day: Counter[str] = Counter(_day(c["timestamp"]) for c in period_clicks)
    trends = [
        {"date": day, "searches": searches_per_day.get(day, 0), "clicks": clicks_per_day.get(day, 0)}
        for day in sorted(set(searches_per_day) | set(clicks_per_day))
    ]

    return {
        "period": period,
        "start_date": _day(start),
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_searches": top_searches[:TOP_SEARCHES_LIMIT],
        "searches_without_results": without_results,
        "strategy_usage": strategy_usage,
        "search_trends": trends,
    }

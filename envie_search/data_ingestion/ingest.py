from __future__ import annotations

import json
import logging
import math
from pathlib import Path
from typing import Any, List

import pandas as pd

from .config import DEFAULT_INGESTION_CONFIG, IngestionConfig

logger = logging.getLogger(__name__)


CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "description",
    "latitude",
    "longitude",
    "tags",
    "activities",
    "opening_hours",
    "views_count",
    "likes_count",
    "price_min",
    "price_max",
    "avg_rating",
    "subscription",
    "status",
    "created_at",
    "primary_image",
    "next_event",
]

# Candidate raw column names per canonical column, in order of preference.
RAW_COLUMN_ALIASES: dict[str, List[str]] = {
    "id": ["id"],
    "name": ["name", "nom"],
    "description": ["description"],
    "latitude": ["latitude", "lat"],
    "longitude": ["longitude", "lng", "lon"],
    "tags": ["tags", "etablissement_tags"],
    "activities": ["activities", "activites"],
    "opening_hours": ["horaires_ouverture", "horairesOuverture", "opening_hours"],
    "views_count": ["views_count", "viewsCount"],
    "likes_count": ["likes_count", "likesCount"],
    "price_min": ["price_min", "priceMin", "prix_min"],
    "price_max": ["price_max", "priceMax", "prix_max"],
    "avg_rating": ["avg_rating", "avgRating", "rating"],
    "subscription": ["subscription"],
    "status": ["status"],
    "created_at": ["created_at", "createdAt"],
    "primary_image": ["primary_image", "primaryImage", "images"],
    "next_event": ["next_event", "nextEvent"],
}


def parse_json_field(value: Any) -> Any:
    """Decode a JSON-encoded export cell.

    Already-decoded values pass through; empty cells and strings that are
    not valid JSON become None.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (dict, list)):
        return value
    if not isinstance(value, str):
        return value
    if not value.strip():
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


def _normalize_tags(raw: Any) -> list[dict[str, Any]]:
    tags = parse_json_field(raw)
    if not isinstance(tags, list):
        return []
    normalized = []
    for item in tags:
        if isinstance(item, str):
            item = {"tag": item}
        if not isinstance(item, dict) or not item.get("tag"):
            continue
        weight = item.get("poids", item.get("weight", 1))
        try:
            weight = int(weight)
        except (TypeError, ValueError):
            weight = 1
        normalized.append({
            "tag": str(item["tag"]),
            "weight": weight,
            "type": item.get("typeTag", item.get("type")),
        })
    return normalized


def _normalize_activities(raw: Any) -> list[str]:
    activities = parse_json_field(raw)
    if isinstance(activities, str):
        activities = [activities]
    if not isinstance(activities, list):
        return []
    return [str(a).strip() for a in activities if str(a).strip()]


def _normalize_schedule(raw: Any) -> dict[str, Any] | None:
    """Map an exported weekly schedule onto ``{day: {is_open, slots}}``.

    An empty schedule means the establishment never filled it in and is
    stored as "no schedule".
    """
    schedule = parse_json_field(raw)
    if not isinstance(schedule, dict) or not schedule:
        return None
    normalized: dict[str, Any] = {}
    for day, entry in schedule.items():
        if not isinstance(entry, dict):
            continue
        slots = [
            {"open": slot["open"], "close": slot["close"], "name": slot.get("name")}
            for slot in entry.get("slots") or []
            if isinstance(slot, dict) and slot.get("open") and slot.get("close")
        ]
        normalized[str(day).strip().lower()] = {
            "is_open": bool(entry.get("isOpen", entry.get("is_open", False))),
            "slots": slots,
        }
    return normalized or None


def _primary_image(raw: Any) -> str | None:
    value = parse_json_field(raw)
    if isinstance(value, list):
        primary = [img for img in value if isinstance(img, dict) and img.get("is_primary")]
        return primary[0].get("url") if primary else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _next_event(raw: Any) -> dict[str, Any] | None:
    event = parse_json_field(raw)
    if not isinstance(event, dict):
        return None
    start = event.get("start_date", event.get("startDate"))
    if not event.get("id") or not event.get("title") or not start:
        return None
    return {"id": str(event["id"]), "title": event["title"], "start_date": start}


def _iso_timestamp(value: Any) -> str | None:
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    return None if pd.isna(ts) else ts.isoformat()


def run_ingestion(config: IngestionConfig = DEFAULT_INGESTION_CONFIG) -> Path:
    """
    Execute the establishment ingestion pipeline.

    Steps:
    - Read the raw establishment export (CSV, JSON-encoded nested columns).
    - Map raw fields into the canonical Venue schema.
    - Persist the cleaned venues as JSON records for the search repository.
    """

    config.processed_data_dir.mkdir(parents=True, exist_ok=True)

    df = pd.read_csv(config.raw_export_path, dtype={"id": str})

    def _first_present(columns: List[str]) -> str | None:
        for col in columns:
            if col in df.columns:
                return col
        return None

    def _column(name: str) -> pd.Series:
        col = _first_present(RAW_COLUMN_ALIASES[name])
        if col is None:
            return pd.Series([None] * len(df), index=df.index, dtype=object)
        return df[col]

    canonical = pd.DataFrame(index=df.index)
    canonical["id"] = _column("id")
    canonical["name"] = _column("name")
    canonical["description"] = _column("description")
    canonical["latitude"] = pd.to_numeric(_column("latitude"), errors="coerce")
    canonical["longitude"] = pd.to_numeric(_column("longitude"), errors="coerce")
    canonical["tags"] = _column("tags").apply(_normalize_tags)
    canonical["activities"] = _column("activities").apply(_normalize_activities)
    canonical["opening_hours"] = _column("opening_hours").apply(_normalize_schedule)

    for counter in ("views_count", "likes_count"):
        canonical[counter] = pd.to_numeric(_column(counter), errors="coerce").fillna(0).astype(int)
    for numeric in ("price_min", "price_max", "avg_rating"):
        canonical[numeric] = pd.to_numeric(_column(numeric), errors="coerce")

    canonical["subscription"] = _column("subscription").fillna("FREE").astype(str).str.upper()
    canonical["status"] = _column("status").fillna("pending").astype(str).str.lower()
    canonical["created_at"] = _column("created_at").apply(_iso_timestamp)
    canonical["primary_image"] = _column("primary_image").apply(_primary_image)
    canonical["next_event"] = _column("next_event").apply(_next_event)

    # A venue needs an id, a name and a creation date to be searchable.
    valid = canonical["id"].notna() & canonical["name"].notna() & canonical["created_at"].notna()
    dropped = int((~valid).sum())
    if dropped:
        logger.warning("Dropping %d establishment(s) without id, name or creation date", dropped)
    canonical = canonical.loc[valid, CANONICAL_COLUMNS].copy()
    canonical["id"] = canonical["id"].astype(str)

    output_path = config.processed_path
    canonical.to_json(output_path, orient="records", force_ascii=False, indent=2)
    logger.info("Wrote %d venues to %s", len(canonical), output_path)
    return output_path


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    path = run_ingestion()
    print(f"Ingestion complete. Processed data saved to: {path}")

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
from pydantic import ValidationError as ModelValidationError

from .errors import RepositoryError
from .models import SubscriptionTier, Venue

logger = logging.getLogger(__name__)


class VenueRepository(Protocol):
    def find_candidates(
        self, status: str, subscription: SubscriptionTier | None = None,
    ) -> list[Venue]:
        """Return every venue with *status*, optionally restricted to one tier."""
        ...


def _clean(value: Any) -> Any:
    """Turn pandas' NaN placeholders back into None."""
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT:
        return None
    return value


def _row_to_venue(record: dict[str, Any]) -> Venue:
    # Missing values fall back to the model defaults.
    data = {k: v for k, v in ((k, _clean(v)) for k, v in record.items()) if v is not None}
    return Venue.model_validate(data)


class DataFrameVenueRepository:
    """Venue repository over the processed JSON venue file, held in a DataFrame.

    The file is read on the first query and kept in memory afterwards.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._df: pd.DataFrame | None = None

    def _load(self) -> pd.DataFrame:
        if not self.path.is_file():
            raise RepositoryError(f"Venue file not found: {self.path}")
        try:
            df = pd.read_json(self.path, orient="records", dtype={"id": str}, convert_dates=False)
        except ValueError as exc:
            raise RepositoryError(f"Unreadable venue file {self.path}: {exc}") from exc
        logger.info("Loaded %d venues from %s", len(df), self.path)
        return df

    def get_dataframe(self) -> pd.DataFrame:
        if self._df is None:
            self._df = self._load()
        return self._df

    def find_candidates(
        self, status: str, subscription: SubscriptionTier | None = None,
    ) -> list[Venue]:
        df = self.get_dataframe()
        if df.empty:
            return []

        mask = pd.Series(True, index=df.index)
        if "status" in df.columns:
            mask = mask & (df["status"].fillna("approved") == status)
        if subscription is not None:
            if "subscription" in df.columns:
                tiers = df["subscription"].fillna(SubscriptionTier.FREE.value)
            else:
                tiers = pd.Series(SubscriptionTier.FREE.value, index=df.index)
            mask = mask & (tiers == SubscriptionTier(subscription).value)

        venues: list[Venue] = []
        for record in df.loc[mask].to_dict(orient="records"):
            try:
                venues.append(_row_to_venue(record))
            except ModelValidationError as exc:
                raise RepositoryError(f"Malformed venue record {record.get('id')!r}: {exc}") from exc
        return venues

    def list_activities(self) -> list[str]:
        """Sorted distinct activity labels across all venues."""
        df = self.get_dataframe()
        if df.empty or "activities" not in df.columns:
            return []
        labels: set[str] = set()
        for value in df["activities"]:
            if isinstance(value, list):
                labels.update(str(a).strip() for a in value if str(a).strip())
        return sorted(labels)

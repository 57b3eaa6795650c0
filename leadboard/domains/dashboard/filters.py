"""Filter requests and transaction narrowing by date window and dimension."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

import pandas as pd

from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.domains.dashboard.periods import PeriodWindow, parse_day, resolve_range
from leadboard.errors import InvalidWindow

logger = logging.getLogger(__name__)

# Equality filters over transaction columns; country joins through the branch
DIMENSION_FILTERS = ("branch_id", "user_id", "product_id", "campaign_id", "segment_id", "status")
JOINED_FILTERS = ("country",)


@dataclass(frozen=True)
class FilterRequest:
    date: date | None = None
    date_from: date | None = None
    date_to: date | None = None
    dimensions: dict[str, str] = field(default_factory=dict)

    @property
    def has_range(self) -> bool:
        return self.date_from is not None

    def reference(self, today: date) -> date:
        """Day that anchors trailing windows and the current month."""
        if self.has_range:
            return self.date_to
        return self.date or today

    def explicit_window(self) -> PeriodWindow | None:
        if not self.has_range:
            return None
        return resolve_range(self.date_from, self.date_to)

    def applied(self) -> dict[str, str]:
        applied = {}
        for key in ("date", "date_from", "date_to"):
            value = getattr(self, key)
            if value is not None:
                applied[key] = value.isoformat()
        applied.update(self.dimensions)
        return applied


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_filters(raw: Mapping[str, object] | None) -> FilterRequest:
    """Build a FilterRequest, ignoring keys the engine does not recognize."""
    raw = {k: _clean(v) for k, v in (raw or {}).items()}
    raw = {k: v for k, v in raw.items() if v is not None}

    ref, start, end = raw.get("date"), raw.get("date_from"), raw.get("date_to")
    if ref and (start or end):
        raise InvalidWindow("'date' cannot be combined with 'date_from'/'date_to'")
    if bool(start) != bool(end):
        raise InvalidWindow("'date_from' and 'date_to' must be given together")

    request = FilterRequest(
        date=parse_day(ref) if ref else None,
        date_from=parse_day(start) if start else None,
        date_to=parse_day(end) if end else None,
        dimensions={
            k: raw[k] for k in (*DIMENSION_FILTERS, *JOINED_FILTERS) if k in raw
        },
    )
    # Reject an inverted range before any aggregation runs
    request.explicit_window()
    return request


def filter_by_window(df: pd.DataFrame, window: PeriodWindow) -> pd.DataFrame:
    start, end = window.bounds()
    return df[df["date"].between(start, end)]


def filter_by_dimensions(
    df: pd.DataFrame,
    dimensions: Mapping[str, str],
    lookup: DimensionLookup,
) -> pd.DataFrame:
    mask = pd.Series(True, index=df.index)
    for key, value in dimensions.items():
        match key:
            case "country":
                mask &= lookup.country_of(df["branch_id"]) == value
            case key if key in DIMENSION_FILTERS:
                mask &= df[key] == value
            case _:
                logger.debug(f"Ignoring unrecognized filter '{key}'")
    return df[mask]


def filter_transactions(
    df: pd.DataFrame,
    window: PeriodWindow | None,
    dimensions: Mapping[str, str],
    lookup: DimensionLookup,
) -> pd.DataFrame:
    """Narrow transactions to a window and equality filters, keeping input order."""
    subset = df if window is None else filter_by_window(df, window)
    if dimensions:
        subset = filter_by_dimensions(subset, dimensions, lookup)
    return subset

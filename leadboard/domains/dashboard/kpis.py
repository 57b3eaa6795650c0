"""Headline lead KPIs with period-over-period comparison.

Metrics produced for a filtered transaction set:
  - total, contacted and closed lead counts
  - conversion rate (closed / total)
  - revenue over closed leads only
  - average turnaround in whole days over closed leads
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import pandas as pd

from leadboard.domains.dashboard.filters import filter_transactions
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.domains.dashboard.periods import PeriodWindow
from leadboard.utils.transforms import day_difference, percent
from leadboard.utils.types import (
    CLOSED_STATUSES,
    CONTACTED_STATUSES,
    ChangeDirection,
    Record,
)

logger = logging.getLogger(__name__)

type KPIResult = Record

CLOSED = sorted(s.value for s in CLOSED_STATUSES)
CONTACTED = sorted(s.value for s in CONTACTED_STATUSES)


@dataclass(frozen=True)
class KPIDefinition:
    id: str
    label: str
    metric: str
    unit: str
    color: str
    decimals: int = 0


# Tile order on the dashboard
KPI_DEFINITIONS = [
    KPIDefinition("avg_tat", "Avg Turn Around Time", "avg_turnaround", "days", "#F8622F", 1),
    KPIDefinition("contacted_leads", "Contacted Leads", "contacted_leads", "count", "#5962FF"),
    KPIDefinition("conversion_rate", "Conversion Rate", "conversion_rate", "%", "#18E8B8", 1),
    KPIDefinition("total_leads", "Total Leads Processed", "total_leads", "count", "#FFC609"),
]


@dataclass(frozen=True)
class LeadMetrics:
    total_leads: int = 0
    contacted_leads: int = 0
    closed_leads: int = 0
    conversion_rate: float = 0.0
    total_revenue: float = 0.0
    avg_turnaround: float = 0.0


def closed_mask(df: pd.DataFrame) -> pd.Series:
    return df["status"].isin(CLOSED)


def contacted_mask(df: pd.DataFrame) -> pd.Series:
    return df["status"].isin(CONTACTED)


def turnaround_days(df: pd.DataFrame) -> pd.Series:
    """Day differences for closed leads with both dates and a non-negative gap."""
    closed = df[closed_mask(df)]
    days = day_difference(closed["closed_date"], closed["date"])
    return days[days >= 0]


def average_turnaround(df: pd.DataFrame) -> float:
    days = turnaround_days(df)
    if days.empty:
        return 0.0
    return float(days.mean())


def compute_lead_metrics(df: pd.DataFrame) -> LeadMetrics:
    total = len(df)
    closed = df[closed_mask(df)]
    return LeadMetrics(
        total_leads=total,
        contacted_leads=int(contacted_mask(df).sum()),
        closed_leads=len(closed),
        conversion_rate=percent(len(closed), total),
        total_revenue=float(closed["amount"].sum()),
        avg_turnaround=average_turnaround(df),
    )


def change_between(current: float, previous: float) -> tuple[float, ChangeDirection]:
    """Magnitude of relative change and its direction; a zero baseline reads as 100%."""
    if previous == 0:
        change = 100.0 if current > 0 else 0.0
    else:
        change = abs(current - previous) / abs(previous) * 100
    direction = ChangeDirection.UP if current >= previous else ChangeDirection.DOWN
    return change, direction


def _rounded(value: float, decimals: int) -> int | float:
    return int(round(value)) if decimals == 0 else round(float(value), decimals)


def build_kpis(current: LeadMetrics, previous: LeadMetrics) -> list[KPIResult]:
    kpis = []
    for definition in KPI_DEFINITIONS:
        now = getattr(current, definition.metric)
        before = getattr(previous, definition.metric)
        change, direction = change_between(now, before)
        kpis.append({
            "id": definition.id,
            "label": definition.label,
            "value": _rounded(now, definition.decimals),
            "previous_value": _rounded(before, definition.decimals),
            "unit": definition.unit,
            "change_percentage": round(change, 1),
            "change_direction": direction.value,
            "color": definition.color,
        })
    return kpis


def compare_periods(
    current_df: pd.DataFrame,
    previous_df: pd.DataFrame,
) -> tuple[list[KPIResult], LeadMetrics, LeadMetrics]:
    current = compute_lead_metrics(current_df)
    previous = compute_lead_metrics(previous_df)
    logger.info(
        f"KPIs: {current.total_leads} leads, {current.closed_leads} closed "
        f"vs {previous.total_leads}/{previous.closed_leads} in the previous period"
    )
    return build_kpis(current, previous), current, previous


def calculate_kpis(
    transactions: pd.DataFrame,
    window: PeriodWindow,
    dimensions: Mapping[str, str],
    lookup: DimensionLookup,
) -> tuple[list[KPIResult], LeadMetrics, LeadMetrics]:
    """KPI tiles for a window compared against the preceding window of equal length.

    The non-date filters are reapplied unchanged to the previous window.
    """
    return compare_periods(
        filter_transactions(transactions, window, dimensions, lookup),
        filter_transactions(transactions, window.previous(), dimensions, lookup),
    )

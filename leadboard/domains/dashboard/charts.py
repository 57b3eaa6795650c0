"""Chart-ready breakdowns of a filtered transaction set."""

import pandas as pd

from leadboard.domains.dashboard.kpis import closed_mask
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.utils.types import STATUS_ORDER, Record

type ChartData = Record


def _chart(kind: str, label: str, labels: list[str], data: list) -> ChartData:
    return {"type": kind, "labels": labels, "datasets": [{"label": label, "data": data}]}


def status_breakdown(df: pd.DataFrame) -> ChartData:
    """Lead count per status; statuses outside the known set are appended by name."""
    counts = df["status"].dropna().value_counts()
    known = [s.value for s in STATUS_ORDER]
    extra = sorted(str(s) for s in counts.index if s not in known)
    labels = known + extra
    return _chart("doughnut", "Lead Count", labels, [int(counts.get(s, 0)) for s in labels])


def _closed_revenue_by(df: pd.DataFrame, key: str) -> pd.Series:
    closed = df[closed_mask(df)]
    return closed.groupby(key, sort=True)["amount"].sum()


def revenue_by_product(df: pd.DataFrame, lookup: DimensionLookup) -> ChartData:
    revenue = _closed_revenue_by(df, "product_id")
    pairs = [(lookup.name("products", p), round(float(revenue.get(p, 0.0)), 2)) for p in lookup.ids("products")]
    pairs.sort(key=lambda pair: pair[1], reverse=True)
    return _chart("bar", "Revenue", [p[0] for p in pairs], [p[1] for p in pairs])


def revenue_by_branch(df: pd.DataFrame, lookup: DimensionLookup) -> ChartData:
    revenue = _closed_revenue_by(df, "branch_id")
    pairs = [(lookup.name("branches", b), round(float(revenue.get(b, 0.0)), 2)) for b in lookup.ids("branches")]
    pairs.sort(key=lambda pair: pair[1], reverse=True)
    return _chart("bar", "Revenue (7 days)", [p[0] for p in pairs], [p[1] for p in pairs])


def build_charts(kpi_df: pd.DataFrame, week_df: pd.DataFrame, lookup: DimensionLookup) -> dict[str, ChartData]:
    return {
        "status_breakdown": status_breakdown(kpi_df),
        "revenue_by_product": revenue_by_product(kpi_df, lookup),
        "revenue_by_branch_7days": revenue_by_branch(week_df, lookup),
    }

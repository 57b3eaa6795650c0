"""Flatten filtered transactions into display rows with joined dimension names."""

import pandas as pd

from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.utils.transforms import day_difference
from leadboard.utils.types import RecordList


def _iso_days(series: pd.Series) -> list[str | None]:
    return [d.date().isoformat() if pd.notna(d) else None for d in series]


def _tat_days(df: pd.DataFrame) -> list[int | None]:
    """Day gap for any record with both dates, kept as is even when negative."""
    days = day_difference(df["closed_date"], df["date"])
    return [int(d) if pd.notna(d) else None for d in days]


def _nullable(series: pd.Series) -> list:
    return [v if pd.notna(v) else None for v in series]


def denormalize_transactions(
    df: pd.DataFrame,
    lookup: DimensionLookup,
    limit: int | None = None,
) -> RecordList:
    """Display rows in filter order, optionally truncated to the first ``limit``."""
    if limit is not None:
        df = df.head(limit)

    columns = {
        "id": _nullable(df["txn_id"]),
        "customer_name": _nullable(df["customer_name"]),
        "branch_id": _nullable(df["branch_id"]),
        "branch_name": lookup.names("branches", df["branch_id"]).tolist(),
        "user_id": _nullable(df["user_id"]),
        "agent_name": lookup.names("users", df["user_id"]).tolist(),
        "product_id": _nullable(df["product_id"]),
        "product_name": lookup.names("products", df["product_id"]).tolist(),
        "campaign_id": _nullable(df["campaign_id"]),
        "campaign_name": lookup.names("campaigns", df["campaign_id"]).tolist(),
        "segment_id": _nullable(df["segment_id"]),
        "segment_name": lookup.names("segments", df["segment_id"]).tolist(),
        "amount": [round(float(a), 2) for a in df["amount"]],
        "status": _nullable(df["status"]),
        "date": _iso_days(df["date"]),
        "closed_date": _iso_days(df["closed_date"]),
        "tat_days": _tat_days(df),
    }
    return [dict(zip(columns, values)) for values in zip(*columns.values())]

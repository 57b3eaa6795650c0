"""Daily per-branch rollups over the trailing week."""

import logging

import numpy as np
import pandas as pd

from leadboard.domains.dashboard.kpis import closed_mask
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.domains.dashboard.periods import PeriodWindow
from leadboard.domains.dashboard.targets import agent_branch_pairs, derive_branch_targets
from leadboard.utils.types import Record

logger = logging.getLogger(__name__)

type BranchSeries = dict[str, Record]


def bucket_by_day(df: pd.DataFrame, window: PeriodWindow) -> pd.DataFrame:
    """Lead, closed and closed-revenue totals per (branch_id, day offset).

    Records whose offset falls outside [0, window.days) are skipped.
    """
    start, _ = window.bounds()
    offsets = (df["date"] - start).dt.days
    closed = closed_mask(df)
    frame = pd.DataFrame({
        "branch_id": df["branch_id"],
        "day": offsets,
        "leads": 1,
        "closed": closed.astype(int),
        "revenue": df["amount"].where(closed, 0.0),
    })
    frame = frame[offsets.between(0, window.days - 1) & frame["branch_id"].notna()]
    frame = frame.astype({"day": int})
    return frame.groupby(["branch_id", "day"], sort=True)[["leads", "closed", "revenue"]].sum()


def _daily_arrays(buckets: pd.DataFrame, branch_ids: list[str], days: int) -> dict[str, dict[str, np.ndarray]]:
    arrays = {
        branch_id: {
            "leads": np.zeros(days, dtype=int),
            "closed": np.zeros(days, dtype=int),
            "revenue": np.zeros(days, dtype=float),
        }
        for branch_id in branch_ids
    }
    for (branch_id, day), row in buckets.iterrows():
        slot = arrays.get(branch_id)
        if slot is None:
            continue  # branch missing from the lookup
        slot["leads"][day] = int(row["leads"])
        slot["closed"][day] = int(row["closed"])
        slot["revenue"][day] = float(row["revenue"])
    return arrays


def _conversion(closed: np.ndarray, leads: np.ndarray) -> np.ndarray:
    out = np.zeros(len(leads), dtype=float)
    np.divide(closed * 100.0, leads, out=out, where=leads > 0)
    return out


def build_lead_vs_conversion(
    df: pd.DataFrame,
    window: PeriodWindow,
    lookup: DimensionLookup,
) -> Record:
    """Parallel daily series of revenue, leads, closures and conversion per branch."""
    branch_ids = lookup.ids("branches")
    arrays = _daily_arrays(bucket_by_day(df, window), branch_ids, window.days)

    branches: BranchSeries = {}
    for branch_id in branch_ids:
        slot = arrays[branch_id]
        branches[branch_id] = {
            "branch_name": lookup.name("branches", branch_id),
            "daily_revenue": [round(float(v), 2) for v in slot["revenue"]],
            "daily_leads": [int(v) for v in slot["leads"]],
            "daily_closed": [int(v) for v in slot["closed"]],
            "daily_conversion": [round(float(v), 1) for v in _conversion(slot["closed"], slot["leads"])],
        }

    logger.info(f"Rolled up {len(df)} transactions into {window.days} days for {len(branches)} branches")
    return {"labels": [d.isoformat() for d in window.dates()], "branches": branches}


def build_revenue_vs_target(
    df: pd.DataFrame,
    window: PeriodWindow,
    lookup: DimensionLookup,
    agent_targets: dict[str, float],
    target_divisor: int = 30,
) -> Record:
    """Daily closed revenue per branch against a flat apportioned monthly target.

    The daily target is the derived branch target divided by ``target_divisor``
    and repeated across the window; there is no real daily target feed.
    """
    branch_ids = lookup.ids("branches")
    arrays = _daily_arrays(bucket_by_day(df, window), branch_ids, window.days)
    branch_targets = derive_branch_targets(agent_targets, agent_branch_pairs(df))

    branches: BranchSeries = {}
    for branch_id in branch_ids:
        daily_target = round(branch_targets.get(branch_id, 0.0) / target_divisor, 2)
        branches[branch_id] = {
            "branch_name": lookup.name("branches", branch_id),
            "daily_target": [daily_target] * window.days,
            "daily_revenue": [round(float(v), 2) for v in arrays[branch_id]["revenue"]],
        }

    return {"labels": [d.isoformat() for d in window.dates()], "branches": branches}

"""Monthly revenue targets at agent level and the branch targets derived from them.

Branches have no targets of their own: a branch target is the sum of the
current-month targets of every agent seen transacting at that branch. An
agent working two branches counts toward both.
"""

import logging
from collections.abc import Mapping

import pandas as pd

logger = logging.getLogger(__name__)

type TargetMap = dict[str, float]


def targets_for_month(revenue_targets: pd.DataFrame, month: str) -> TargetMap:
    """Target per agent for a YYYY-MM month; agents without one are absent."""
    monthly = revenue_targets[revenue_targets["month"] == month].dropna(subset=["user_id"])
    if monthly.empty:
        logger.debug(f"No revenue targets recorded for {month}")
        return {}
    totals = monthly.groupby("user_id", sort=True)["target_amount"].sum()
    return {str(k): float(v) for k, v in totals.items()}


def agent_branch_pairs(transactions: pd.DataFrame) -> pd.DataFrame:
    """Distinct (user_id, branch_id) pairs observed in a transaction set."""
    return (
        transactions[["user_id", "branch_id"]]
        .dropna()
        .drop_duplicates()
        .reset_index(drop=True)
    )


def derive_branch_targets(agent_targets: Mapping[str, float], agent_branches: pd.DataFrame) -> TargetMap:
    """Sum agent targets onto every branch the agent transacted at."""
    if agent_branches.empty:
        return {}
    pairs = agent_branches.assign(
        target=agent_branches["user_id"].map(dict(agent_targets)).fillna(0.0).astype("float64")
    )
    totals = pairs.groupby("branch_id", sort=True)["target"].sum()
    return {str(k): float(v) for k, v in totals.items()}

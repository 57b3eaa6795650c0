"""Agent, branch and country leaderboards over a filtered transaction set."""

import logging
from collections.abc import Mapping
from operator import itemgetter

import pandas as pd

from leadboard.domains.dashboard.kpis import closed_mask, contacted_mask
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.domains.dashboard.targets import agent_branch_pairs, derive_branch_targets
from leadboard.utils.transforms import day_difference, percent, safe_divide
from leadboard.utils.types import LeadStatus, Record

logger = logging.getLogger(__name__)

type Ranking = list[Record]

SUMMARY_COLUMNS = [
    "total_leads",
    "closed_leads",
    "open_leads",
    "contacted_leads",
    "total_revenue",
    "tat_sum",
    "tat_count",
]


def aggregate_by(df: pd.DataFrame, key: str) -> pd.DataFrame:
    """Counts, closed revenue and turnaround totals per value of ``key``.

    Rows with a null key are dropped; they still count in whole-set totals.
    """
    closed = closed_mask(df)
    tat = day_difference(df["closed_date"], df["date"])
    valid_tat = closed & (tat >= 0)
    frame = pd.DataFrame({
        key: df[key],
        "total_leads": 1,
        "closed_leads": closed.astype(int),
        "open_leads": (df["status"] == LeadStatus.OPEN.value).astype(int),
        "contacted_leads": contacted_mask(df).astype(int),
        "total_revenue": df["amount"].where(closed, 0.0),
        "tat_sum": tat.where(valid_tat, 0.0),
        "tat_count": valid_tat.astype(int),
    })
    frame = frame[frame[key].notna()]
    return frame.groupby(key, sort=True)[SUMMARY_COLUMNS].sum()


def _stats(summary: pd.DataFrame, key: str | None) -> dict[str, float]:
    if key is None or key not in summary.index:
        return dict.fromkeys(SUMMARY_COLUMNS, 0)
    return summary.loc[key].to_dict()


def _performance(stats: Mapping[str, float]) -> Record:
    total = int(stats["total_leads"])
    closed = int(stats["closed_leads"])
    return {
        "total_revenue": round(float(stats["total_revenue"]), 2),
        "total_leads": total,
        "closed_leads": closed,
        "conversion_rate": round(percent(closed, total), 1),
        "avg_tat": round(safe_divide(stats["tat_sum"], stats["tat_count"]), 1),
    }


def _achievement(revenue: float, target: float) -> float:
    return round(percent(revenue, target), 1)


def primary_branches(df: pd.DataFrame) -> dict[str, str]:
    """Branch each agent transacts at most; ties go to the lowest branch id."""
    pairs = df.dropna(subset=["user_id", "branch_id"])
    if pairs.empty:
        return {}
    counts = pairs.groupby(["user_id", "branch_id"]).size().reset_index(name="n")
    counts = counts.sort_values(["user_id", "n", "branch_id"], ascending=[True, False, True])
    first = counts.drop_duplicates("user_id")
    return dict(zip(first["user_id"], first["branch_id"]))


def aggregate_agents(
    df: pd.DataFrame,
    lookup: DimensionLookup,
    agent_targets: Mapping[str, float],
) -> Ranking:
    """One row per agent in the lookup, in lookup order."""
    summary = aggregate_by(df, "user_id")
    primary = primary_branches(df)

    rows = []
    for user in lookup.users.to_dict("records"):
        user_id = user["user_id"]
        if user_id is None:
            continue
        stats = _stats(summary, user_id)
        row = {
            "user_id": user_id,
            "name": lookup.name("users", user_id),
            "role": user.get("role") if pd.notna(user.get("role")) else None,
            **_performance(stats),
            "open_leads": int(stats["open_leads"]),
            "contacted_leads": int(stats["contacted_leads"]),
        }
        target = float(agent_targets.get(user_id, 0.0))
        branch_id = primary.get(user_id)
        row.update({
            "target": round(target, 2),
            "achievement_percent": _achievement(row["total_revenue"], target),
            "branch_id": branch_id,
            "branch_name": lookup.name("branches", branch_id) if branch_id else None,
        })
        rows.append(row)

    orphaned = set(summary.index) - {r["user_id"] for r in rows}
    if orphaned:
        logger.warning(f"{len(orphaned)} agent ids in transactions are missing from the lookup")
    return rows


def rank_agents(df: pd.DataFrame, lookup: DimensionLookup, agent_targets: Mapping[str, float]) -> Ranking:
    """Agents ordered by closed leads, most first."""
    rows = aggregate_agents(df, lookup, agent_targets)
    return sorted(rows, key=itemgetter("closed_leads"), reverse=True)


def rank_branches(df: pd.DataFrame, lookup: DimensionLookup, agent_ranking: Ranking) -> Ranking:
    """Branches ordered by closed revenue; targets derived from the agent ranking."""
    agent_targets = {row["user_id"]: row["target"] for row in agent_ranking}
    branch_targets = derive_branch_targets(agent_targets, agent_branch_pairs(df))
    summary = aggregate_by(df, "branch_id")

    rows = []
    for branch in lookup.branches.to_dict("records"):
        branch_id = branch["branch_id"]
        if branch_id is None:
            continue
        target = branch_targets.get(branch_id, 0.0)
        perf = _performance(_stats(summary, branch_id))
        rows.append({
            "branch_id": branch_id,
            "branch_name": lookup.name("branches", branch_id),
            "region": branch["region"] if pd.notna(branch["region"]) else None,
            "country": lookup.branch_country(branch_id),
            **perf,
            "target": round(target, 2),
            "achievement_percent": _achievement(perf["total_revenue"], target),
        })
    return sorted(rows, key=itemgetter("total_revenue"), reverse=True)


def rank_countries(df: pd.DataFrame, lookup: DimensionLookup, branch_ranking: Ranking) -> Ranking:
    """Countries ordered by closed revenue, joined through each transaction's branch."""
    summary = aggregate_by(df.assign(country=lookup.country_of(df["branch_id"])), "country")

    rows = []
    for country in lookup.countries():
        target = sum(r["target"] for r in branch_ranking if r["country"] == country)
        perf = _performance(_stats(summary, country))
        rows.append({
            "country": country,
            **perf,
            "branch_count": len(lookup.branches_in(country)),
            "target": round(target, 2),
            "achievement_percent": _achievement(perf["total_revenue"], target),
        })
    return sorted(rows, key=itemgetter("total_revenue"), reverse=True)


def top_agents_by_conversion(agent_rows: Ranking, limit: int = 5) -> Ranking:
    """Best converting agents with at least one lead in the window."""
    active = [r for r in agent_rows if r["total_leads"] > 0]
    ranked = sorted(active, key=itemgetter("conversion_rate", "closed_leads"), reverse=True)
    return [
        {
            "agent_id": r["user_id"],
            "agent_name": r["name"],
            "turnaround_time": r["avg_tat"],
            "conversion_rate": r["conversion_rate"],
            "branch_name": r["branch_name"],
        }
        for r in ranked[:limit]
    ]


def agents_by_released_amount(agent_rows: Ranking, limit: int = 10) -> Ranking:
    """Agents ordered by revenue released on closed deals."""
    released = [r for r in agent_rows if r["total_revenue"] > 0]
    ranked = sorted(released, key=itemgetter("total_revenue"), reverse=True)
    return [
        {"agent_id": r["user_id"], "agent_name": r["name"], "released_amount": r["total_revenue"]}
        for r in ranked[:limit]
    ]


def branch_period_leaderboard(branch_ranking: Ranking, previous_df: pd.DataFrame) -> Ranking:
    """Branch rows with closed counts and revenue for this and the previous period."""
    previous = aggregate_by(previous_df, "branch_id")
    rows = []
    for branch in branch_ranking:
        before = _stats(previous, branch["branch_id"])
        rows.append({
            "id": branch["branch_id"],
            "name": branch["branch_name"],
            "target_kes": branch["target"],
            "current": branch["closed_leads"],
            "previous": int(before["closed_leads"]),
            "realised": branch["total_revenue"],
            "realised_previous": round(float(before["total_revenue"]), 2),
        })
    return rows


def country_period_leaderboard(
    country_ranking: Ranking,
    previous_df: pd.DataFrame,
    lookup: DimensionLookup,
) -> Ranking:
    previous = aggregate_by(
        previous_df.assign(country=lookup.country_of(previous_df["branch_id"])), "country"
    )
    return [
        {
            "id": country["country"],
            "country": country["country"],
            "realised": country["total_revenue"],
            "previous_realised": round(float(_stats(previous, country["country"])["total_revenue"]), 2),
            "branch_count": country["branch_count"],
        }
        for country in country_ranking
    ]

"""Rule-based recommendations and the session user's leaderboard positions."""

from leadboard.domains.dashboard.kpis import LeadMetrics, change_between
from leadboard.utils.types import Record

type Recommendation = dict[str, str]

MAX_RECOMMENDATIONS = 3
UNDER_TARGET_THRESHOLD = 50.0


def _branch_conversion_note(branch_ranking: list[Record], overall: float) -> Recommendation | None:
    active = [b for b in branch_ranking if b["total_leads"] > 0]
    if len(active) < 2:
        return None
    weakest = min(active, key=lambda b: b["conversion_rate"])
    if weakest["conversion_rate"] >= overall:
        return None
    return {
        "title": f"Lift conversion at {weakest['branch_name']}",
        "description": (
            f"{weakest['branch_name']} converts {weakest['conversion_rate']:.0f}% of its leads "
            f"against {overall:.0f}% across all branches."
        ),
    }


def _under_target_note(agent_ranking: list[Record]) -> Recommendation | None:
    targeted = [a for a in agent_ranking if a["target"] > 0]
    behind = [a for a in targeted if a["achievement_percent"] < UNDER_TARGET_THRESHOLD]
    if not behind:
        return None
    return {
        "title": "Support agents behind target",
        "description": (
            f"{len(behind)} of {len(targeted)} agents with a target this month are below "
            f"{UNDER_TARGET_THRESHOLD:.0f}% achievement."
        ),
    }


def _turnaround_note(current: LeadMetrics, previous: LeadMetrics) -> Recommendation | None:
    if current.avg_turnaround <= previous.avg_turnaround or previous.avg_turnaround == 0:
        return None
    change, _ = change_between(current.avg_turnaround, previous.avg_turnaround)
    return {
        "title": "Turnaround time is rising",
        "description": (
            f"Average turnaround grew {change:.0f}% to {current.avg_turnaround:.1f} days "
            f"compared with the previous period."
        ),
    }


def build_recommendations(
    current: LeadMetrics,
    previous: LeadMetrics,
    agent_ranking: list[Record],
    branch_ranking: list[Record],
) -> list[Recommendation]:
    notes = [
        _branch_conversion_note(branch_ranking, current.conversion_rate),
        _under_target_note(agent_ranking),
        _turnaround_note(current, previous),
    ]
    recommendations = [n for n in notes if n is not None]
    if not recommendations:
        recommendations.append({
            "title": "Keep the momentum",
            "description": (
                f"Conversion stands at {current.conversion_rate:.0f}% with "
                f"{current.closed_leads} closed leads this period."
            ),
        })
    return recommendations[:MAX_RECOMMENDATIONS]


def user_positions(
    user_profile: Record,
    branch_ranking: list[Record],
    country_ranking: list[Record],
) -> dict[str, int]:
    """1-based leaderboard positions of the user's primary branch and its country, 0 if unknown."""
    branch_id = user_profile.get("primary_branch_id")
    branch_id = str(branch_id) if branch_id is not None else None
    branch_rank = next(
        (i for i, b in enumerate(branch_ranking, start=1) if b["branch_id"] == branch_id), 0
    )
    country = next((b["country"] for b in branch_ranking if b["branch_id"] == branch_id), None)
    country_rank = next(
        (i for i, c in enumerate(country_ranking, start=1) if country and c["country"] == country), 0
    )
    return {"branch_ranking": branch_rank, "country_ranking": country_rank}

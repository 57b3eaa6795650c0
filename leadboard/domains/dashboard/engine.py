"""Dashboard orchestration: one snapshot and one filter request in, one payload out.

Every call recomputes from the full transaction snapshot. The engine keeps
no aggregation state between calls and reads "today" only through its
injected clock, so identical inputs always produce identical payloads.
"""

import logging
from collections.abc import Mapping

import pandas as pd

from leadboard.config import EngineConfig
from leadboard.domains.dashboard.charts import build_charts
from leadboard.domains.dashboard.denormalize import denormalize_transactions
from leadboard.domains.dashboard.filters import FilterRequest, filter_transactions, parse_filters
from leadboard.domains.dashboard.ingest import DataProvider, Snapshot
from leadboard.domains.dashboard.insights import build_recommendations, user_positions
from leadboard.domains.dashboard.kpis import compare_periods
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.domains.dashboard.models import LOOKUP_KEYS
from leadboard.domains.dashboard.periods import month_key, resolve_window
from leadboard.domains.dashboard.rankings import (
    agents_by_released_amount,
    aggregate_agents,
    branch_period_leaderboard,
    country_period_leaderboard,
    rank_agents,
    rank_branches,
    rank_countries,
    top_agents_by_conversion,
)
from leadboard.domains.dashboard.targets import targets_for_month
from leadboard.domains.dashboard.timeseries import build_lead_vs_conversion, build_revenue_vs_target
from leadboard.utils.types import STATUS_ORDER, Clock, DashboardResult, system_clock
from leadboard.utils.validators import validate_referential_integrity

logger = logging.getLogger(__name__)


def _log_orphans(transactions: pd.DataFrame, snapshot: Snapshot) -> None:
    for kind, key in LOOKUP_KEYS.items():
        match validate_referential_integrity(transactions, snapshot.lookups[kind], key):
            case {"valid": False, "errors": errors}:
                logger.warning(f"{kind}: {'; '.join(errors)}")


class DashboardEngine:
    """Computes dashboard payloads over an injected read-only provider."""

    def __init__(
        self,
        provider: DataProvider,
        clock: Clock = system_clock,
        config: EngineConfig | None = None,
    ):
        self.provider = provider
        self.clock = clock
        self.config = config or EngineConfig()

    def compute_dashboard(self, filters: Mapping[str, object] | None = None) -> DashboardResult:
        request = parse_filters(filters)
        snapshot = self.provider.snapshot()
        return self._compute(request, snapshot)

    def _compute(self, request: FilterRequest, snapshot: Snapshot) -> DashboardResult:
        cfg = self.config
        lookup = DimensionLookup(snapshot.lookups, placeholder=cfg.placeholder)
        reference = request.reference(self.clock())

        kpi_window = request.explicit_window() or resolve_window(reference, cfg.kpi_window_days)
        week = resolve_window(reference, cfg.rollup_window_days)
        top_window = resolve_window(reference, cfg.top_agents_window_days)
        released_window = resolve_window(reference, cfg.released_window_days)
        logger.info(
            f"Computing dashboard for {kpi_window.start}..{kpi_window.end} "
            f"with filters {request.dimensions or 'none'}"
        )

        transactions = snapshot.transactions
        _log_orphans(transactions, snapshot)
        dims = request.dimensions

        current_df = filter_transactions(transactions, kpi_window, dims, lookup)
        previous_df = filter_transactions(transactions, kpi_window.previous(), dims, lookup)
        week_df = filter_transactions(transactions, week, dims, lookup)

        kpis, current, previous = compare_periods(current_df, previous_df)

        # Agents missing from the lookup carry no target into any branch total
        known_agents = set(lookup.ids("users"))
        agent_targets = {
            user_id: target
            for user_id, target in targets_for_month(snapshot.revenue_targets, month_key(reference)).items()
            if user_id in known_agents
        }
        agent_ranking = rank_agents(current_df, lookup, agent_targets)
        branch_ranking = rank_branches(current_df, lookup, agent_ranking)
        country_ranking = rank_countries(current_df, lookup, branch_ranking)

        top_agents = top_agents_by_conversion(
            aggregate_agents(filter_transactions(transactions, top_window, dims, lookup), lookup, agent_targets),
            limit=cfg.top_agents_limit,
        )
        released = agents_by_released_amount(
            aggregate_agents(filter_transactions(transactions, released_window, dims, lookup), lookup, agent_targets),
            limit=cfg.released_limit,
        )

        return {
            "filters": {
                "applied": request.applied(),
                **lookup.filter_options(),
                "available_statuses": [s.value for s in STATUS_ORDER],
                "available_countries": lookup.countries(),
            },
            "kpi_metrics": kpis,
            "lead_vs_conversion": build_lead_vs_conversion(week_df, week, lookup),
            "revenue_vs_target": build_revenue_vs_target(
                week_df, week, lookup, agent_targets, cfg.daily_target_divisor
            ),
            "agent_performance": agent_ranking,
            "branch_performance": branch_ranking,
            "country_ranking": country_ranking,
            "branch_agent_rankings": branch_period_leaderboard(branch_ranking, previous_df),
            "country_rankings": country_period_leaderboard(country_ranking, previous_df, lookup),
            "top_performing_agents": top_agents,
            "agent_performance_released": released,
            "charts": build_charts(current_df, week_df, lookup),
            "recommendations": build_recommendations(current, previous, agent_ranking, branch_ranking),
            "rankings": user_positions(snapshot.user_profile, branch_ranking, country_ranking),
            "transaction_list": denormalize_transactions(
                current_df, lookup, limit=cfg.transaction_list_limit
            ),
            "summary": {
                "total_records": len(current_df),
                "date_range": kpi_window.as_dict(),
            },
        }


def compute_dashboard(
    provider: DataProvider,
    filters: Mapping[str, object] | None = None,
    clock: Clock = system_clock,
    config: EngineConfig | None = None,
) -> DashboardResult:
    """One-shot convenience wrapper around DashboardEngine."""
    return DashboardEngine(provider, clock=clock, config=config).compute_dashboard(filters)

import json
from datetime import date

import pytest

from leadboard.config import EngineConfig
from leadboard.domains.dashboard.engine import DashboardEngine, compute_dashboard
from leadboard.domains.dashboard.ingest import DataProvider, InMemoryDataProvider
from leadboard.errors import DataUnavailable, InvalidWindow
from leadboard.utils.types import fixed_clock

from conftest import LOOKUPS, REVENUE_TARGETS, TODAY, TRANSACTIONS

PAYLOAD_KEYS = {
    "filters",
    "kpi_metrics",
    "lead_vs_conversion",
    "revenue_vs_target",
    "agent_performance",
    "branch_performance",
    "country_ranking",
    "branch_agent_rankings",
    "country_rankings",
    "top_performing_agents",
    "agent_performance_released",
    "charts",
    "recommendations",
    "rankings",
    "transaction_list",
    "summary",
}


class UnavailableProvider(DataProvider):
    def __init__(self):
        self.calls = 0

    def snapshot(self):
        self.calls += 1
        raise DataUnavailable("snapshot store is offline")


def test_payload_shape(engine):
    payload = engine.compute_dashboard()
    assert set(payload) == PAYLOAD_KEYS
    assert payload["summary"] == {
        "total_records": 8,
        "date_range": {"from": "2024-01-01", "to": "2024-01-31"},
    }


def test_payload_is_json_ready_and_idempotent(engine):
    first = json.dumps(engine.compute_dashboard({"country": "Kenya"}))
    second = json.dumps(engine.compute_dashboard({"country": "Kenya"}))
    assert first == second


def test_default_dashboard_values(engine):
    payload = engine.compute_dashboard()

    kpis = {k["id"]: k for k in payload["kpi_metrics"]}
    assert kpis["total_leads"]["value"] == 8
    assert kpis["conversion_rate"]["value"] == 62.5
    assert kpis["avg_tat"]["value"] == 2.2

    assert [b["branch_id"] for b in payload["branch_performance"]] == ["B1", "B3", "B2"]
    assert [c["country"] for c in payload["country_ranking"]] == ["Kenya", "Uganda"]
    assert [a["agent_id"] for a in payload["top_performing_agents"]] == ["U1", "U3", "U2"]
    assert payload["top_performing_agents"][2]["conversion_rate"] == 0.0
    assert [a["released_amount"] for a in payload["agent_performance_released"]] == [1750.0, 900.0, 700.0]
    assert payload["rankings"] == {"branch_ranking": 3, "country_ranking": 1}
    assert len(payload["transaction_list"]) == 8
    assert payload["revenue_vs_target"]["branches"]["B1"]["daily_target"][0] == 150.0


def test_filter_options(engine):
    filters = engine.compute_dashboard({"branch_id": "B1", "colour": "red"})["filters"]
    assert filters["applied"] == {"branch_id": "B1"}
    assert [b["branch_id"] for b in filters["available_branches"]] == ["B1", "B2", "B3"]
    assert filters["available_countries"] == ["Kenya", "Uganda"]
    assert filters["available_statuses"][0] == "Open"


def test_reference_day_moves_every_window(engine):
    payload = engine.compute_dashboard({"date": "2023-12-31"})
    assert payload["summary"]["date_range"] == {"from": "2023-12-01", "to": "2023-12-31"}
    assert payload["summary"]["total_records"] == 2
    assert payload["lead_vs_conversion"]["labels"][-1] == "2023-12-31"
    # December targets apply
    agents = {a["user_id"]: a for a in payload["agent_performance"]}
    assert agents["U1"]["target"] == 1000.0
    assert agents["U2"]["target"] == 0


def test_explicit_range(engine):
    payload = engine.compute_dashboard({"date_from": "2024-01-28", "date_to": "2024-01-31"})
    assert payload["summary"]["date_range"] == {"from": "2024-01-28", "to": "2024-01-31"}
    assert [t["id"] for t in payload["transaction_list"]] == ["T1", "T2", "T3", "T5", "T8"]
    total = next(k for k in payload["kpi_metrics"] if k["id"] == "total_leads")
    # previous window is 2024-01-24..2024-01-27
    assert total["previous_value"] == 2


def test_dimension_filter_narrows_everything(engine):
    payload = engine.compute_dashboard({"branch_id": "B3"})
    assert payload["summary"]["total_records"] == 2
    branches = {b["branch_id"]: b for b in payload["branch_performance"]}
    assert branches["B1"]["total_leads"] == 0
    assert branches["B3"]["total_revenue"] == 900.0


def test_unknown_branch_counts_in_kpis_only(engine):
    payload = engine.compute_dashboard()
    total = next(k for k in payload["kpi_metrics"] if k["id"] == "total_leads")["value"]
    assert total == 8
    assert sum(b["total_leads"] for b in payload["branch_performance"]) == 7
    listed = {t["id"]: t for t in payload["transaction_list"]}
    assert listed["T8"]["branch_name"] == "N/A"


def test_unknown_agent_target_is_ignored_everywhere():
    stray = {
        "txn_id": "T12", "branch_id": "B1", "user_id": "U9", "product_id": "P1",
        "amount": 400, "status": "Open", "date": "2024-01-30",
    }
    provider = InMemoryDataProvider(
        [*TRANSACTIONS, stray],
        lookups=LOOKUPS,
        revenue_targets=[*REVENUE_TARGETS, {"user_id": "U9", "month": "2024-01", "target_amount": 3000}],
    )
    payload = compute_dashboard(provider, clock=fixed_clock(TODAY))

    nairobi = next(b for b in payload["branch_performance"] if b["branch_id"] == "B1")
    daily = payload["revenue_vs_target"]["branches"]["B1"]["daily_target"]
    assert nairobi["target"] == 4500.0
    assert daily == [150.0] * 7
    assert daily[0] == round(nairobi["target"] / 30, 2)


def test_transaction_list_limit_from_config(provider):
    engine = DashboardEngine(provider, clock=fixed_clock(TODAY), config=EngineConfig(transaction_list_limit=3))
    assert len(engine.compute_dashboard()["transaction_list"]) == 3


def test_two_record_scenario():
    provider = InMemoryDataProvider(
        [
            {"txn_id": "A", "amount": 100, "status": "Closed", "date": "2024-01-01"},
            {"txn_id": "B", "amount": 50, "status": "Open", "date": "2024-01-02"},
        ],
        lookups=LOOKUPS,
    )
    payload = compute_dashboard(
        provider,
        {"date_from": "2024-01-01", "date_to": "2024-01-02"},
        clock=fixed_clock(date(2024, 3, 1)),
    )
    kpis = {k["id"]: k for k in payload["kpi_metrics"]}
    assert kpis["total_leads"]["value"] == 2
    assert kpis["conversion_rate"]["value"] == 50.0
    assert kpis["total_leads"]["change_percentage"] == 100
    assert kpis["total_leads"]["change_direction"] == "up"


def test_empty_snapshot_degrades_to_zeros():
    provider = InMemoryDataProvider([], lookups=LOOKUPS)
    payload = compute_dashboard(provider, clock=fixed_clock(TODAY))
    assert all(k["value"] == 0 for k in payload["kpi_metrics"])
    assert payload["transaction_list"] == []
    assert payload["recommendations"][0]["title"] == "Keep the momentum"


@pytest.mark.parametrize(
    "filters",
    [
        {"date_from": "2024-01-31", "date_to": "2024-01-01"},
        {"date_from": "2024-01-01"},
        {"date": "yesterday"},
    ],
)
def test_invalid_window_is_raised_before_reading_data(filters):
    provider = UnavailableProvider()
    engine = DashboardEngine(provider, clock=fixed_clock(TODAY))
    with pytest.raises(InvalidWindow):
        engine.compute_dashboard(filters)
    assert provider.calls == 0


def test_data_unavailable_propagates():
    provider = UnavailableProvider()
    with pytest.raises(DataUnavailable):
        compute_dashboard(provider, clock=fixed_clock(TODAY))
    assert provider.calls == 1

"""Shared fixtures: a small lead ledger pinned to 2024-01-31."""

import json
from datetime import date

import pytest

from leadboard.config import EngineConfig
from leadboard.domains.dashboard.engine import DashboardEngine
from leadboard.domains.dashboard.ingest import InMemoryDataProvider
from leadboard.domains.dashboard.lookup import DimensionLookup
from leadboard.utils.types import fixed_clock

TODAY = date(2024, 1, 31)

LOOKUPS = {
    "branches": [
        {"branch_id": "B1", "name": "Nairobi Central", "region": "Central", "country": "Kenya"},
        {"branch_id": "B2", "name": "Mombasa", "region": "Coast", "country": "Kenya"},
        {"branch_id": "B3", "name": "Kampala", "region": "Central", "country": "Uganda"},
    ],
    "users": [
        {"user_id": "U1", "first_name": "Alice", "last_name": "Wanjiru", "role": "Agent"},
        {"user_id": "U2", "first_name": "Brian", "last_name": "Otieno", "role": "Agent"},
        {"user_id": "U3", "first_name": "Carol", "last_name": "Nakato", "role": "Agent"},
        {"user_id": "U4", "first_name": "Dan", "last_name": "Mwangi", "role": "Agent"},
    ],
    "products": [
        {"product_id": "P1", "name": "Personal Loan"},
        {"product_id": "P2", "name": "Mortgage"},
    ],
    "campaigns": [{"campaign_id": "C1", "name": "New Year Drive"}],
    "segments": [{"segment_id": "S1", "name": "Retail"}],
}


def _txn(txn_id, branch, user, product, amount, status, day, closed=None):
    return {
        "txn_id": txn_id,
        "branch_id": branch,
        "user_id": user,
        "product_id": product,
        "campaign_id": "C1",
        "segment_id": "S1",
        "customer_name": f"Customer {txn_id}",
        "amount": amount,
        "status": status,
        "date": day,
        "closed_date": closed,
    }


TRANSACTIONS = [
    _txn("T1", "B1", "U1", "P1", 1000, "Closed", "2024-01-28", "2024-01-30"),
    _txn("T2", "B1", "U1", "P2", 500, "Product/Service Sold", "2024-01-29", "2024-01-29"),
    _txn("T3", "B1", "U2", "P1", 300, "Open", "2024-01-30"),
    _txn("T4", "B2", "U2", "P1", 700, "Closed", "2024-01-10", "2024-01-14"),
    _txn("T5", "B2", "U2", "P2", 200, "To Callback Later", "2024-01-31"),
    _txn("T6", "B3", "U3", "P1", 400, "Rejected", "2024-01-26"),
    # closed before it was created: excluded from turnaround
    _txn("T7", "B3", "U3", "P2", 900, "Closed", "2024-01-27", "2024-01-25"),
    # branch missing from the lookup
    _txn("T8", "B9", "U1", "P1", 250, "Closed", "2024-01-30", "2024-02-02"),
    # previous period
    _txn("T9", "B1", "U1", "P1", 800, "Closed", "2023-12-15", "2023-12-20"),
    _txn("T10", "B2", "U2", "P1", 100, "Open", "2023-12-20"),
    # outside every window
    _txn("T11", "B1", "U1", "P1", 5000, "Closed", "2023-10-01", "2023-10-02"),
]

REVENUE_TARGETS = [
    {"user_id": "U1", "month": "2024-01", "target_amount": 3000},
    {"user_id": "U2", "month": "2024-01", "target_amount": 1500},
    {"user_id": "U3", "month": "2024-01", "target_amount": 600},
    {"user_id": "U1", "month": "2023-12", "target_amount": 1000},
]

USER_PROFILE = {
    "user_id": "U2",
    "first_name": "Brian",
    "last_name": "Otieno",
    "role": "Agent",
    "primary_branch_id": "B2",
}

NOTIFICATIONS = [
    {"id": 1, "type": "info", "message": "Targets published", "link": "/targets",
     "timestamp": "2024-01-02T08:00:00", "read": True},
    {"id": 2, "type": "alert", "message": "Lead reassigned", "link": "/leads/T3",
     "timestamp": "2024-01-30T09:30:00", "read": False},
]

BANNER = {"active": True, "text": "Q1 kickoff", "style": "info", "link_url": "/kickoff"}


def snapshot_document() -> dict:
    return {
        "transactions": TRANSACTIONS,
        "lookups": LOOKUPS,
        "revenue_targets": REVENUE_TARGETS,
        "user_profile": USER_PROFILE,
        "notifications": NOTIFICATIONS,
        "banner": BANNER,
    }


@pytest.fixture
def provider():
    return InMemoryDataProvider(
        TRANSACTIONS,
        lookups=LOOKUPS,
        revenue_targets=REVENUE_TARGETS,
        user_profile=USER_PROFILE,
        notifications=NOTIFICATIONS,
        banner=BANNER,
    )


@pytest.fixture
def transactions(provider):
    return provider.get_transactions()


@pytest.fixture
def lookup(provider):
    return DimensionLookup(provider.get_lookups())


@pytest.fixture
def engine(provider):
    return DashboardEngine(
        provider,
        clock=fixed_clock(TODAY),
        config=EngineConfig(transaction_list_limit=None),
    )


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "mockData.json"
    path.write_text(json.dumps(snapshot_document()))
    return path

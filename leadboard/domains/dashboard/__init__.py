"""Dashboard domain: lead KPIs, daily rollups and leaderboards."""

from leadboard.domains.dashboard.engine import DashboardEngine, compute_dashboard
from leadboard.domains.dashboard.ingest import (
    DataProvider,
    InMemoryDataProvider,
    JsonDataProvider,
    Snapshot,
)
from leadboard.domains.dashboard.models import (
    BRANCH_SCHEMA,
    LOOKUP_KEYS,
    REVENUE_TARGET_SCHEMA,
    TRANSACTION_SCHEMA,
    USER_SCHEMA,
)
from leadboard.domains.dashboard.export import write_dashboard_output
from leadboard.errors import DataUnavailable
from leadboard.utils.validators import validate_dataframe, validate_key_column


def validate(provider: DataProvider) -> dict:
    """Validate that the snapshot is reachable and well-formed."""
    try:
        snapshot = provider.snapshot()
    except DataUnavailable as exc:
        return {"status": "error", "message": str(exc)}

    checks = {
        "transactions": (snapshot.transactions, TRANSACTION_SCHEMA),
        "branches": (snapshot.lookups["branches"], BRANCH_SCHEMA),
        "users": (snapshot.lookups["users"], USER_SCHEMA),
        "revenue_targets": (snapshot.revenue_targets, REVENUE_TARGET_SCHEMA),
    }
    errors = []
    for name, (frame, schema) in checks.items():
        errors.extend(validate_dataframe(frame, schema, name)["errors"])

    # Products, campaigns and segments only need a usable key
    for kind in ("products", "campaigns", "segments"):
        errors.extend(validate_key_column(snapshot.lookups[kind], LOOKUP_KEYS[kind], kind)["errors"])

    match errors:
        case []:
            return {"status": "ok", "row_count": len(snapshot.transactions)}
        case errs:
            return {"status": "error", "message": "; ".join(errs[:3]), "error_count": len(errs)}


def run(
    provider: DataProvider,
    filters: dict | None = None,
    output: str | None = None,
    **engine_kwargs,
) -> dict:
    """Compute the dashboard and optionally write it to disk."""
    payload = compute_dashboard(provider, filters, **engine_kwargs)
    if output:
        write_dashboard_output(payload, output)
    return payload

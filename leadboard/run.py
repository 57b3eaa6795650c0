"""Command-line runner: validate a snapshot or compute a dashboard payload."""

import argparse
import json
import logging
import sys

from rich.console import Console
from rich.table import Table

from leadboard.config import load_engine_config
from leadboard.domains import dashboard, session
from leadboard.domains.dashboard.ingest import DataProvider, JsonDataProvider
from leadboard.errors import DashboardError, error_payload
from leadboard.utils.types import DashboardResult

type DomainResult = dict[str, bool | str | int]

console = Console()

FILTER_ARGS = ("branch_id", "user_id", "product_id", "campaign_id", "segment_id", "status", "country")


def validate_all(provider: DataProvider) -> list[DomainResult]:
    match dashboard.validate(provider):
        case {"status": "ok", **rest}:
            return [{"domain": "dashboard", "valid": True, **rest}]
        case {"status": "error", "message": msg}:
            return [{"domain": "dashboard", "valid": False, "error": msg}]
        case _:
            return [{"domain": "dashboard", "valid": False, "error": "Unknown validation result"}]


def build_filters(args: argparse.Namespace) -> dict[str, str]:
    filters = {}
    for key in ("date", "date_from", "date_to", *FILTER_ARGS):
        value = getattr(args, key, None)
        if value:
            filters[key] = value
    return filters


def print_dashboard(payload: DashboardResult) -> None:
    summary = payload["summary"]
    table = Table(title=f"KPIs {summary['date_range']['from']} .. {summary['date_range']['to']}")
    table.add_column("KPI")
    table.add_column("Value", justify="right")
    table.add_column("Previous", justify="right")
    table.add_column("Change", justify="right")

    for kpi in payload["kpi_metrics"]:
        arrow = "[green]▲[/green]" if kpi["change_direction"] == "up" else "[red]▼[/red]"
        table.add_row(
            kpi["label"],
            f"{kpi['value']} {kpi['unit']}",
            str(kpi["previous_value"]),
            f"{arrow} {kpi['change_percentage']}%",
        )
    console.print(table)

    branches = Table(title="Branch ranking")
    branches.add_column("#", justify="right")
    branches.add_column("Branch")
    branches.add_column("Revenue", justify="right")
    branches.add_column("Conversion", justify="right")
    branches.add_column("Achievement", justify="right")
    for rank, row in enumerate(payload["branch_performance"], start=1):
        branches.add_row(
            str(rank),
            row["branch_name"],
            f"{row['total_revenue']:,.2f}",
            f"{row['conversion_rate']}%",
            f"{row['achievement_percent']}%",
        )
    console.print(branches)
    console.print(f"[bold]{summary['total_records']}[/bold] records in window")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Compute the lead performance dashboard")
    parser.add_argument("--env", default="development", help="Configuration environment")
    parser.add_argument("--data", type=str, help="Path to the JSON snapshot")
    parser.add_argument("--validate", action="store_true", help="Only validate, don't compute")
    parser.add_argument("--session", action="store_true", help="Print session data instead")
    parser.add_argument("--date", type=str, help="Reference day (YYYY-MM-DD)")
    parser.add_argument("--date-from", dest="date_from", type=str)
    parser.add_argument("--date-to", dest="date_to", type=str)
    for key in FILTER_ARGS:
        parser.add_argument(f"--{key.replace('_', '-')}", dest=key, type=str)
    parser.add_argument("--output", type=str, help="Write the payload as JSON to this path")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_engine_config(args.env)
    provider = JsonDataProvider(args.data or config.data.snapshot_path)

    if args.validate:
        results = validate_all(provider)
        table = Table(title="Validation Results")
        table.add_column("Domain")
        table.add_column("Valid")
        table.add_column("Details")

        for r in results:
            status = "[green]✓[/green]" if r["valid"] else "[red]✗[/red]"
            detail = r.get("error", f"{r.get('row_count', 0)} transactions")
            table.add_row(r["domain"], status, detail)

        console.print(table)
        if not all(r["valid"] for r in results):
            sys.exit(1)
        return

    try:
        if args.session:
            console.print_json(json.dumps(session.run(provider)))
            return
        payload = dashboard.run(
            provider,
            filters=build_filters(args),
            output=args.output,
            config=config.engine,
        )
    except DashboardError as exc:
        status, body = error_payload(exc)
        console.print(f"[red]{status} {body['code']}: {body['message']}[/red]")
        sys.exit(2)

    print_dashboard(payload)


if __name__ == "__main__":
    main()

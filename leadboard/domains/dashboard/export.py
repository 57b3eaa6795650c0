"""Export dashboard payloads to disk."""

from pathlib import Path

from rich.console import Console

from leadboard.utils.io import write_output
from leadboard.utils.types import DashboardResult

console = Console()


def write_dashboard_output(payload: DashboardResult, path: str | Path, fmt: str = "json") -> Path:
    """Write a payload, choosing the suffix from the format."""
    path = Path(path)
    match fmt:
        case "json":
            target = path.with_suffix(".json")
        case "jsonl":
            target = path.with_suffix(".jsonl")
        case other:
            raise ValueError(f"Export format not supported: {other}")

    write_output(payload, target, fmt=fmt)
    summary = payload.get("summary", {})
    console.print(
        f"  Exported dashboard for {summary.get('date_range', {}).get('from')}"
        f"..{summary.get('date_range', {}).get('to')} ({summary.get('total_records', 0)} records)"
    )
    return target

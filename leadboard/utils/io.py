"""File I/O utilities for reading snapshots and writing engine output."""

import json
from pathlib import Path

import pandas as pd
from rich.console import Console

type FilePath = str | Path

console = Console()


def read_json_file(path: FilePath) -> dict:
    """Read a JSON document from disk."""
    path = Path(path)
    console.print(f"  Reading {path.name} ({path.stat().st_size / 1024:.0f} KB)")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def records_to_frame(records: list[dict] | None, columns: list[str]) -> pd.DataFrame:
    """Build a DataFrame with a guaranteed column set, even from no records."""
    df = pd.DataFrame.from_records(records or [])
    return df.reindex(columns=list(dict.fromkeys([*columns, *df.columns])))


def frame_to_records(df: pd.DataFrame) -> list[dict]:
    """Convert a DataFrame to JSON-ready records with nulls as None."""
    cleaned = df.astype(object).where(df.notna(), None)
    return cleaned.to_dict("records")


def write_output(payload: dict, path: FilePath, fmt: str = "json") -> None:
    """Write an engine payload to the specified format."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    match fmt:
        case "json":
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, sort_keys=False)
        case "jsonl":
            with open(path, "w", encoding="utf-8") as f:
                for key, value in payload.items():
                    f.write(json.dumps({"section": key, "data": value}) + "\n")
        case other:
            raise ValueError(f"Unsupported output format: {other}")

    console.print(f"  Wrote {len(payload)} sections to {path}")

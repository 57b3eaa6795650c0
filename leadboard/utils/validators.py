"""Snapshot health checks built on pandera, reported as result dicts."""

import pandas as pd
import pandera as pa
from pandera import DataFrameSchema

type ValidationResult = dict[str, str | bool | list[str]]


def _result(errors: list[str]) -> ValidationResult:
    match errors:
        case []:
            return {"valid": True, "status": "ok", "errors": []}
        case _:
            return {"valid": False, "status": "error", "errors": errors}


def _describe(case: dict) -> str:
    match case:
        case {"column": str() as col, "check": check, "failure_case": value}:
            return f"column '{col}' failed {check}: {value}"
        case _:
            return f"schema failure: {case}"


def validate_dataframe(df: pd.DataFrame, schema: DataFrameSchema, name: str | None = None) -> ValidationResult:
    """Run a pandera schema lazily and collect every failure case."""
    prefix = f"{name}: " if name else ""
    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        cases = exc.failure_cases.to_dict("records")
        return _result([prefix + _describe(case) for case in cases])
    return _result([])


def validate_key_column(df: pd.DataFrame, key: str, name: str) -> ValidationResult:
    """A natural key must be present on every row and unique."""
    errors = []
    missing = int(df[key].isna().sum())
    if missing:
        errors.append(f"{name}: {missing} rows without '{key}'")
    duplicated = int(df[key].dropna().duplicated().sum())
    if duplicated:
        errors.append(f"{name}: {duplicated} duplicate '{key}' values")
    return _result(errors)


def find_orphans(child: pd.DataFrame, parent: pd.DataFrame, key: str) -> list[str]:
    """Sorted non-null ``key`` values of ``child`` that ``parent`` does not know."""
    known = set(parent[key].dropna())
    return sorted({str(k) for k in child[key].dropna() if k not in known})


def validate_referential_integrity(child: pd.DataFrame, parent: pd.DataFrame, key: str) -> ValidationResult:
    orphans = find_orphans(child, parent, key)
    if not orphans:
        return _result([])
    return _result([f"{len(orphans)} unknown {key} values, e.g. {orphans[:5]}"])

"""Read-only data providers feeding the dashboard engine.

A provider owns one immutable ``Snapshot``: the transaction ledger, the
lookup dimensions, the monthly revenue targets and the session data. The
JSON provider loads it lazily on first access and keeps it for its
lifetime; ``reload`` builds a complete replacement before swapping the
reference, so a computation holding the old snapshot is unaffected.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from leadboard.domains.dashboard.models import (
    LOOKUP_COLUMNS,
    LOOKUP_KEYS,
    TARGET_COLUMNS,
    TRANSACTION_COLUMNS,
)
from leadboard.errors import DataUnavailable
from leadboard.utils.io import read_json_file, records_to_frame
from leadboard.utils.transforms import to_calendar_day
from leadboard.utils.types import Lookups, Record, RecordList

logger = logging.getLogger(__name__)

ID_COLUMNS = ["txn_id", "branch_id", "user_id", "product_id", "campaign_id", "segment_id"]


@dataclass(frozen=True)
class Snapshot:
    transactions: pd.DataFrame
    lookups: Lookups
    revenue_targets: pd.DataFrame
    user_profile: Record = field(default_factory=dict)
    notifications: RecordList = field(default_factory=list)
    banner: Record = field(default_factory=dict)


def _as_id(value: object) -> str | None:
    if value is None or value is pd.NA:
        return None
    if isinstance(value, float):
        # ids mixed with nulls arrive as floats
        if pd.isna(value):
            return None
        if value.is_integer():
            return str(int(value))
    return str(value)


def _as_month(value: object) -> str | None:
    key = _as_id(value)
    return key[:7] if key else None


def prepare_transactions(records: RecordList | None) -> pd.DataFrame:
    """Normalize raw transaction records into the engine's frame layout."""
    df = records_to_frame(records, TRANSACTION_COLUMNS)
    if df["txn_id"].isna().all() and "id" in df.columns:
        df["txn_id"] = df["id"]

    for col in ID_COLUMNS:
        df[col] = df[col].map(_as_id).astype(object)

    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0).astype("float64")
    df["date"] = to_calendar_day(df["date"])
    df["closed_date"] = to_calendar_day(df["closed_date"])

    unparsed = int(df["date"].isna().sum())
    if unparsed:
        logger.warning(f"{unparsed} transactions have no usable creation date")
    return df.reset_index(drop=True)


def prepare_lookups(raw: dict | None) -> Lookups:
    """Build one frame per lookup dimension, keyed columns as strings."""
    raw = raw or {}
    lookups: Lookups = {}
    for kind, columns in LOOKUP_COLUMNS.items():
        frame = records_to_frame(raw.get(kind), columns)
        key = LOOKUP_KEYS[kind]
        frame[key] = frame[key].map(_as_id).astype(object)
        lookups[kind] = frame.reset_index(drop=True)
    return lookups


def prepare_revenue_targets(records: RecordList | None) -> pd.DataFrame:
    df = records_to_frame(records, TARGET_COLUMNS)
    df["user_id"] = df["user_id"].map(_as_id).astype(object)
    df["month"] = df["month"].map(_as_month).astype(object)
    df["target_amount"] = (
        pd.to_numeric(df["target_amount"], errors="coerce").fillna(0.0).astype("float64")
    )
    return df.reset_index(drop=True)


def build_snapshot(document: dict) -> Snapshot:
    """Build a snapshot from the dashboard JSON document layout."""
    if not isinstance(document, dict) or "transactions" not in document:
        raise DataUnavailable("Snapshot document has no 'transactions' collection")

    # Older exports nest targets under "metrics"
    targets = document.get("revenue_targets")
    if targets is None:
        metrics = document.get("metrics")
        targets = metrics.get("revenue_targets", []) if isinstance(metrics, dict) else []

    return Snapshot(
        transactions=prepare_transactions(document["transactions"]),
        lookups=prepare_lookups(document.get("lookups")),
        revenue_targets=prepare_revenue_targets(targets),
        user_profile=document.get("user_profile") or document.get("user") or {},
        notifications=list(document.get("notifications") or []),
        banner=document.get("banner") or {},
    )


class DataProvider(ABC):
    """Read-only source of one dashboard snapshot."""

    @abstractmethod
    def snapshot(self) -> Snapshot:
        ...

    def get_transactions(self) -> pd.DataFrame:
        return self.snapshot().transactions

    def get_lookups(self) -> Lookups:
        return self.snapshot().lookups

    def get_revenue_targets(self) -> pd.DataFrame:
        return self.snapshot().revenue_targets

    def get_user_profile(self) -> Record:
        return self.snapshot().user_profile

    def get_notifications(self) -> RecordList:
        return self.snapshot().notifications

    def get_banner(self) -> Record:
        return self.snapshot().banner


class InMemoryDataProvider(DataProvider):
    """Provider over records already in memory, mostly for fixtures."""

    def __init__(
        self,
        transactions: RecordList,
        lookups: dict | None = None,
        revenue_targets: RecordList | None = None,
        user_profile: Record | None = None,
        notifications: RecordList | None = None,
        banner: Record | None = None,
    ):
        self._snapshot = build_snapshot({
            "transactions": transactions,
            "lookups": lookups or {},
            "revenue_targets": revenue_targets or [],
            "user_profile": user_profile or {},
            "notifications": notifications or [],
            "banner": banner or {},
        })

    def snapshot(self) -> Snapshot:
        return self._snapshot


class JsonDataProvider(DataProvider):
    """Provider backed by a JSON snapshot file, loaded once on first access."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._snapshot: Snapshot | None = None
        self._lock = threading.Lock()

    def _read(self) -> Snapshot:
        logger.info(f"Loading dashboard snapshot from {self.path}")
        try:
            document = read_json_file(self.path)
        except FileNotFoundError as exc:
            raise DataUnavailable(f"Snapshot file not found: {self.path}") from exc
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DataUnavailable(f"Could not read snapshot {self.path}: {exc}") from exc

        snapshot = build_snapshot(document)
        logger.info(
            f"Loaded {len(snapshot.transactions):,} transactions, "
            f"{len(snapshot.lookups['branches'])} branches, "
            f"{len(snapshot.lookups['users'])} agents"
        )
        return snapshot

    def snapshot(self) -> Snapshot:
        current = self._snapshot
        if current is not None:
            return current
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._read()
            return self._snapshot

    def reload(self) -> Snapshot:
        """Re-read the file and swap in the new snapshot as a whole."""
        fresh = self._read()
        with self._lock:
            self._snapshot = fresh
        return fresh

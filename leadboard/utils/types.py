"""Shared type definitions for the dashboard engine."""

from collections.abc import Callable
from datetime import date
from enum import StrEnum

import pandas as pd


type Clock = Callable[[], date]
type Record = dict[str, object]
type RecordList = list[Record]
type FilterMap = dict[str, str]
type DashboardResult = dict[str, object]
type Lookups = dict[str, pd.DataFrame]


class LeadStatus(StrEnum):
    OPEN = "Open"
    PROCESSING = "Processing"
    CALLBACK = "To Callback Later"
    SOLD = "Product/Service Sold"
    CLOSED = "Closed"
    REJECTED = "Rejected"
    PENDING = "Pending"


class ChangeDirection(StrEnum):
    UP = "up"
    DOWN = "down"


# Display order for status breakdowns and filter options
STATUS_ORDER = [
    LeadStatus.OPEN,
    LeadStatus.PROCESSING,
    LeadStatus.PENDING,
    LeadStatus.CALLBACK,
    LeadStatus.SOLD,
    LeadStatus.CLOSED,
    LeadStatus.REJECTED,
]

CLOSED_STATUSES = frozenset({LeadStatus.SOLD, LeadStatus.CLOSED})
CONTACTED_STATUSES = frozenset({LeadStatus.CALLBACK, LeadStatus.SOLD, LeadStatus.CLOSED})


def system_clock() -> date:
    return date.today()


def fixed_clock(today: date) -> Clock:
    """Return a clock pinned to a single day."""
    return lambda: today

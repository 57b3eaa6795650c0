"""Calendar-day windows and their preceding comparison periods."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta

import pandas as pd

from leadboard.errors import InvalidWindow

type DateLike = date | datetime | str


@dataclass(frozen=True)
class PeriodWindow:
    """Inclusive [start, end] range of whole days."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidWindow(f"Window start {self.start} is after end {self.end}")

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def previous(self) -> "PeriodWindow":
        """The equal-length window ending the day before this one starts."""
        end = self.start - timedelta(days=1)
        return PeriodWindow(start=end - timedelta(days=self.days - 1), end=end)

    def dates(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range(self.days)]

    def bounds(self) -> tuple[pd.Timestamp, pd.Timestamp]:
        return pd.Timestamp(self.start), pd.Timestamp(self.end)

    def as_dict(self) -> dict[str, str]:
        return {"from": self.start.isoformat(), "to": self.end.isoformat()}


def parse_day(value: DateLike) -> date:
    """Coerce a date, datetime or ISO string to a calendar day."""
    match value:
        case datetime():
            return value.date()
        case date():
            return value
        case str() if value.strip():
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError as exc:
                raise InvalidWindow(f"Unparseable date: {value!r}") from exc
        case _:
            raise InvalidWindow(f"Unparseable date: {value!r}")


def resolve_window(reference: DateLike, length: int) -> PeriodWindow:
    """Trailing window of ``length`` days ending on the reference day."""
    if length <= 0:
        raise InvalidWindow(f"Window length must be positive, got {length}")
    end = parse_day(reference)
    return PeriodWindow(start=end - timedelta(days=length - 1), end=end)


def resolve_range(date_from: DateLike, date_to: DateLike) -> PeriodWindow:
    """Explicit inclusive range; an inverted range is rejected."""
    return PeriodWindow(start=parse_day(date_from), end=parse_day(date_to))


def resolve_comparison(reference: DateLike, length: int) -> tuple[PeriodWindow, PeriodWindow]:
    current = resolve_window(reference, length)
    return current, current.previous()


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")

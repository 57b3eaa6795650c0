"""Common data transformation utilities."""

import pandas as pd

type Number = int | float


def to_calendar_day(series: pd.Series) -> pd.Series:
    """Parse dates at whole-day precision; time-of-day and zone suffixes are dropped.

    Anything that does not start with a YYYY-MM-DD day becomes NaT.
    """
    days = series.astype("string").str.slice(0, 10)
    return pd.to_datetime(days, format="%Y-%m-%d", errors="coerce")


def day_difference(later: pd.Series, earlier: pd.Series) -> pd.Series:
    """Whole days between two day-precision columns, NaN where either side is missing."""
    return (later - earlier).dt.days.astype("float64")


def safe_divide(numerator: Number, denominator: Number) -> float:
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator)


def percent(numerator: Number, denominator: Number) -> float:
    return safe_divide(numerator, denominator) * 100

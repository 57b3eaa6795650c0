"""Error kinds surfaced to callers of the dashboard engine.

Only structural failures are exceptions. Arithmetic edge cases inside the
aggregation (empty sets, missing targets, unknown foreign keys) resolve to
documented defaults and never reach this module.
"""

from datetime import datetime

type ErrorPayload = dict[str, str]


class DashboardError(Exception):
    code = "dashboard_error"
    http_status = 500


class InvalidWindow(DashboardError):
    """A date window that is empty, inverted, ambiguous or unparseable."""

    code = "invalid_window"
    http_status = 400


class DataUnavailable(DashboardError):
    """The data provider could not produce a snapshot."""

    code = "data_unavailable"
    http_status = 503


def error_payload(exc: DashboardError) -> tuple[int, ErrorPayload]:
    """Render an engine error as (status, body) for an HTTP host."""
    return exc.http_status, {
        "code": exc.code,
        "message": str(exc),
        "timestamp": datetime.now().isoformat(timespec="seconds"),
    }

"""Shared utilities for the dashboard engine."""

from leadboard.utils.io import read_json_file, write_output
from leadboard.utils.transforms import to_calendar_day, safe_divide, percent
from leadboard.utils.validators import validate_dataframe
from leadboard.utils.types import Clock, DashboardResult, LeadStatus

"""
agent_reports/domain/timeframe.py

Activity timeframe selection: a single month or a custom date range.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Union

from agent_reports.errors import InputValidationError

TIMEFRAME_MONTH = "month"
TIMEFRAME_CUSTOM = "custom"
TIMEFRAME_MODES: tuple[str, ...] = (TIMEFRAME_MONTH, TIMEFRAME_CUSTOM)


@dataclass(frozen=True)
class MonthTimeframe:
    month: str

    @property
    def mode(self) -> str:
        return TIMEFRAME_MONTH

    @property
    def label(self) -> str:
        return self.month


@dataclass(frozen=True)
class CustomRangeTimeframe:
    start: str
    end: str

    @property
    def mode(self) -> str:
        return TIMEFRAME_CUSTOM

    @property
    def label(self) -> str:
        return f"{self.start} to {self.end}"


TimeframeSelection = Union[MonthTimeframe, CustomRangeTimeframe]


def normalize_mode(mode: str | None) -> str:
    """
    Lower-case the mode; anything other than ``custom`` means ``month``.
    """

    value = (mode or TIMEFRAME_MONTH).strip().lower()
    return TIMEFRAME_CUSTOM if value == TIMEFRAME_CUSTOM else TIMEFRAME_MONTH


def build_timeframe(
    *,
    mode: str | None,
    month: str | None = "",
    start_date: str | None = "",
    end_date: str | None = "",
) -> TimeframeSelection:
    """
    Validate the timeframe inputs and return the active variant.

    Dates are ISO ``YYYY-MM-DD`` strings, so lexical order is date order.
    """

    if normalize_mode(mode) == TIMEFRAME_MONTH:
        month_value = (month or "").strip()
        if not month_value:
            raise InputValidationError("Select a month first.")
        return MonthTimeframe(month=month_value)

    start = (start_date or "").strip()
    end = (end_date or "").strip()
    if not start or not end:
        raise InputValidationError("Select both custom start and end dates.")
    if start > end:
        raise InputValidationError("Custom start date cannot be after end date.")
    return CustomRangeTimeframe(start=start, end=end)


def default_month(today: date) -> str:
    return f"{today.year}-{today.month:02d}"


def default_custom_range(today: date) -> tuple[str, str]:
    """
    First day of the current month through today.
    """

    return today.replace(day=1).isoformat(), today.isoformat()

"""
agent_reports/presentation/messages.py

User-visible status lines and report summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from agent_reports.domain.report_pipeline import ActivityReport, CompareReport
from agent_reports.errors import (
    HttpStatusError,
    InputValidationError,
    ReportClientError,
    RequestTimedOutError,
)

Tone = Literal["info", "good", "bad"]


@dataclass(frozen=True)
class StatusMessage:
    text: str
    tone: Tone = "info"

    @classmethod
    def info(cls, text: str) -> "StatusMessage":
        return cls(text=text, tone="info")

    @classmethod
    def good(cls, text: str) -> "StatusMessage":
        return cls(text=text, tone="good")

    @classmethod
    def bad(cls, text: str) -> "StatusMessage":
        return cls(text=text, tone="bad")


def failure_message(label: str, exc: ReportClientError, *, crash_verb: str = "crashed") -> StatusMessage:
    """
    Map an action failure to its status line.

    Timeouts read differently from server rejections so the user can tell
    an unreachable backend from bad input.
    """

    if isinstance(exc, InputValidationError):
        return StatusMessage.bad(str(exc))
    if isinstance(exc, RequestTimedOutError):
        return StatusMessage.bad(f"{label} timed out (backend not responding)")
    if isinstance(exc, HttpStatusError):
        return StatusMessage.bad(exc.describe(label))
    return StatusMessage.bad(f"{label} {crash_verb}: {exc}")


def _truncation_suffix(shown: int, total: int) -> str:
    return f" Showing first {shown} row(s)." if total > shown else ""


def compare_summary(report: CompareReport) -> str:
    return (
        f"Compared {report.compared_count} businesses. "
        f"Found {report.inactive_count} inactive/not-seen businesses."
        f"{_truncation_suffix(report.preview_shown, report.preview_total)}"
    )


def activity_summary(report: ActivityReport) -> str:
    return (
        f"{report.timeframe_label} | Type: {report.activity_type.upper()} | "
        f"Rows: {report.total_rows}."
        f"{_truncation_suffix(report.preview_shown, report.preview_total)}"
    )


def plural_files(count: int) -> str:
    return f"{count} file{'s' if count != 1 else ''}"

"""
tests/test_report_pipeline_state.py

Pure transition tests for the compare -> activity -> download state
machine. No I/O: every call result is simulated by applying the matching
completion transition directly.
"""

from __future__ import annotations

import pytest

from agent_reports.domain.downloads import ReportKind
from agent_reports.domain.report_pipeline import (
    ActivityReport,
    CompareReport,
    PipelineAction,
    PipelineStage,
    PipelineState,
    begin_activity,
    begin_compare,
    begin_download,
    complete_activity,
    complete_compare,
    fail_activity,
    fail_compare,
    finish_download,
)
from agent_reports.domain.timeframe import MonthTimeframe
from agent_reports.errors import InputValidationError


def _compared(report_id: str = "r1") -> PipelineState:
    state, ticket = begin_compare(PipelineState(), "visits.xlsx")
    state, applied = complete_compare(state, ticket, CompareReport(report_id=report_id))
    assert applied
    return state


def _activity(report_id: str, activity_report_id: str | None = "a1") -> ActivityReport:
    return ActivityReport(
        report_id=report_id,
        activity_report_id=activity_report_id,
        timeframe=MonthTimeframe(month="2024-05"),
        activity_type="all",
    )


def _activity_ready() -> PipelineState:
    state, ticket = begin_activity(_compared())
    state, applied = complete_activity(state, ticket, _activity("r1"))
    assert applied
    return state


@pytest.mark.parametrize("filename", ["report.pdf", "data.xls", "noext", "archive.csv.zip"])
def test_compare_rejects_unsupported_extension(filename: str) -> None:
    with pytest.raises(InputValidationError, match="Compare file must be .xlsx or .csv"):
        begin_compare(PipelineState(), filename)


def test_compare_rejects_missing_file() -> None:
    with pytest.raises(InputValidationError, match="Pick a compare file first"):
        begin_compare(PipelineState(), "")


def test_compare_accepts_uppercase_extension() -> None:
    state, _ = begin_compare(PipelineState(), "VISITS.CSV")

    assert state.stage is PipelineStage.COMPARING


def test_starting_compare_clears_identifiers_before_any_response() -> None:
    state = _activity_ready()
    assert (state.report_id, state.activity_report_id) == ("r1", "a1")

    state, ticket = begin_compare(state, "next.csv")

    assert state.report_id is None
    assert state.activity_report_id is None
    assert state.compare is None and state.activity is None
    assert state.stage is PipelineStage.COMPARING
    assert ticket.action is PipelineAction.COMPARE


def test_compare_success_enables_activity_only() -> None:
    state = _compared()

    assert state.stage is PipelineStage.COMPARED
    assert state.can_generate_activity
    assert state.can_download(ReportKind.COMPARE)
    assert not state.can_download(ReportKind.ACTIVITY)


def test_compare_failure_leaves_no_stale_report() -> None:
    state, ticket = begin_compare(_activity_ready(), "next.csv")

    state, applied = fail_compare(state, ticket)

    assert applied
    assert state.stage is PipelineStage.IDLE
    assert state.report_id is None


def test_superseded_compare_result_is_discarded() -> None:
    state, first = begin_compare(PipelineState(), "first.csv")
    state, second = begin_compare(state, "second.csv")

    state, applied = complete_compare(state, first, CompareReport(report_id="old"))
    assert not applied
    assert state.report_id is None
    assert state.stage is PipelineStage.COMPARING

    state, applied = complete_compare(state, second, CompareReport(report_id="new"))
    assert applied
    assert state.report_id == "new"
    assert state.stage is PipelineStage.COMPARED


def test_superseded_compare_failure_does_not_release_newer_call() -> None:
    state, first = begin_compare(PipelineState(), "first.csv")
    state, _ = begin_compare(state, "second.csv")

    state, applied = fail_compare(state, first)

    assert not applied
    assert state.is_busy(PipelineAction.COMPARE)


def test_activity_requires_compare_report() -> None:
    with pytest.raises(InputValidationError, match="Run compare first before generating monthly activity."):
        begin_activity(PipelineState())


def test_activity_generation_clears_previous_activity_immediately() -> None:
    state, ticket = begin_activity(_activity_ready())

    assert state.activity_report_id is None
    assert state.stage is PipelineStage.GENERATING_ACTIVITY
    assert ticket.report_id == "r1"
    assert not state.can_download(ReportKind.ACTIVITY)


def test_activity_failure_keeps_compare_report() -> None:
    state, ticket = begin_activity(_activity_ready())

    state, applied = fail_activity(state, ticket)

    assert applied
    assert state.report_id == "r1"
    assert state.activity is None
    assert state.stage is PipelineStage.COMPARED
    assert state.can_generate_activity


def test_activity_result_for_replaced_compare_is_discarded() -> None:
    state, activity_ticket = begin_activity(_compared("r1"))
    state, compare_ticket = begin_compare(state, "again.xlsx")
    state, _ = complete_compare(state, compare_ticket, CompareReport(report_id="r2"))

    state, applied = complete_activity(state, activity_ticket, _activity("r1"))

    assert not applied
    assert state.report_id == "r2"
    assert state.activity is None


def test_older_activity_result_is_discarded_after_new_request() -> None:
    state, first = begin_activity(_compared())
    state, second = begin_activity(state)

    state, applied = complete_activity(state, first, _activity("r1", "old"))
    assert not applied
    state, applied = complete_activity(state, second, _activity("r1", "new"))
    assert applied
    assert state.activity_report_id == "new"


def test_download_preconditions_are_local() -> None:
    with pytest.raises(InputValidationError, match="Run compare first to generate a downloadable report."):
        begin_download(PipelineState(), ReportKind.COMPARE)
    with pytest.raises(InputValidationError, match="Generate monthly activity preview first before downloading."):
        begin_download(_compared(), ReportKind.ACTIVITY)


def test_activity_without_identifier_cannot_be_downloaded() -> None:
    state, ticket = begin_activity(_compared())
    state, _ = complete_activity(state, ticket, _activity("r1", activity_report_id=None))

    assert state.stage is PipelineStage.ACTIVITY_READY
    with pytest.raises(InputValidationError):
        begin_download(state, ReportKind.ACTIVITY)


def test_download_does_not_mutate_reports() -> None:
    before = _activity_ready()

    during, ticket = begin_download(before, ReportKind.ACTIVITY)
    assert during.stage is PipelineStage.DOWNLOADING
    assert (ticket.report_id, ticket.activity_report_id) == ("r1", "a1")

    after, still_valid = finish_download(during, ticket)
    assert still_valid
    assert after.stage is PipelineStage.ACTIVITY_READY
    assert (after.compare, after.activity) == (before.compare, before.activity)


def test_download_result_is_stale_after_new_compare() -> None:
    state, ticket = begin_download(_activity_ready(), ReportKind.ACTIVITY)
    state, _ = begin_compare(state, "again.csv")

    state, still_valid = finish_download(state, ticket)

    assert not still_valid
    assert not state.is_busy(PipelineAction.DOWNLOAD)


def test_second_concurrent_download_is_rejected() -> None:
    state, _ = begin_download(_compared(), ReportKind.COMPARE)

    with pytest.raises(InputValidationError):
        begin_download(state, ReportKind.COMPARE)

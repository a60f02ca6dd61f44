"""
agent_reports/services/report_pipeline_service.py

Runs compare, monthly-activity and download actions against the API.

Each action follows the same path: validate locally, apply the ``begin_*``
transition, call the API, apply the ``complete_*``/``fail_*`` transition,
and turn the outcome into a status message. Client errors never escape
an action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.downloads import DownloadedReport, ReportKind
from agent_reports.domain.report_pipeline import (
    ActivityReport,
    CompareReport,
    PipelineState,
    StageTicket,
    begin_activity,
    begin_compare,
    begin_download,
    complete_activity,
    complete_compare,
    fail_activity,
    fail_compare,
    finish_download,
    validate_compare_filename,
)
from agent_reports.domain.timeframe import (
    TIMEFRAME_MONTH,
    build_timeframe,
    default_custom_range,
    default_month,
    normalize_mode,
)
from agent_reports.errors import InputValidationError, ReportClientError
from agent_reports.logging_utils import log_event
from agent_reports.presentation.messages import (
    StatusMessage,
    activity_summary,
    compare_summary,
    failure_message,
)
from agent_reports.schemas import ActivityRequest, CompareResponse

logger = logging.getLogger(__name__)

SUPERSEDED_MESSAGE = "Result discarded: a newer request replaced it."

_DOWNLOAD_LABELS: dict[ReportKind, tuple[str, str]] = {
    ReportKind.COMPARE: ("Preparing download...", "Download started"),
    ReportKind.ACTIVITY: ("Preparing monthly activity download...", "Monthly activity download started"),
}

StatusListener = Callable[[PipelineState, StatusMessage], None]


@dataclass(frozen=True)
class ActionOutcome:
    """
    Result of one pipeline action as seen by the UI.

    ``applied`` is False when the call finished after a newer action had
    superseded it; its result was dropped and state is unchanged.
    """

    status: StatusMessage
    applied: bool = True
    download: DownloadedReport | None = None

    @property
    def ok(self) -> bool:
        return self.applied and self.status.tone == "good"


@dataclass(frozen=True)
class TimeframeInputs:
    mode: str
    month: str
    start_date: str
    end_date: str


def default_timeframe_inputs(today: date, mode: str = TIMEFRAME_MONTH) -> TimeframeInputs:
    """
    Initial timeframe controls: this month, or first-of-month through today.
    """

    start, end = default_custom_range(today)
    return TimeframeInputs(mode=normalize_mode(mode), month=default_month(today), start_date=start, end_date=end)


class ReportPipeline:
    """
    Owns the pipeline state for one uploaded dataset.

    ``listener`` is notified after every applied transition with the new
    state and its status line.
    """

    def __init__(
        self,
        *,
        client: ReportingAPIClient,
        file_id: str,
        state: PipelineState | None = None,
        listener: StatusListener | None = None,
    ) -> None:
        self._client = client
        self._file_id = file_id
        self._state = state or PipelineState()
        self._listener = listener
        self._status = StatusMessage.info("")

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def status(self) -> StatusMessage:
        return self._status

    @property
    def file_id(self) -> str:
        return self._file_id

    def _emit(self, status: StatusMessage) -> StatusMessage:
        self._status = status
        if self._listener is not None:
            self._listener(self._state, status)
        return status

    def _reject(self, exc: InputValidationError) -> ActionOutcome:
        return ActionOutcome(status=self._emit(StatusMessage.bad(str(exc))))

    def _superseded(self, action: str) -> ActionOutcome:
        log_event(logger, logging.INFO, "pipeline_result_discarded", action=action, file_id=self._file_id)
        return ActionOutcome(status=StatusMessage.info(SUPERSEDED_MESSAGE), applied=False)

    def start_compare(self, filename: str | None, content: bytes | None) -> ActionOutcome:
        """
        Upload a compare file and store the resulting compare report.

        Existing compare and activity reports are cleared before the upload
        is sent.
        """

        try:
            name = validate_compare_filename(filename)
            if content is None:
                raise InputValidationError("Pick a compare file first")
            self._state, ticket = begin_compare(self._state, name)
        except InputValidationError as exc:
            return self._reject(exc)

        log_event(logger, logging.INFO, "compare_started", file_id=self._file_id, epoch=ticket.epoch, filename=name)
        self._emit(StatusMessage.info("Uploading compare file..."))

        try:
            result = self._client.compare_upload(self._file_id, filename=name, content=content)
        except ReportClientError as exc:
            self._state, applied = fail_compare(self._state, ticket)
            if not applied:
                return self._superseded("compare")
            log_event(logger, logging.WARNING, "compare_failed", file_id=self._file_id, error=str(exc))
            return ActionOutcome(status=self._emit(failure_message("Compare", exc)))

        if isinstance(result, CompareResponse):
            report = CompareReport(
                report_id=result.report_id,
                preview_rows=tuple(result.preview_rows),
                compared_count=result.compared_count,
                inactive_count=result.inactive_count,
                preview_total=result.preview_total,
                preview_limit=result.preview_limit,
            )
            status = StatusMessage.good("Compare complete. Preview generated below.")
            download = None
        else:
            report = CompareReport(report_id=None, direct_download=result)
            status = StatusMessage.good("Compare complete. Report ready to download.")
            download = result

        self._state, applied = complete_compare(self._state, ticket, report)
        if not applied:
            return self._superseded("compare")

        log_event(
            logger,
            logging.INFO,
            "compare_completed",
            file_id=self._file_id,
            report_id=report.report_id,
            compared_count=report.compared_count,
            inactive_count=report.inactive_count,
        )
        return ActionOutcome(status=self._emit(status), download=download)

    def compare_summary(self) -> str:
        report = self._state.compare
        if report is None or report.direct_download is not None:
            return ""
        return compare_summary(report)

    def generate_activity(
        self,
        *,
        timeframe_mode: str | None,
        month: str | None = "",
        start_date: str | None = "",
        end_date: str | None = "",
        activity_type: str | None = "all",
    ) -> ActionOutcome:
        """
        Generate the monthly activity preview for the current compare report.

        Invalid timeframes are rejected before any request is sent.
        """

        try:
            report_id = self._state.report_id
            if report_id is None:
                raise InputValidationError("Run compare first before generating monthly activity.")
            timeframe = build_timeframe(mode=timeframe_mode, month=month, start_date=start_date, end_date=end_date)
            self._state, ticket = begin_activity(self._state)
        except InputValidationError as exc:
            return self._reject(exc)

        kind = (activity_type or "").strip() or "all"
        request = ActivityRequest(
            timeframe_mode=timeframe.mode,
            month=(month or "").strip(),
            start_date=(start_date or "").strip(),
            end_date=(end_date or "").strip(),
            activity_type=kind,
        )
        log_event(
            logger,
            logging.INFO,
            "activity_started",
            file_id=self._file_id,
            report_id=report_id,
            epoch=ticket.epoch,
            timeframe_mode=timeframe.mode,
        )
        self._emit(StatusMessage.info("Generating monthly activity preview..."))

        try:
            result = self._client.generate_activity(self._file_id, report_id, request)
        except ReportClientError as exc:
            self._state, applied = fail_activity(self._state, ticket)
            if not applied:
                return self._superseded("activity")
            log_event(logger, logging.WARNING, "activity_failed", file_id=self._file_id, error=str(exc))
            return ActionOutcome(status=self._emit(failure_message("Activity preview", exc, crash_verb="failed")))

        report = ActivityReport(
            report_id=report_id,
            activity_report_id=result.activity_report_id,
            timeframe=timeframe,
            activity_type=(result.activity_type or kind),
            preview_rows=tuple(result.preview_rows),
            total_rows=result.total_rows,
            timeframe_label=(result.timeframe_label or "").strip() or request.month or timeframe.label,
            preview_total=result.preview_total,
            preview_limit=result.preview_limit,
        )
        self._state, applied = complete_activity(self._state, ticket, report)
        if not applied:
            return self._superseded("activity")

        log_event(
            logger,
            logging.INFO,
            "activity_completed",
            file_id=self._file_id,
            report_id=report.report_id,
            activity_report_id=report.activity_report_id,
            total_rows=report.total_rows,
        )
        return ActionOutcome(status=self._emit(StatusMessage.good("Monthly activity preview ready")))

    def activity_summary(self) -> str:
        report = self._state.activity
        return activity_summary(report) if report is not None else ""

    def _fetch_report(self, kind: ReportKind, ticket: StageTicket) -> DownloadedReport:
        if ticket.report_id is None:
            compare = self._state.compare
            if kind is ReportKind.COMPARE and compare is not None and compare.direct_download is not None:
                return compare.direct_download
            raise InputValidationError("Run compare first to generate a downloadable report.")
        if kind is ReportKind.COMPARE:
            return self._client.download_compare_report(self._file_id, ticket.report_id)
        if ticket.activity_report_id is None:
            raise InputValidationError("Generate monthly activity preview first before downloading.")
        return self._client.download_activity_report(self._file_id, ticket.report_id, ticket.activity_report_id)

    def download(self, kind: ReportKind) -> ActionOutcome:
        """
        Fetch a report file. A failed download leaves the reports untouched.
        """

        try:
            self._state, ticket = begin_download(self._state, kind)
        except InputValidationError as exc:
            return self._reject(exc)

        preparing, started = _DOWNLOAD_LABELS[kind]
        self._emit(StatusMessage.info(preparing))

        try:
            report = self._fetch_report(kind, ticket)
        except ReportClientError as exc:
            self._state, _ = finish_download(self._state, ticket)
            log_event(logger, logging.WARNING, "download_failed", kind=kind.value, error=str(exc))
            return ActionOutcome(status=self._emit(failure_message("Download", exc, crash_verb="failed")))

        self._state, still_valid = finish_download(self._state, ticket)
        if not still_valid:
            return self._superseded("download")

        log_event(
            logger,
            logging.INFO,
            "download_completed",
            kind=kind.value,
            filename=report.filename,
            size_bytes=report.size_bytes,
        )
        return ActionOutcome(status=self._emit(StatusMessage.good(started)), download=report)

"""
agent_reports/domain/report_pipeline.py

Compare -> monthly activity -> download state machine.

Every transition is a pure function over a frozen ``PipelineState``.
``begin_*`` transitions bump the epoch of the stage they start and hand
back a ``StageTicket``; the matching ``complete_*``/``fail_*`` transition
only applies while that ticket's epoch is still current, so the result of
a superseded call is discarded instead of overwriting newer state.

Starting a compare run clears both report identifiers before the request
is sent and bumps the activity epoch as well: an activity report is only
meaningful for the compare report it was generated from.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import PurePath

from agent_reports.domain.downloads import DownloadedReport, ReportKind
from agent_reports.domain.timeframe import TimeframeSelection
from agent_reports.errors import InputValidationError
from agent_reports.schemas import Row

ALLOWED_COMPARE_EXTENSIONS: tuple[str, ...] = (".xlsx", ".csv")


class PipelineStage(str, Enum):
    IDLE = "idle"
    COMPARING = "comparing"
    COMPARED = "compared"
    GENERATING_ACTIVITY = "generating_activity"
    ACTIVITY_READY = "activity_ready"
    DOWNLOADING = "downloading"


class PipelineAction(str, Enum):
    """Unit of serialization: at most one call per action is current."""

    COMPARE = "compare"
    ACTIVITY = "activity"
    DOWNLOAD = "download"


@dataclass(frozen=True)
class CompareReport:
    report_id: str | None
    preview_rows: tuple[Row, ...] = ()
    compared_count: int = 0
    inactive_count: int = 0
    preview_total: int = 0
    preview_limit: int = 0
    direct_download: DownloadedReport | None = None

    @property
    def preview_shown(self) -> int:
        return max(0, min(self.preview_limit, self.preview_total))

    @property
    def is_truncated(self) -> bool:
        return self.preview_total > self.preview_shown


@dataclass(frozen=True)
class ActivityReport:
    report_id: str
    activity_report_id: str | None
    timeframe: TimeframeSelection
    activity_type: str
    preview_rows: tuple[Row, ...] = ()
    total_rows: int = 0
    timeframe_label: str = ""
    preview_total: int = 0
    preview_limit: int = 0

    @property
    def preview_shown(self) -> int:
        return max(0, min(self.preview_limit, self.preview_total))

    @property
    def is_truncated(self) -> bool:
        return self.preview_total > self.preview_shown


@dataclass(frozen=True)
class StageTicket:
    """
    Captured context of one in-flight call.
    """

    action: PipelineAction
    epoch: int
    compare_epoch: int
    activity_epoch: int
    report_id: str | None = None
    activity_report_id: str | None = None
    kind: ReportKind | None = None


@dataclass(frozen=True)
class PipelineState:
    compare: CompareReport | None = None
    activity: ActivityReport | None = None
    compare_epoch: int = 0
    activity_epoch: int = 0
    download_epoch: int = 0
    in_flight: frozenset[PipelineAction] = field(default_factory=frozenset)

    @property
    def stage(self) -> PipelineStage:
        if PipelineAction.COMPARE in self.in_flight:
            return PipelineStage.COMPARING
        if PipelineAction.ACTIVITY in self.in_flight:
            return PipelineStage.GENERATING_ACTIVITY
        if PipelineAction.DOWNLOAD in self.in_flight:
            return PipelineStage.DOWNLOADING
        if self.activity is not None:
            return PipelineStage.ACTIVITY_READY
        if self.compare is not None:
            return PipelineStage.COMPARED
        return PipelineStage.IDLE

    @property
    def report_id(self) -> str | None:
        return self.compare.report_id if self.compare is not None else None

    @property
    def activity_report_id(self) -> str | None:
        """
        The activity identifier, only while its parent compare report is current.
        """

        if self.activity is None or self.report_id is None:
            return None
        if self.activity.report_id != self.report_id:
            return None
        return self.activity.activity_report_id

    def is_busy(self, action: PipelineAction) -> bool:
        return action in self.in_flight

    @property
    def can_generate_activity(self) -> bool:
        return (
            self.report_id is not None
            and not self.is_busy(PipelineAction.COMPARE)
            and not self.is_busy(PipelineAction.ACTIVITY)
        )

    def can_download(self, kind: ReportKind) -> bool:
        if self.is_busy(PipelineAction.DOWNLOAD) or self.is_busy(PipelineAction.COMPARE):
            return False
        if kind is ReportKind.COMPARE:
            return self.report_id is not None or (
                self.compare is not None and self.compare.direct_download is not None
            )
        return self.activity_report_id is not None and not self.is_busy(PipelineAction.ACTIVITY)


def _ticket(state: PipelineState, action: PipelineAction, epoch: int, **extra: object) -> StageTicket:
    return StageTicket(
        action=action,
        epoch=epoch,
        compare_epoch=state.compare_epoch,
        activity_epoch=state.activity_epoch,
        **extra,  # type: ignore[arg-type]
    )


def validate_compare_filename(filename: str | None) -> str:
    name = (filename or "").strip()
    if not name:
        raise InputValidationError("Pick a compare file first")
    if PurePath(name).suffix.lower() not in ALLOWED_COMPARE_EXTENSIONS:
        raise InputValidationError("Compare file must be .xlsx or .csv")
    return name


def begin_compare(state: PipelineState, filename: str | None) -> tuple[PipelineState, StageTicket]:
    """
    Validate the compare file and invalidate every dependent report.

    Any in-flight activity call is superseded along with the reports.
    """

    validate_compare_filename(filename)
    new_state = replace(
        state,
        compare=None,
        activity=None,
        compare_epoch=state.compare_epoch + 1,
        activity_epoch=state.activity_epoch + 1,
        in_flight=(state.in_flight - {PipelineAction.ACTIVITY}) | {PipelineAction.COMPARE},
    )
    return new_state, _ticket(new_state, PipelineAction.COMPARE, new_state.compare_epoch)


def _is_current(state: PipelineState, ticket: StageTicket) -> bool:
    if ticket.action is PipelineAction.COMPARE:
        return ticket.epoch == state.compare_epoch
    if ticket.action is PipelineAction.ACTIVITY:
        return ticket.epoch == state.activity_epoch and ticket.report_id == state.report_id
    return ticket.epoch == state.download_epoch


def complete_compare(
    state: PipelineState,
    ticket: StageTicket,
    report: CompareReport,
) -> tuple[PipelineState, bool]:
    if not _is_current(state, ticket):
        return state, False
    return (
        replace(
            state,
            compare=report,
            activity=None,
            in_flight=state.in_flight - {PipelineAction.COMPARE},
        ),
        True,
    )


def fail_compare(state: PipelineState, ticket: StageTicket) -> tuple[PipelineState, bool]:
    if not _is_current(state, ticket):
        return state, False
    return replace(state, in_flight=state.in_flight - {PipelineAction.COMPARE}), True


def begin_activity(state: PipelineState) -> tuple[PipelineState, StageTicket]:
    """
    Start an activity run against the current compare report.

    The previous activity report is dropped before the request is sent.
    Timeframe validation happens before this transition.
    """

    report_id = state.report_id
    if report_id is None or state.is_busy(PipelineAction.COMPARE):
        raise InputValidationError("Run compare first before generating monthly activity.")

    new_state = replace(
        state,
        activity=None,
        activity_epoch=state.activity_epoch + 1,
        in_flight=state.in_flight | {PipelineAction.ACTIVITY},
    )
    return new_state, _ticket(new_state, PipelineAction.ACTIVITY, new_state.activity_epoch, report_id=report_id)


def complete_activity(
    state: PipelineState,
    ticket: StageTicket,
    report: ActivityReport,
) -> tuple[PipelineState, bool]:
    if not _is_current(state, ticket) or report.report_id != ticket.report_id:
        return state, False
    return (
        replace(
            state,
            activity=report,
            in_flight=state.in_flight - {PipelineAction.ACTIVITY},
        ),
        True,
    )


def fail_activity(state: PipelineState, ticket: StageTicket) -> tuple[PipelineState, bool]:
    """
    Clear the activity report; the compare report stays usable for a retry.
    """

    if not _is_current(state, ticket):
        return state, False
    return (
        replace(
            state,
            activity=None,
            in_flight=state.in_flight - {PipelineAction.ACTIVITY},
        ),
        True,
    )


def begin_download(state: PipelineState, kind: ReportKind) -> tuple[PipelineState, StageTicket]:
    """
    Check the identifiers a download needs; nothing is sent when they are missing.
    """

    if kind is ReportKind.COMPARE:
        has_direct = state.compare is not None and state.compare.direct_download is not None
        if state.report_id is None and not has_direct:
            raise InputValidationError("Run compare first to generate a downloadable report.")
    elif state.report_id is None or state.activity_report_id is None:
        raise InputValidationError("Generate monthly activity preview first before downloading.")

    if state.is_busy(PipelineAction.DOWNLOAD):
        raise InputValidationError("A download is already in progress.")

    new_state = replace(
        state,
        download_epoch=state.download_epoch + 1,
        in_flight=state.in_flight | {PipelineAction.DOWNLOAD},
    )
    return new_state, _ticket(
        new_state,
        PipelineAction.DOWNLOAD,
        new_state.download_epoch,
        report_id=state.report_id,
        activity_report_id=state.activity_report_id if kind is ReportKind.ACTIVITY else None,
        kind=kind,
    )


def finish_download(state: PipelineState, ticket: StageTicket) -> tuple[PipelineState, bool]:
    """
    Release the download slot.

    Returns whether the downloaded report still belongs to the current
    reports; reports themselves are never touched by a download.
    """

    new_state = state
    if ticket.epoch == state.download_epoch:
        new_state = replace(state, in_flight=state.in_flight - {PipelineAction.DOWNLOAD})

    still_valid = ticket.compare_epoch == state.compare_epoch
    if ticket.kind is ReportKind.ACTIVITY:
        still_valid = still_valid and ticket.activity_epoch == state.activity_epoch
    return new_state, still_valid

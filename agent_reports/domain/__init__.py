"""
agent_reports/domain package marker.
"""

from agent_reports.domain.downloads import DownloadedReport, ReportKind
from agent_reports.domain.query_state import QueryState
from agent_reports.domain.report_pipeline import (
    ActivityReport,
    CompareReport,
    PipelineAction,
    PipelineStage,
    PipelineState,
    StageTicket,
)
from agent_reports.domain.timeframe import CustomRangeTimeframe, MonthTimeframe, TimeframeSelection

__all__ = [
    "ActivityReport",
    "CompareReport",
    "CustomRangeTimeframe",
    "DownloadedReport",
    "MonthTimeframe",
    "PipelineAction",
    "PipelineStage",
    "PipelineState",
    "QueryState",
    "ReportKind",
    "StageTicket",
    "TimeframeSelection",
]

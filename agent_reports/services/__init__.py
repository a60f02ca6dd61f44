"""
agent_reports/services package marker.
"""

from agent_reports.services.agent_directory import AgentDirectory, AgentListing
from agent_reports.services.dashboard_service import DashboardSession, DashboardView, QueryOutcome
from agent_reports.services.report_pipeline_service import ActionOutcome, ReportPipeline
from agent_reports.services.report_saver import ReportSaver
from agent_reports.services.upload_service import UploadOutcome, upload_dataset

__all__ = [
    "ActionOutcome",
    "AgentDirectory",
    "AgentListing",
    "DashboardSession",
    "DashboardView",
    "QueryOutcome",
    "ReportPipeline",
    "ReportSaver",
    "UploadOutcome",
    "upload_dataset",
]

"""
agent_reports/presentation package marker.
"""

from agent_reports.presentation.bindings import ActionInFlightError, ActionRegistry
from agent_reports.presentation.messages import StatusMessage, activity_summary, compare_summary
from agent_reports.presentation.tables import TableView, render_table

__all__ = [
    "ActionInFlightError",
    "ActionRegistry",
    "StatusMessage",
    "TableView",
    "activity_summary",
    "compare_summary",
    "render_table",
]

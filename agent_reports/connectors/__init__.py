"""
agent_reports/connectors package marker.
"""

from agent_reports.connectors.base import HTTPTransport, TransportRequest, TransportResponse
from agent_reports.connectors.reporting_api import ReportingAPIClient

__all__ = [
    "HTTPTransport",
    "ReportingAPIClient",
    "TransportRequest",
    "TransportResponse",
]

"""
agent_reports/connectors/reporting_api.py

Client for the remote reporting API.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence, TypeVar
from urllib.parse import quote

import requests
from pydantic import BaseModel, ValidationError

from agent_reports.config import ReportingAPISettings
from agent_reports.connectors.base import HTTPTransport, TransportRequest, TransportResponse
from agent_reports.domain.downloads import DownloadedReport, ReportKind, XLSX_MEDIA_TYPE, resolve_filename
from agent_reports.domain.query_state import QueryState, build_export_url
from agent_reports.errors import InputValidationError, ResponseFormatError
from agent_reports.schemas import (
    ActivityRequest,
    ActivityResponse,
    AgentListResponse,
    AgentSearchRequest,
    CompareResponse,
    DatasetMeta,
    DateBounds,
    QueryRequest,
    QueryResponse,
    UploadResponse,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_BINARY_MEDIA_TYPES = {
    XLSX_MEDIA_TYPE,
    "application/vnd.ms-excel",
    "application/octet-stream",
    "text/csv",
}


def _is_attachment(response: TransportResponse) -> bool:
    disposition = (response.header("Content-Disposition") or "").lower()
    return "attachment" in disposition or response.content_type in _BINARY_MEDIA_TYPES


class ReportingAPIClient:
    """
    Typed access to every reporting API endpoint used by the client.
    """

    def __init__(
        self,
        *,
        settings: ReportingAPISettings,
        transport: HTTPTransport | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport or HTTPTransport(settings=settings, session=session)

    @property
    def base_url(self) -> str:
        return self._settings.base_url.rstrip("/")

    @property
    def max_upload_files(self) -> int:
        return self._settings.max_upload_files

    def _url(self, *segments: str) -> str:
        path = "/".join(quote(str(segment), safe="") for segment in segments)
        return f"{self.base_url}/api/{path}"

    @staticmethod
    def _parse(response: TransportResponse, model: type[ModelT], label: str) -> ModelT:
        payload = response.json()
        if not isinstance(payload, dict):
            raise ResponseFormatError(f"{label}: expected a JSON object.")
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise ResponseFormatError(f"{label}: unexpected response shape ({exc.error_count()} error(s)).") from exc

    def _get(self, *segments: str, timeout: float, label: str, params: dict[str, Any] | None = None) -> TransportResponse:
        return self._transport.send(
            TransportRequest(
                method="GET",
                url=self._url(*segments),
                params=params,
                timeout_seconds=timeout,
                label=label,
            )
        )

    def _post(
        self,
        *segments: str,
        timeout: float,
        label: str,
        json_body: Any = None,
        files: list[tuple[str, tuple[str, bytes]]] | None = None,
    ) -> TransportResponse:
        return self._transport.send(
            TransportRequest(
                method="POST",
                url=self._url(*segments),
                json=json_body,
                files=files,
                timeout_seconds=timeout,
                label=label,
            )
        )

    def upload_files(self, files: Sequence[tuple[str, bytes]]) -> UploadResponse:
        """
        Upload 1..max_upload_files primary spreadsheets as one dataset.
        """

        if not files:
            raise InputValidationError("Pick a file first")
        if len(files) > self._settings.max_upload_files:
            raise InputValidationError(f"Upload up to {self._settings.max_upload_files} files at once")

        response = self._post(
            "upload",
            timeout=self._settings.upload_timeout_seconds,
            label="upload",
            files=[("files", (name, content)) for name, content in files],
        )
        return self._parse(response, UploadResponse, "upload")

    def fetch_metadata(self, file_id: str) -> DatasetMeta:
        response = self._get("meta", file_id, timeout=self._settings.query_timeout_seconds, label="meta")
        return self._parse(response, DatasetMeta, "meta")

    def fetch_date_bounds(self, file_id: str) -> DateBounds:
        response = self._get(
            "date-range",
            file_id,
            timeout=self._settings.query_timeout_seconds,
            label="date_range",
        )
        return self._parse(response, DateBounds, "date_range")

    def query_rows(self, file_id: str, request: QueryRequest) -> QueryResponse:
        response = self._post(
            "query",
            file_id,
            timeout=self._settings.query_timeout_seconds,
            label="query",
            json_body=request.model_dump(),
        )
        return self._parse(response, QueryResponse, "query")

    def list_agents(self, file_id: str, request: AgentSearchRequest) -> AgentListResponse:
        response = self._post(
            "agents",
            file_id,
            timeout=self._settings.query_timeout_seconds,
            label="agents",
            json_body=request.model_dump(),
        )
        return self._parse(response, AgentListResponse, "agents")

    def export_url(self, file_id: str, state: QueryState, export_format: str) -> str:
        """
        Export is a plain navigation to this URL, not a fetched call.
        """

        return build_export_url(state, base_url=self.base_url, file_id=file_id, export_format=export_format)

    def compare_upload(self, file_id: str, *, filename: str, content: bytes) -> CompareResponse | DownloadedReport:
        """
        Upload a compare file.

        The JSON preview is the expected answer. Older servers answer with
        the spreadsheet itself; that body is returned as a compare report.
        """

        response = self._post(
            "agent-compare",
            file_id,
            timeout=self._settings.compare_timeout_seconds,
            label="compare",
            files=[("file", (filename, content))],
        )
        if _is_attachment(response):
            logger.info("Compare endpoint returned a direct download file_id=%s", file_id)
            return self._as_download(response, ReportKind.COMPARE)
        return self._parse(response, CompareResponse, "compare")

    def generate_activity(self, file_id: str, report_id: str, request: ActivityRequest) -> ActivityResponse:
        response = self._post(
            "agent-monthly",
            file_id,
            report_id,
            timeout=self._settings.activity_timeout_seconds,
            label="activity",
            json_body=request.model_dump(),
        )
        return self._parse(response, ActivityResponse, "activity")

    def download_compare_report(self, file_id: str, report_id: str) -> DownloadedReport:
        response = self._get(
            "agent-compare-download",
            file_id,
            report_id,
            timeout=self._settings.download_timeout_seconds,
            label="compare_download",
        )
        return self._as_download(response, ReportKind.COMPARE)

    def download_activity_report(self, file_id: str, report_id: str, activity_report_id: str) -> DownloadedReport:
        response = self._get(
            "agent-monthly-download",
            file_id,
            report_id,
            activity_report_id,
            timeout=self._settings.download_timeout_seconds,
            label="activity_download",
        )
        return self._as_download(response, ReportKind.ACTIVITY)

    @staticmethod
    def _as_download(response: TransportResponse, kind: ReportKind) -> DownloadedReport:
        return DownloadedReport(
            kind=kind,
            filename=resolve_filename(kind, response.header("Content-Disposition")),
            content=response.content,
            media_type=response.content_type or XLSX_MEDIA_TYPE,
        )

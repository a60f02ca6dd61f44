"""
agent_reports/services/upload_service.py

Primary dataset upload.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.links import dashboard_link
from agent_reports.errors import InputValidationError, ReportClientError
from agent_reports.logging_utils import log_event
from agent_reports.presentation.messages import StatusMessage, failure_message, plural_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadOutcome:
    status: StatusMessage
    file_id: str | None = None
    dashboard_link: str | None = None

    @property
    def ok(self) -> bool:
        return self.file_id is not None


def upload_dataset(client: ReportingAPIClient, files: Sequence[tuple[str, bytes]]) -> UploadOutcome:
    """
    Upload one to ``client.max_upload_files`` files and return the dashboard link.
    """

    try:
        response = client.upload_files(files)
    except InputValidationError as exc:
        return UploadOutcome(status=StatusMessage.bad(str(exc)))
    except ReportClientError as exc:
        log_event(logger, logging.WARNING, "upload_failed", files=len(files), error=str(exc))
        return UploadOutcome(status=failure_message("Upload", exc))

    uploaded = response.uploaded_files or len(files)
    log_event(logger, logging.INFO, "upload_completed", file_id=response.file_id, files=uploaded)
    return UploadOutcome(
        status=StatusMessage.good(f"Uploaded {plural_files(uploaded)}. Redirecting..."),
        file_id=response.file_id,
        dashboard_link=dashboard_link(response.file_id),
    )

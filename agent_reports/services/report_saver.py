"""
agent_reports/services/report_saver.py

Writes downloaded reports to a local directory.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from agent_reports.domain.downloads import DEFAULT_FILENAMES, DownloadedReport, safe_filename

logger = logging.getLogger(__name__)


class ReportSaver:
    """
    Saves reports atomically: the body goes to a temporary file that is
    renamed into place, and the temporary file never outlives the call.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, report: DownloadedReport) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        filename = safe_filename(report.filename) or DEFAULT_FILENAMES[report.kind]
        target = self._directory / filename

        fd, temp_name = tempfile.mkstemp(dir=self._directory, prefix=".partial-", suffix=Path(filename).suffix)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(report.content)
            os.replace(temp_name, target)
        finally:
            if os.path.exists(temp_name):
                os.unlink(temp_name)

        logger.info("Saved report kind=%s path=%s size_bytes=%s", report.kind.value, target, report.size_bytes)
        return target

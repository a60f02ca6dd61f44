"""
agent_reports/domain/downloads.py

Downloaded report payloads and Content-Disposition filename parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath, PureWindowsPath
from urllib.parse import unquote


class ReportKind(str, Enum):
    COMPARE = "compare"
    ACTIVITY = "activity"


DEFAULT_FILENAMES: dict[ReportKind, str] = {
    ReportKind.COMPARE: "inactive_businesses.xlsx",
    ReportKind.ACTIVITY: "agent_monthly_activity.xlsx",
}

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Matches `filename="x.xlsx"`, `filename=x.xlsx` and `filename*=UTF-8''x%20y.xlsx`.
_FILENAME_PATTERN = re.compile(r"filename\*?=(?:UTF-8''|\")?([^\";]+)", re.IGNORECASE)


@dataclass(frozen=True)
class DownloadedReport:
    """
    Binary report body ready to be saved under its suggested filename.
    """

    kind: ReportKind
    filename: str
    content: bytes
    media_type: str = XLSX_MEDIA_TYPE

    @property
    def size_bytes(self) -> int:
        return len(self.content)


def parse_filename_from_disposition(disposition: str | None) -> str | None:
    """
    Extract a filename from a Content-Disposition header value.

    Returns None when the header is missing or has no usable filename.
    """

    if not disposition:
        return None
    match = _FILENAME_PATTERN.search(disposition)
    if not match or not match.group(1):
        return None
    candidate = unquote(match.group(1).replace('"', "").strip())
    return safe_filename(candidate)


def safe_filename(name: str) -> str | None:
    """
    Reduce a server-suggested name to a bare basename.
    """

    base = PureWindowsPath(PurePosixPath(name.strip()).name).name.strip()
    if base in {"", ".", ".."}:
        return None
    return base


def resolve_filename(kind: ReportKind, disposition: str | None) -> str:
    return parse_filename_from_disposition(disposition) or DEFAULT_FILENAMES[kind]

"""
Client-side exceptions for reporting API flows.
"""

from __future__ import annotations

from typing import Any


class ReportClientError(Exception):
    """Base exception for reporting client failures."""


class InputValidationError(ReportClientError):
    """Raised when a local precondition fails; no request is sent."""


class RequestTimedOutError(ReportClientError):
    """Raised when a call exceeds its client-enforced deadline."""


class NetworkError(ReportClientError):
    """Raised on transport failures below HTTP (DNS, refused, reset)."""


class ResponseFormatError(ReportClientError):
    """Raised when a successful response does not match the expected contract."""


class HttpStatusError(ReportClientError):
    """
    Raised when the server answers with a non-success status.

    ``payload`` is the decoded JSON body, or ``{"raw": text}`` when the
    body was not JSON.
    """

    def __init__(self, status: int, payload: dict[str, Any] | None = None) -> None:
        self.status = status
        self.payload = payload or {}
        super().__init__(self.message)

    @property
    def server_error(self) -> str | None:
        value = self.payload.get("error")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @property
    def raw_body(self) -> str | None:
        value = self.payload.get("raw")
        if isinstance(value, str) and value.strip():
            return value.strip()
        return None

    @property
    def message(self) -> str:
        return self.server_error or f"Request failed ({self.status})"

    def describe(self, fallback_label: str) -> str:
        """
        Return the server message, else ``"<label> failed (<status>)"``
        followed by a short excerpt of any non-JSON body.
        """

        if self.server_error:
            return self.server_error
        text = f"{fallback_label} failed ({self.status})"
        raw = self.raw_body
        if raw:
            excerpt = raw if len(raw) <= 200 else raw[:197] + "..."
            text = f"{text}: {excerpt}"
        return text

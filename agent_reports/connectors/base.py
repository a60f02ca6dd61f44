"""
agent_reports/connectors/base.py

Transport abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import requests
from requests.structures import CaseInsensitiveDict

from agent_reports.config import ReportingAPISettings
from agent_reports.errors import (
    HttpStatusError,
    NetworkError,
    RequestTimedOutError,
    ResponseFormatError,
)
from agent_reports.logging_utils import log_event

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {502, 503, 504}
_CHUNK_SIZE = 64 * 1024

MultipartFiles = list[tuple[str, tuple[str, bytes]]]


@dataclass(frozen=True)
class TransportRequest:
    """
    One outbound call: method, URL, optional body, and its deadline.
    """

    method: str
    url: str
    timeout_seconds: float
    label: str = "request"
    params: dict[str, Any] | None = None
    json: Any = None
    files: MultipartFiles | None = None


@dataclass(frozen=True)
class TransportResponse:
    """
    Fully read response body with status and headers.
    """

    status: int
    content: bytes
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def content_type(self) -> str:
        return (self.headers.get("Content-Type") or "").split(";", 1)[0].strip().lower()

    def header(self, name: str) -> str | None:
        return self.headers.get(name)

    def json(self) -> Any:
        """
        Decode the body as JSON.
        """

        try:
            return json.loads(self.text)
        except ValueError as exc:
            raise ResponseFormatError("Response was not valid JSON.") from exc


def decode_error_payload(content: bytes) -> dict[str, Any]:
    """
    Parse an error body as a JSON object, or wrap the raw text.
    """

    text = content.decode("utf-8", errors="replace")
    try:
        data = json.loads(text)
    except ValueError:
        return {"raw": text}
    if isinstance(data, dict):
        return data
    return {"raw": text}


class HTTPTransport:
    """
    Sends requests with a hard deadline and uniform error decoding.

    The whole call, including reading the body, must finish within the
    request's ``timeout_seconds``. The underlying response is closed on
    every path.
    """

    def __init__(
        self,
        *,
        settings: ReportingAPISettings,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session or requests.Session()
        self._max_retries = settings.max_retries
        self._backoff_initial_seconds = settings.backoff_initial_seconds
        self._backoff_multiplier = settings.backoff_multiplier
        self._clock = clock
        self._sleep = sleep

    def send(self, request: TransportRequest) -> TransportResponse:
        """
        Execute a request; idempotent GETs are retried on transient failures.
        """

        retries = self._max_retries if request.method.upper() == "GET" else 0
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            try:
                response = self._send_once(request)
            except NetworkError as exc:
                last_error = exc
            else:
                if response.status in RETRYABLE_STATUS_CODES and attempt < retries:
                    last_error = HttpStatusError(response.status, decode_error_payload(response.content))
                elif 200 <= response.status < 300:
                    return response
                else:
                    error = HttpStatusError(response.status, decode_error_payload(response.content))
                    log_event(
                        logger,
                        logging.WARNING,
                        "transport_http_error",
                        label=request.label,
                        status=response.status,
                        url=request.url,
                        message=error.message,
                    )
                    raise error

            if attempt >= retries:
                break

            backoff_seconds = self._backoff_initial_seconds * (self._backoff_multiplier**attempt)
            logger.warning(
                "Transport retry label=%s attempt=%s/%s wait_seconds=%.2f url=%s",
                request.label,
                attempt + 1,
                retries,
                backoff_seconds,
                request.url,
            )
            self._sleep(backoff_seconds)

        raise last_error or NetworkError(f"{request.label} failed without a response.")

    def _send_once(self, request: TransportRequest) -> TransportResponse:
        deadline = self._clock() + request.timeout_seconds
        response: requests.Response | None = None
        try:
            response = self._session.request(
                method=request.method,
                url=request.url,
                params=request.params,
                json=request.json,
                files=request.files,
                timeout=request.timeout_seconds,
                stream=True,
            )
            chunks: list[bytes] = []
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if self._clock() > deadline:
                    raise RequestTimedOutError(
                        f"{request.label} exceeded {request.timeout_seconds:.0f}s deadline."
                    )
                if chunk:
                    chunks.append(chunk)
            return TransportResponse(
                status=response.status_code,
                content=b"".join(chunks),
                headers=CaseInsensitiveDict(response.headers or {}),
            )
        except RequestTimedOutError:
            log_event(logger, logging.WARNING, "transport_timeout", label=request.label, url=request.url)
            raise
        except requests.RequestException as exc:
            # The socket timeout equals the total budget, so any stall that
            # surfaces as a connection error after the deadline is a timeout.
            if isinstance(exc, requests.Timeout) or self._clock() >= deadline:
                log_event(logger, logging.WARNING, "transport_timeout", label=request.label, url=request.url)
                raise RequestTimedOutError(
                    f"{request.label} exceeded {request.timeout_seconds:.0f}s deadline."
                ) from exc
            log_event(
                logger,
                logging.WARNING,
                "transport_network_error",
                label=request.label,
                url=request.url,
                error=str(exc),
            )
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc
        finally:
            if response is not None:
                response.close()

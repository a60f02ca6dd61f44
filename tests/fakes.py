"""
In-memory stand-ins for requests objects used by the HTTP tests.
"""

from __future__ import annotations

import json
from typing import Any


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        *,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
        chunks: list[bytes] | None = None,
    ) -> None:
        self.status_code = status_code
        self.headers = headers or {}
        self._chunks = chunks if chunks is not None else [body]
        self.closed = False

    def iter_content(self, chunk_size: int = 1) -> Any:
        yield from self._chunks

    def close(self) -> None:
        self.closed = True


def json_response(payload: Any, status_code: int = 200) -> FakeResponse:
    return FakeResponse(
        status_code,
        body=json.dumps(payload).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def binary_response(content: bytes, disposition: str | None = None) -> FakeResponse:
    headers = {
        "Content-Type": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
    if disposition is not None:
        headers["Content-Disposition"] = disposition
    return FakeResponse(200, body=content, headers=headers)


class FakeSession:
    """Stands in for requests.Session; replays queued responses or errors."""

    def __init__(self, *outcomes: FakeResponse | Exception) -> None:
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []
        self.responses: list[FakeResponse] = []

    def queue(self, *outcomes: FakeResponse | Exception) -> None:
        self.outcomes.extend(outcomes)

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {kwargs.get('method')} {kwargs.get('url')}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        self.responses.append(outcome)
        return outcome


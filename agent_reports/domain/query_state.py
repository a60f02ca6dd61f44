"""
agent_reports/domain/query_state.py

Filter and pagination state for the tabular dashboard view.

All operations are pure: they take a ``QueryState`` and return a new one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Any
from urllib.parse import quote, urlencode

from agent_reports.errors import InputValidationError
from agent_reports.schemas import QueryRequest, QueryResponse

DEFAULT_PAGE_SIZE = 25
DEFAULT_MODE = "contains"
MATCH_MODES: tuple[str, ...] = ("contains", "equals")
EXPORT_FORMATS: tuple[str, ...] = ("csv", "xlsx")
PAGE_SIZE_CHOICES: tuple[int, ...] = (10, 25, 50, 100)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_page_size(raw: Any) -> int:
    """
    Parse a page-size control value; unparseable or non-positive input yields 25.

    A leading integer is accepted the way form inputs are usually read
    (``"50 rows"`` -> 50).
    """

    if isinstance(raw, bool) or raw is None:
        return DEFAULT_PAGE_SIZE
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT.match(str(raw))
        if not match:
            return DEFAULT_PAGE_SIZE
        value = int(match.group(1))
    return value if value > 0 else DEFAULT_PAGE_SIZE


@dataclass(frozen=True)
class QueryState:
    column: str | None = None
    value: str = ""
    mode: str = DEFAULT_MODE
    start_date: str = ""
    end_date: str = ""
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def with_controls(
    state: QueryState,
    *,
    column: str | None,
    value: str | None,
    mode: str | None,
    start_date: str | None,
    end_date: str | None,
    page_size: Any,
) -> QueryState:
    """
    Copy the current control values into the state.
    """

    return replace(
        state,
        column=column or None,
        value=value or "",
        mode=(mode or "").strip() or DEFAULT_MODE,
        start_date=start_date or "",
        end_date=end_date or "",
        page_size=parse_page_size(page_size),
    )


def build_query_request(state: QueryState) -> QueryRequest:
    return QueryRequest(
        column=state.column,
        value=state.value,
        mode=state.mode or DEFAULT_MODE,
        start_date=state.start_date,
        end_date=state.end_date,
        page=state.page,
        page_size=parse_page_size(state.page_size),
    )


def build_export_url(state: QueryState, *, base_url: str, file_id: str, export_format: str) -> str:
    """
    Build the export download URL for the current filters.

    Pagination is not part of an export. Empty date bounds are omitted
    rather than sent as empty strings.
    """

    fmt = (export_format or "").strip().lower()
    if fmt not in EXPORT_FORMATS:
        raise InputValidationError(f"Export format must be one of {', '.join(EXPORT_FORMATS)}.")

    params: list[tuple[str, str]] = [
        ("format", fmt),
        ("column", state.column or ""),
        ("value", state.value or ""),
        ("mode", state.mode or DEFAULT_MODE),
    ]
    if state.start_date:
        params.append(("start_date", state.start_date))
    if state.end_date:
        params.append(("end_date", state.end_date))

    return f"{base_url.rstrip('/')}/api/export/{quote(file_id, safe='')}?{urlencode(params)}"


def apply_query_result(state: QueryState, result: QueryResponse) -> QueryState:
    """
    Adopt the server's page count and normalize the current page into range.
    """

    total_pages = max(1, int(result.total_pages or 1))
    page = result.page if result.page is not None else state.page
    page = min(max(1, int(page)), total_pages)
    return replace(state, page=page, total_pages=total_pages)


def go_to_page(state: QueryState, page: int) -> QueryState:
    return replace(state, page=min(max(1, page), state.total_pages))


def reset_filters(state: QueryState) -> QueryState:
    """
    Restore filter defaults; the selected column is kept.
    """

    return replace(
        state,
        value="",
        start_date="",
        end_date="",
        mode=DEFAULT_MODE,
        page_size=DEFAULT_PAGE_SIZE,
        page=1,
    )


def parse_iso_date(value: str | None) -> date | None:
    """
    Read the date part of an ISO string; anything unparseable is None.
    """

    text = (value or "").strip()[:10]
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def date_within(value: date | None, lower: date | None, upper: date | None) -> date | None:
    if value is None:
        return None
    if (lower is not None and value < lower) or (upper is not None and value > upper):
        return None
    return value

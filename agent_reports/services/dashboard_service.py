"""
agent_reports/services/dashboard_service.py

Filterable, paginated view over an uploaded dataset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.query_state import (
    QueryState,
    apply_query_result,
    build_query_request,
    go_to_page,
    reset_filters,
    with_controls,
)
from agent_reports.errors import ReportClientError
from agent_reports.presentation.messages import StatusMessage, failure_message
from agent_reports.presentation.tables import DASHBOARD_EMPTY_MESSAGE, TableView, render_table
from agent_reports.schemas import DatasetMeta, DateBounds

logger = logging.getLogger(__name__)

QUICK_COLUMN_LIMIT = 12


def build_column_chips(meta: DatasetMeta, limit: int = QUICK_COLUMN_LIMIT) -> list[str]:
    """
    Quick-pick columns: agent column, date column, then the first columns.
    """

    chips: list[str] = []
    for name in [meta.agent_col, meta.date_col, *meta.columns[:limit]]:
        if name and name not in chips:
            chips.append(name)
    return chips


def default_column(meta: DatasetMeta) -> str | None:
    if meta.agent_col and (not meta.columns or meta.agent_col in meta.columns):
        return meta.agent_col
    return meta.columns[0] if meta.columns else None


@dataclass(frozen=True)
class DashboardView:
    table: TableView
    count: int = 0
    date_col: str | None = None
    page: int = 1
    total_pages: int = 1
    has_previous: bool = False
    has_next: bool = False


@dataclass(frozen=True)
class QueryOutcome:
    status: StatusMessage
    view: DashboardView | None = None
    applied: bool = True


class DashboardSession:
    """
    Query state plus the calls that read and refresh it.
    """

    def __init__(
        self,
        *,
        client: ReportingAPIClient,
        file_id: str,
        state: QueryState | None = None,
    ) -> None:
        self._client = client
        self._file_id = file_id
        self._state = state or QueryState()
        self._meta: DatasetMeta | None = None
        self._chips: list[str] = []
        self._view: DashboardView | None = None
        self._query_epoch = 0

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def metadata(self) -> DatasetMeta | None:
        return self._meta

    @property
    def chips(self) -> list[str]:
        return list(self._chips)

    @property
    def view(self) -> DashboardView | None:
        return self._view

    def load_metadata(self) -> DatasetMeta:
        meta = self._client.fetch_metadata(self._file_id)
        self._meta = meta
        self._chips = build_column_chips(meta)
        self._state = replace(self._state, column=default_column(meta))
        logger.info(
            "Loaded dataset metadata file_id=%s columns=%s agent_col=%s date_col=%s",
            self._file_id,
            len(meta.columns),
            meta.agent_col,
            meta.date_col,
        )
        return meta

    def load_date_bounds(self) -> DateBounds | None:
        """
        Return the dataset's date range for the date pickers, if it has one.
        """

        bounds = self._client.fetch_date_bounds(self._file_id)
        return bounds if bounds.is_complete else None

    def update_controls(
        self,
        *,
        column: str | None,
        value: str | None,
        mode: str | None,
        start_date: str | None,
        end_date: str | None,
        page_size: Any,
    ) -> QueryState:
        self._state = with_controls(
            self._state,
            column=column,
            value=value,
            mode=mode,
            start_date=start_date,
            end_date=end_date,
            page_size=page_size,
        )
        return self._state

    def prefill_agent(self, agent: str) -> QueryState:
        """
        Filter on one agent, as when arriving from the agent directory.
        """

        self._state = replace(self._state, value=agent, mode="equals", page=1)
        return self._state

    def run_query(self) -> QueryOutcome:
        """
        Fetch the current page; a response overtaken by a newer query is dropped.
        """

        self._query_epoch += 1
        epoch = self._query_epoch
        request = build_query_request(self._state)
        try:
            result = self._client.query_rows(self._file_id, request)
        except ReportClientError as exc:
            if epoch != self._query_epoch:
                return QueryOutcome(status=StatusMessage.info(""), applied=False)
            logger.warning("Dashboard query failed file_id=%s error=%s", self._file_id, exc)
            return QueryOutcome(status=failure_message("Query", exc), view=self._view)

        if epoch != self._query_epoch:
            return QueryOutcome(status=StatusMessage.info(""), applied=False)

        self._state = apply_query_result(self._state, result)
        self._view = DashboardView(
            table=render_table(result.rows, DASHBOARD_EMPTY_MESSAGE),
            count=result.count,
            date_col=result.date_col or (self._meta.date_col if self._meta else None),
            page=self._state.page,
            total_pages=self._state.total_pages,
            has_previous=self._state.has_previous,
            has_next=self._state.has_next,
        )
        return QueryOutcome(status=StatusMessage.good(f"{result.count} matching row(s)"), view=self._view)

    def apply_filters(self) -> QueryOutcome:
        self._state = replace(self._state, page=1)
        return self.run_query()

    def select_column(self, column: str) -> QueryOutcome:
        self._state = replace(self._state, column=column, page=1)
        return self.run_query()

    def change_page_size(self, page_size: Any) -> QueryOutcome:
        self._state = with_controls(
            self._state,
            column=self._state.column,
            value=self._state.value,
            mode=self._state.mode,
            start_date=self._state.start_date,
            end_date=self._state.end_date,
            page_size=page_size,
        )
        self._state = replace(self._state, page=1)
        return self.run_query()

    def next_page(self) -> QueryOutcome | None:
        if not self._state.has_next:
            return None
        self._state = go_to_page(self._state, self._state.page + 1)
        return self.run_query()

    def previous_page(self) -> QueryOutcome | None:
        if not self._state.has_previous:
            return None
        self._state = go_to_page(self._state, self._state.page - 1)
        return self.run_query()

    def reset(self) -> QueryOutcome:
        self._state = reset_filters(self._state)
        return self.run_query()

    def export_url(self, export_format: str) -> str:
        return self._client.export_url(self._file_id, self._state, export_format)

"""
agent_reports/services/agent_directory.py

Distinct agents found in the dataset's agent column.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.links import dashboard_link
from agent_reports.errors import ReportClientError
from agent_reports.presentation.messages import StatusMessage, failure_message
from agent_reports.presentation.tables import AGENTS_EMPTY_MESSAGE
from agent_reports.schemas import AgentSearchRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentListing:
    agents: tuple[str, ...] = ()
    count: int = 0
    date_col: str | None = None
    status: StatusMessage = field(default_factory=lambda: StatusMessage.info(""))

    @property
    def empty_message(self) -> str:
        return AGENTS_EMPTY_MESSAGE


class AgentDirectory:
    def __init__(self, *, client: ReportingAPIClient, file_id: str) -> None:
        self._client = client
        self._file_id = file_id
        self.search = ""
        self.start_date = ""
        self.end_date = ""

    def query(
        self,
        *,
        search: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> AgentListing:
        """
        List agents matching the search text within an optional date range.

        Arguments left as None keep their previous values.
        """

        if search is not None:
            self.search = search.strip()
        if start_date is not None:
            self.start_date = start_date
        if end_date is not None:
            self.end_date = end_date

        request = AgentSearchRequest(search=self.search, start_date=self.start_date, end_date=self.end_date)
        try:
            result = self._client.list_agents(self._file_id, request)
        except ReportClientError as exc:
            logger.warning("Agent listing failed file_id=%s error=%s", self._file_id, exc)
            return AgentListing(status=failure_message("Agent search", exc))

        return AgentListing(
            agents=tuple(result.agents),
            count=result.count,
            date_col=result.date_col,
            status=StatusMessage.good(f"{result.count} agent(s)"),
        )

    def reset(self) -> AgentListing:
        return self.query(search="", start_date="", end_date="")

    def link_for(self, agent: str) -> str:
        return dashboard_link(self._file_id, agent=agent)

from __future__ import annotations

import pytest

from agent_reports.config import ReportingAPISettings
from agent_reports.connectors.base import HTTPTransport
from agent_reports.connectors.reporting_api import ReportingAPIClient
from fakes import FakeSession


@pytest.fixture()
def settings() -> ReportingAPISettings:
    return ReportingAPISettings(base_url="http://reports.test", max_retries=0)


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def sleeps() -> list[float]:
    return []


@pytest.fixture()
def client(settings: ReportingAPISettings, session: FakeSession, sleeps: list[float]) -> ReportingAPIClient:
    transport = HTTPTransport(settings=settings, session=session, sleep=sleeps.append)  # type: ignore[arg-type]
    return ReportingAPIClient(settings=settings, transport=transport)

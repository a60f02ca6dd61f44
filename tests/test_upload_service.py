"""
tests/test_upload_service.py
"""

from __future__ import annotations

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.services.agent_directory import AgentDirectory
from agent_reports.services.upload_service import upload_dataset
from fakes import FakeSession, json_response


def test_upload_three_files_links_to_dashboard(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"file_id": "abc", "uploaded_files": 3}))

    outcome = upload_dataset(client, [("a.xlsx", b"1"), ("b.xlsx", b"2"), ("c.xlsx", b"3")])

    assert outcome.ok
    assert outcome.file_id == "abc"
    assert outcome.dashboard_link == "dashboard?file_id=abc"
    assert outcome.status.text == "Uploaded 3 files. Redirecting..."


def test_upload_without_files_sends_nothing(client: ReportingAPIClient, session: FakeSession) -> None:
    outcome = upload_dataset(client, [])

    assert not outcome.ok
    assert outcome.status.text == "Pick a file first"
    assert session.calls == []


def test_upload_server_error_is_reported(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"error": "Unsupported file type"}, status_code=415))

    outcome = upload_dataset(client, [("a.pdf", b"1")])

    assert not outcome.ok
    assert outcome.status.text == "Unsupported file type"


def test_agent_directory_lists_and_links(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(
        json_response({"agents": ["Ann Lee"], "count": 1, "date_col": "Date"}),
        json_response({"agents": [], "count": 0}),
    )
    directory = AgentDirectory(client=client, file_id="abc")

    listing = directory.query(search="  ann ", start_date="2024-01-01")
    cleared = directory.reset()

    assert listing.agents == ("Ann Lee",)
    assert listing.status.text == "1 agent(s)"
    assert session.calls[0]["json"] == {"search": "ann", "start_date": "2024-01-01", "end_date": ""}
    assert session.calls[1]["json"] == {"search": "", "start_date": "", "end_date": ""}
    assert cleared.count == 0
    assert cleared.empty_message == "No agents found"
    assert directory.link_for("Ann Lee") == "dashboard?file_id=abc&agent=Ann+Lee"

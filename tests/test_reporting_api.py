"""
tests/test_reporting_api.py

Endpoint paths, request bodies and response decoding of ReportingAPIClient.
"""

from __future__ import annotations

import pytest

from agent_reports.connectors.reporting_api import ReportingAPIClient
from agent_reports.domain.downloads import DownloadedReport, ReportKind
from agent_reports.domain.query_state import QueryState
from agent_reports.errors import HttpStatusError, InputValidationError, ResponseFormatError
from agent_reports.schemas import ActivityRequest, AgentSearchRequest, CompareResponse, QueryRequest
from fakes import FakeSession, binary_response, json_response


def test_upload_sends_every_file_under_files_field(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"file_id": 42, "uploaded_files": 3}))

    result = client.upload_files([("a.xlsx", b"1"), ("b.xlsx", b"2"), ("c.csv", b"3")])

    call = session.calls[0]
    assert (call["method"], call["url"]) == ("POST", "http://reports.test/api/upload")
    assert [field for field, _ in call["files"]] == ["files", "files", "files"]
    assert result.file_id == "42"
    assert result.uploaded_files == 3


def test_upload_rejects_empty_and_oversized_selections(client: ReportingAPIClient, session: FakeSession) -> None:
    with pytest.raises(InputValidationError, match="Pick a file first"):
        client.upload_files([])

    with pytest.raises(InputValidationError, match="Upload up to 5 files at once"):
        client.upload_files([(f"{index}.xlsx", b"x") for index in range(6)])

    assert session.calls == []


def test_metadata_and_date_range_paths(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(
        json_response({"columns": ["Agent", "Date"], "agent_col": "Agent", "date_col": "Date", "rows": 9}),
        json_response({"min": "2024-01-01", "max": "2024-05-31"}),
    )

    meta = client.fetch_metadata("abc")
    bounds = client.fetch_date_bounds("abc")

    assert [call["url"] for call in session.calls] == [
        "http://reports.test/api/meta/abc",
        "http://reports.test/api/date-range/abc",
    ]
    assert meta.columns == ["Agent", "Date"]
    assert meta.agent_col == "Agent"
    assert (bounds.min_date, bounds.max_date, bounds.is_complete) == ("2024-01-01", "2024-05-31", True)


def test_path_segments_are_escaped(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"columns": []}))

    client.fetch_metadata("a b/c")

    assert session.calls[0]["url"] == "http://reports.test/api/meta/a%20b%2Fc"


def test_query_posts_request_body(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"rows": [{"Agent": "Ann"}], "count": None, "page": 2, "total_pages": 4}))
    request = QueryRequest(column="Agent", value="Ann", page=2, page_size=10)

    result = client.query_rows("abc", request)

    call = session.calls[0]
    assert (call["method"], call["url"]) == ("POST", "http://reports.test/api/query/abc")
    assert call["json"]["column"] == "Agent"
    assert call["json"]["page_size"] == 10
    assert result.count == 0
    assert (result.page, result.total_pages) == (2, 4)


def test_list_agents(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"agents": ["Ann", "Bob"], "count": 2, "date_col": "Date"}))

    result = client.list_agents("abc", AgentSearchRequest(search="a"))

    assert session.calls[0]["url"] == "http://reports.test/api/agents/abc"
    assert session.calls[0]["json"] == {"search": "a", "start_date": "", "end_date": ""}
    assert result.agents == ["Ann", "Bob"]


def test_export_url_is_built_not_fetched(client: ReportingAPIClient, session: FakeSession) -> None:
    state = QueryState(column="Agent", value="Ann Lee", mode="equals", start_date="2024-01-01")

    url = client.export_url("abc", state, "csv")

    assert url == (
        "http://reports.test/api/export/abc?format=csv&column=Agent&value=Ann+Lee&mode=equals&start_date=2024-01-01"
    )
    assert session.calls == []


def test_compare_json_preview(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(
        json_response(
            {
                "report_id": 7,
                "preview_rows": [{"Name": "Acme"}],
                "compared_count": 10,
                "inactive_count": 2,
                "preview_total": 2,
                "preview_limit": 50,
            }
        )
    )

    result = client.compare_upload("abc", filename="visits.xlsx", content=b"data")

    call = session.calls[0]
    assert call["url"] == "http://reports.test/api/agent-compare/abc"
    assert call["files"] == [("file", ("visits.xlsx", b"data"))]
    assert isinstance(result, CompareResponse)
    assert result.report_id == "7"


def test_compare_attachment_is_returned_as_download(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(binary_response(b"PK\x03\x04", 'attachment; filename="inactive_may.xlsx"'))

    result = client.compare_upload("abc", filename="visits.csv", content=b"data")

    assert isinstance(result, DownloadedReport)
    assert result.kind is ReportKind.COMPARE
    assert result.filename == "inactive_may.xlsx"
    assert result.content == b"PK\x03\x04"


def test_compare_error_keeps_server_message(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"error": "Compare file has no Name column"}, status_code=400))

    with pytest.raises(HttpStatusError) as excinfo:
        client.compare_upload("abc", filename="visits.csv", content=b"data")

    assert excinfo.value.status == 400
    assert excinfo.value.describe("Compare") == "Compare file has no Name column"


def test_activity_posts_timeframe(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response({"activity_report_id": "a1", "total_rows": 3, "timeframe_label": "May 2024"}))
    request = ActivityRequest(timeframe_mode="month", month="2024-05", activity_type="visits")

    result = client.generate_activity("abc", "r1", request)

    call = session.calls[0]
    assert call["url"] == "http://reports.test/api/agent-monthly/abc/r1"
    assert call["json"] == {
        "timeframe_mode": "month",
        "month": "2024-05",
        "start_date": "",
        "end_date": "",
        "activity_type": "visits",
    }
    assert result.activity_report_id == "a1"
    assert result.total_rows == 3


def test_downloads_use_disposition_or_default_name(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(
        binary_response(b"c", "attachment; filename*=UTF-8''inactive%20may.xlsx"),
        binary_response(b"a"),
    )

    compare = client.download_compare_report("abc", "r1")
    activity = client.download_activity_report("abc", "r1", "a1")

    assert [call["url"] for call in session.calls] == [
        "http://reports.test/api/agent-compare-download/abc/r1",
        "http://reports.test/api/agent-monthly-download/abc/r1/a1",
    ]
    assert compare.filename == "inactive may.xlsx"
    assert activity.filename == "agent_monthly_activity.xlsx"
    assert activity.kind is ReportKind.ACTIVITY


def test_unexpected_shapes_raise_format_errors(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(json_response(["not", "an", "object"]), json_response({"columns": "Agent"}))

    with pytest.raises(ResponseFormatError):
        client.fetch_metadata("abc")
    with pytest.raises(ResponseFormatError):
        client.fetch_metadata("abc")


def test_null_lists_are_read_as_empty(client: ReportingAPIClient, session: FakeSession) -> None:
    session.queue(
        json_response({"report_id": "r1", "preview_rows": None, "compared_count": 10, "inactive_count": 0}),
        json_response({"activity_report_id": "a1", "preview_rows": None, "total_rows": 0}),
        json_response({"rows": None, "count": 0}),
        json_response({"agents": None, "count": 0}),
        json_response({"columns": None}),
    )

    compare = client.compare_upload("abc", filename="visits.xlsx", content=b"data")
    activity = client.generate_activity("abc", "r1", ActivityRequest(timeframe_mode="month", month="2024-05"))
    rows = client.query_rows("abc", QueryRequest())
    agents = client.list_agents("abc", AgentSearchRequest())
    meta = client.fetch_metadata("abc")

    assert isinstance(compare, CompareResponse)
    assert compare.report_id == "r1"
    assert compare.preview_rows == []
    assert activity.preview_rows == []
    assert rows.rows == []
    assert agents.agents == []
    assert meta.columns == []

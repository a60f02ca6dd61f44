from __future__ import annotations

import pytest

from agent_reports.domain.downloads import (
    DownloadedReport,
    ReportKind,
    parse_filename_from_disposition,
    resolve_filename,
)
from agent_reports.services.report_saver import ReportSaver


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        ('attachment; filename="inactive_2024.xlsx"', "inactive_2024.xlsx"),
        ("attachment; filename=report.xlsx", "report.xlsx"),
        ("attachment; filename*=UTF-8''agent%20activity%20May.xlsx", "agent activity May.xlsx"),
        ('ATTACHMENT; FILENAME="Upper.xlsx"', "Upper.xlsx"),
        ('attachment; filename="../../etc/passwd"', "passwd"),
    ],
)
def test_parse_filename_from_disposition(header: str, expected: str) -> None:
    assert parse_filename_from_disposition(header) == expected


@pytest.mark.parametrize("header", [None, "", "inline", 'attachment; filename=""', "attachment; filename=.."])
def test_unusable_disposition_returns_none(header: str | None) -> None:
    assert parse_filename_from_disposition(header) is None


def test_resolve_filename_falls_back_per_kind() -> None:
    assert resolve_filename(ReportKind.COMPARE, None) == "inactive_businesses.xlsx"
    assert resolve_filename(ReportKind.ACTIVITY, "inline") == "agent_monthly_activity.xlsx"


def test_report_saver_writes_file_without_leftovers(tmp_path) -> None:
    saver = ReportSaver(tmp_path / "out")
    report = DownloadedReport(kind=ReportKind.COMPARE, filename="inactive.xlsx", content=b"PK\x03\x04data")

    path = saver.save(report)

    assert path == tmp_path / "out" / "inactive.xlsx"
    assert path.read_bytes() == b"PK\x03\x04data"
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["inactive.xlsx"]


def test_report_saver_replaces_unsafe_name(tmp_path) -> None:
    saver = ReportSaver(tmp_path)
    report = DownloadedReport(kind=ReportKind.ACTIVITY, filename="..", content=b"x")

    assert saver.save(report).name == "agent_monthly_activity.xlsx"

from __future__ import annotations

from agent_reports.presentation.tables import (
    COMPARE_EMPTY_MESSAGE,
    DASHBOARD_EMPTY_MESSAGE,
    PREVIEW_PRIORITY_COLUMN,
    render_table,
)


def test_empty_rows_render_context_message() -> None:
    view = render_table([], COMPARE_EMPTY_MESSAGE)

    assert view.is_empty
    assert view.columns == ()
    assert view.to_text() == "No inactive businesses found in this run."
    assert render_table(None, DASHBOARD_EMPTY_MESSAGE).to_text() == "No results found"


def test_header_follows_first_row_keys_and_nulls_render_empty() -> None:
    rows = [
        {"Name": "Acme", "Agent": "Jo", "Visits": 3},
        {"Name": "Beta", "Agent": None},
    ]

    view = render_table(rows, DASHBOARD_EMPTY_MESSAGE)

    assert view.columns == ("Name", "Agent", "Visits")
    assert view.rows == (("Acme", "Jo", "3"), ("Beta", "", ""))
    assert view.to_text(separator=",") == "Name,Agent,Visits\nAcme,Jo,3\nBeta,,"


def test_priority_column_moves_first() -> None:
    rows = [{"Name": "Acme", "S/N": 1, "Agent": "Jo"}]

    view = render_table(rows, COMPARE_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN)

    assert view.columns == ("S/N", "Name", "Agent")
    assert view.rows == (("1", "Acme", "Jo"),)


def test_priority_column_absent_keeps_order() -> None:
    view = render_table([{"B": 1, "A": 2}], COMPARE_EMPTY_MESSAGE, PREVIEW_PRIORITY_COLUMN)

    assert view.columns == ("B", "A")


def test_to_dataframe_matches_view() -> None:
    frame = render_table([{"Name": "Acme", "Agent": None}], DASHBOARD_EMPTY_MESSAGE).to_dataframe()

    assert list(frame.columns) == ["Name", "Agent"]
    assert frame.iloc[0].tolist() == ["Acme", ""]

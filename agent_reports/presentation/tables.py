"""
agent_reports/presentation/tables.py

Rectangular result-set rendering shared by every table in the client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import pandas as pd

PREVIEW_PRIORITY_COLUMN = "S/N"

DASHBOARD_EMPTY_MESSAGE = "No results found"
COMPARE_EMPTY_MESSAGE = "No inactive businesses found in this run."
ACTIVITY_EMPTY_MESSAGE = "No businesses match this month/filter."
AGENTS_EMPTY_MESSAGE = "No agents found"


@dataclass(frozen=True)
class TableView:
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    empty_message: str

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def to_text(self, separator: str = "\t") -> str:
        if self.is_empty:
            return self.empty_message
        lines = [separator.join(self.columns)]
        lines.extend(separator.join(row) for row in self.rows)
        return "\n".join(lines)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.rows), columns=list(self.columns))


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value)


def render_table(
    rows: Sequence[Mapping[str, Any]] | None,
    empty_message: str,
    priority_column: str | None = None,
) -> TableView:
    """
    Render rows using the first row's keys as the header.

    ``priority_column`` moves to the front when present; other columns
    keep first-row order. Missing and null cells render as "".
    """

    if not rows:
        return TableView(columns=(), rows=(), empty_message=empty_message)

    columns = list(rows[0].keys())
    if priority_column and priority_column in columns:
        columns.remove(priority_column)
        columns.insert(0, priority_column)

    rendered = tuple(tuple(_cell(row.get(column)) for column in columns) for row in rows)
    return TableView(columns=tuple(columns), rows=rendered, empty_message=empty_message)

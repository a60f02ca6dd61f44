"""
agent_reports/schemas/reporting.py

Request and response contracts for the remote reporting API.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

Row = dict[str, Any]


def _zero_if_missing(value: Any) -> Any:
    return 0 if value in (None, "") else value


def _empty_if_missing(value: Any) -> Any:
    return [] if value is None else value


def _optional_identifier(value: Any) -> Any:
    if value in (None, ""):
        return None
    return str(value)


class _ResponseModel(BaseModel):
    """Server payloads may grow new fields; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class UploadResponse(_ResponseModel):
    file_id: str
    uploaded_files: Optional[int] = None

    @field_validator("file_id", mode="before")
    @classmethod
    def coerce_file_id(cls, value: Any) -> Any:
        return value if value is None else str(value)


class DatasetMeta(_ResponseModel):
    columns: list[str] = Field(default_factory=list)
    agent_col: Optional[str] = None
    date_col: Optional[str] = None

    @field_validator("columns", mode="before")
    @classmethod
    def default_columns(cls, value: Any) -> Any:
        return _empty_if_missing(value)


class DateBounds(_ResponseModel):
    min_date: Optional[str] = Field(default=None, alias="min")
    max_date: Optional[str] = Field(default=None, alias="max")

    @property
    def is_complete(self) -> bool:
        return bool(self.min_date and self.max_date)


class QueryRequest(BaseModel):
    column: Optional[str] = None
    value: str = ""
    mode: str = "contains"
    start_date: str = ""
    end_date: str = ""
    page: int = 1
    page_size: int = 25


class QueryResponse(_ResponseModel):
    rows: list[Row] = Field(default_factory=list)
    count: int = 0
    page: Optional[int] = None
    total_pages: Optional[int] = None
    date_col: Optional[str] = None

    @field_validator("rows", mode="before")
    @classmethod
    def default_rows(cls, value: Any) -> Any:
        return _empty_if_missing(value)

    @field_validator("count", mode="before")
    @classmethod
    def default_count(cls, value: Any) -> Any:
        return _zero_if_missing(value)


class AgentSearchRequest(BaseModel):
    search: str = ""
    start_date: str = ""
    end_date: str = ""


class AgentListResponse(_ResponseModel):
    agents: list[str] = Field(default_factory=list)
    count: int = 0
    date_col: Optional[str] = None

    @field_validator("agents", mode="before")
    @classmethod
    def default_agents(cls, value: Any) -> Any:
        return _empty_if_missing(value)

    @field_validator("count", mode="before")
    @classmethod
    def default_count(cls, value: Any) -> Any:
        return _zero_if_missing(value)


class CompareResponse(_ResponseModel):
    """
    JSON-preview variant of the compare endpoint.

    ``preview_total`` is the true number of matching rows; at most
    ``preview_limit`` of them are included in ``preview_rows``.
    """

    report_id: Optional[str] = None
    preview_rows: list[Row] = Field(default_factory=list)
    compared_count: int = 0
    inactive_count: int = 0
    preview_total: int = 0
    preview_limit: int = 0

    @field_validator("report_id", mode="before")
    @classmethod
    def coerce_report_id(cls, value: Any) -> Any:
        return _optional_identifier(value)

    @field_validator("preview_rows", mode="before")
    @classmethod
    def default_preview_rows(cls, value: Any) -> Any:
        return _empty_if_missing(value)

    @field_validator(
        "compared_count",
        "inactive_count",
        "preview_total",
        "preview_limit",
        mode="before",
    )
    @classmethod
    def default_counts(cls, value: Any) -> Any:
        return _zero_if_missing(value)


class ActivityRequest(BaseModel):
    timeframe_mode: str
    month: str = ""
    start_date: str = ""
    end_date: str = ""
    activity_type: str = "all"


class ActivityResponse(_ResponseModel):
    activity_report_id: Optional[str] = None
    preview_rows: list[Row] = Field(default_factory=list)
    total_rows: int = 0
    timeframe_label: Optional[str] = None
    activity_type: Optional[str] = None
    preview_total: int = 0
    preview_limit: int = 0

    @field_validator("activity_report_id", mode="before")
    @classmethod
    def coerce_activity_report_id(cls, value: Any) -> Any:
        return _optional_identifier(value)

    @field_validator("preview_rows", mode="before")
    @classmethod
    def default_preview_rows(cls, value: Any) -> Any:
        return _empty_if_missing(value)

    @field_validator(
        "total_rows",
        "preview_total",
        "preview_limit",
        mode="before",
    )
    @classmethod
    def default_counts(cls, value: Any) -> Any:
        return _zero_if_missing(value)

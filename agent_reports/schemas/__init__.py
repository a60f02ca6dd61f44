from agent_reports.schemas.reporting import (
    ActivityRequest,
    ActivityResponse,
    AgentListResponse,
    AgentSearchRequest,
    CompareResponse,
    DatasetMeta,
    DateBounds,
    QueryRequest,
    QueryResponse,
    Row,
    UploadResponse,
)

__all__ = [
    "ActivityRequest",
    "ActivityResponse",
    "AgentListResponse",
    "AgentSearchRequest",
    "CompareResponse",
    "DatasetMeta",
    "DateBounds",
    "QueryRequest",
    "QueryResponse",
    "Row",
    "UploadResponse",
]

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel

RunMode = Literal["api", "demo"]
RunStatus = Literal["success", "no_data", "demo", "fallback", "error_fallback"]


class RunResult(BaseModel):
    """Outcome of one extraction run."""

    mode: RunMode
    status: RunStatus
    tables_processed: int = 0
    total_data_points: int = 0
    demo_data_points: int = 0
    error: Optional[str] = None


class RunResponse(BaseModel):
    result: RunResult
    records: List[Dict[str, Any]]


class RunQueuedResponse(BaseModel):
    message: str
    status: str
    dataset: str


class DataResponse(BaseModel):
    request_id: str
    api_latency_ms: int
    total_count: int
    offset: int
    limit: int
    data: List[Dict[str, Any]]


class HealthResponse(BaseModel):
    status: str
    api_key_configured: bool
    storage: str

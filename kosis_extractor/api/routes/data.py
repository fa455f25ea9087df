"""Data routes - Exposes records stored by background and scheduled runs."""

import time
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from kosis_extractor.api.deps import get_dataset
from kosis_extractor.core.storage import DatasetStore
from kosis_extractor.schemas.api import DataResponse

router = APIRouter(prefix="/data", tags=["data"])

RecordType = Literal["data", "raw", "error", "message", "summary", "demo_summary"]


@router.get("", response_model=DataResponse)
def get_records(
    record_type: Optional[RecordType] = Query(None, alias="type", description="Record type; 'data' selects normalized data points"),
    limit: int = Query(50, ge=1, le=500, description="Number of records to return (max 500)"),
    offset: int = Query(0, ge=0, description="Number of records to skip"),
    dataset: DatasetStore = Depends(get_dataset),
):
    """
    Get stored extraction records with pagination.

    Includes request metadata (request_id, latency_ms).
    """
    start = time.perf_counter()
    request_id = str(uuid.uuid4())

    matching = dataset.list_items(record_type=record_type)
    page = matching[offset : offset + limit]

    latency_ms = int((time.perf_counter() - start) * 1000)

    return DataResponse(
        request_id=request_id,
        api_latency_ms=latency_ms,
        total_count=len(matching),
        offset=offset,
        limit=limit,
        data=page,
    )


@router.get("/count")
def get_record_count(dataset: DatasetStore = Depends(get_dataset)):
    """Get total count of stored records."""
    return {"count": dataset.count()}

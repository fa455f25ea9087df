"""Run routes - Trigger KOSIS extraction runs."""

from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Body, Depends

from kosis_extractor.api.deps import get_dataset, get_key_value_store, get_settings
from kosis_extractor.core.config import Settings
from kosis_extractor.core.logging import ProgressReporter, get_logger
from kosis_extractor.core.storage import DatasetStore, KeyValueStore, MemoryDataset
from kosis_extractor.schemas.api import RunQueuedResponse, RunResponse
from kosis_extractor.services.extraction_service import ExtractionService

router = APIRouter(prefix="/runs", tags=["runs"])
log = get_logger("run_routes")


@router.post("", response_model=RunResponse)
async def trigger_run(
    raw_input: Dict[str, Any] = Body(default={}),
    store: KeyValueStore = Depends(get_key_value_store),
    settings: Settings = Depends(get_settings),
):
    """
    Run one extraction synchronously and return every emitted record.

    The body is the actor input (searchKeyword, vwCd, parentId, maxItems,
    includeMetadata, outputFormat, delayBetweenRequestsMs). Invalid values
    are coerced to defaults. Without a KOSIS API key the run uses demo data.
    """
    log.info("Extraction triggered via API")

    dataset = MemoryDataset()
    service = ExtractionService(dataset, store, reporter=ProgressReporter(log), settings=settings)
    result = await service.run(raw_input)

    return RunResponse(result=result, records=dataset.items)


@router.post("/background", response_model=RunQueuedResponse)
async def trigger_run_background(
    background_tasks: BackgroundTasks,
    raw_input: Dict[str, Any] = Body(default={}),
    dataset: DatasetStore = Depends(get_dataset),
    store: KeyValueStore = Depends(get_key_value_store),
    settings: Settings = Depends(get_settings),
):
    """
    Queue an extraction run (non-blocking).

    Records are appended to the default dataset; read them back from /data.
    """

    async def run_extraction():
        service = ExtractionService(dataset, store, reporter=ProgressReporter(log), settings=settings)
        try:
            result = await service.run(raw_input)
            log.info(f"Background extraction completed: {result.model_dump()}")
        except Exception as exc:
            log.error(f"Background extraction failed: {exc}")

    background_tasks.add_task(run_extraction)

    return RunQueuedResponse(
        message="Extraction run started in background",
        status="queued",
        dataset=str(dataset.items_file),
    )

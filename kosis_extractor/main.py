from contextlib import asynccontextmanager
import asyncio
from typing import Optional

from fastapi import FastAPI

from kosis_extractor.api.routes import data_router, health_router, runs_router
from kosis_extractor.core.config import settings
from kosis_extractor.core.logging import ProgressReporter, get_logger
from kosis_extractor.core.storage import DatasetStore, KeyValueStore
from kosis_extractor.run_entrypoint import INPUT_KEY
from kosis_extractor.services.extraction_service import ExtractionService


log = get_logger("app")

# Background task handle
_schedule_task: Optional[asyncio.Task] = None


async def run_scheduled_extraction() -> None:
    """Run one extraction with the stored INPUT, writing to the default dataset."""
    log.info("Starting scheduled KOSIS extraction...")
    store = KeyValueStore(settings.STORAGE_DIR)
    dataset = DatasetStore(settings.STORAGE_DIR)
    try:
        raw_input = await store.get_value(INPUT_KEY)
        service = ExtractionService(
            dataset, store, reporter=ProgressReporter(get_logger("extraction")), settings=settings
        )
        result = await service.run(raw_input)
        log.info(f"Scheduled extraction finished: mode={result.mode} status={result.status}")
    except Exception as exc:
        log.exception(f"Scheduled extraction failed: {exc}")


async def scheduled_extraction_task() -> None:
    """Background task that runs an extraction at the configured interval."""
    interval = settings.SCHEDULE_INTERVAL_SECONDS
    log.info(f"Scheduled extraction task started (interval: {interval}s)")

    # Run immediately on startup
    await run_scheduled_extraction()

    while True:
        try:
            await asyncio.sleep(interval)
            await run_scheduled_extraction()
        except asyncio.CancelledError:
            log.info("Scheduled extraction task cancelled")
            break


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _schedule_task

    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if not settings.KOSIS_API_KEY:
        log.warning("KOSIS_API_KEY is not set; runs will use demo data unless the key-value store provides one")

    if settings.SCHEDULE_ENABLED:
        log.info("Starting scheduled extraction background task...")
        _schedule_task = asyncio.create_task(scheduled_extraction_task())
    else:
        log.info("Scheduled extraction is disabled (SCHEDULE_ENABLED=false)")

    yield

    log.info("Shutting down services...")
    if _schedule_task:
        log.info("Cancelling scheduled extraction task...")
        _schedule_task.cancel()
        try:
            await _schedule_task
        except asyncio.CancelledError:
            pass
        _schedule_task = None

    log.info("Application shutdown complete")


# Configure FastAPI based on environment
app = FastAPI(
    title="KOSIS Statistics Extractor",
    description="Extracts and normalizes Korean government statistics from the KOSIS Open API",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production for security
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)


app.include_router(runs_router)
app.include_router(data_router)
app.include_router(health_router)

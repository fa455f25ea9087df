"""Health routes - System health and readiness checks."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response

from kosis_extractor.api.deps import get_dataset, get_settings
from kosis_extractor.core.config import Settings
from kosis_extractor.core.storage import DatasetStore
from kosis_extractor.schemas.api import HealthResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
def health(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint for load balancer and Docker health checks.

    Reports whether a KOSIS API key is configured; runs without one use demo data.
    """
    return HealthResponse(
        status="healthy",
        api_key_configured=bool(settings.KOSIS_API_KEY and settings.KOSIS_API_KEY.strip()),
        storage=settings.STORAGE_DIR,
    )


@router.get("/ready")
def readiness(response: Response, dataset: DatasetStore = Depends(get_dataset)):
    """
    Readiness probe - checks that the dataset directory is writable.

    Returns 200 if ready, 503 otherwise.
    """
    probe = dataset.dataset_dir / ".ready"
    try:
        probe.write_text(datetime.now(timezone.utc).isoformat(), encoding="utf-8")
        probe.unlink()
        return {"status": "ready", "timestamp": datetime.now(timezone.utc).isoformat()}
    except OSError as e:
        response.status_code = 503
        return {"status": "not_ready", "error": str(e), "timestamp": datetime.now(timezone.utc).isoformat()}

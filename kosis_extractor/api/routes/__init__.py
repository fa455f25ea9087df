from kosis_extractor.api.routes.data import router as data_router
from kosis_extractor.api.routes.health import router as health_router
from kosis_extractor.api.routes.runs import router as runs_router

__all__ = ["data_router", "health_router", "runs_router"]

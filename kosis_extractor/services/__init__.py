# Services package
from kosis_extractor.services.classification import classify_data_type
from kosis_extractor.services.demo import run_demo_mode
from kosis_extractor.services.extraction_service import ExtractionService
from kosis_extractor.services.normalizer import normalize_statistical_data

__all__ = [
    "classify_data_type",
    "run_demo_mode",
    "ExtractionService",
    "normalize_statistical_data",
]

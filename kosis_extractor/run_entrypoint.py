"""Run entrypoint - Standalone script for running one KOSIS extraction.

Usage:
    python -m kosis_extractor.run_entrypoint               # Input from the key-value store (INPUT.json)
    python -m kosis_extractor.run_entrypoint input.json    # Input from a JSON file
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

from kosis_extractor.core.config import settings
from kosis_extractor.core.logging import ProgressReporter, get_logger
from kosis_extractor.core.storage import DatasetStore, KeyValueStore
from kosis_extractor.schemas.api import RunResult
from kosis_extractor.services.extraction_service import ExtractionService

logger = get_logger("run_entrypoint")

INPUT_KEY = "INPUT"


async def load_input(store: KeyValueStore, input_path: Optional[str] = None) -> Any:
    """Read run input from a file, or from the key-value store when no file is given."""
    if input_path:
        with open(input_path, "r", encoding="utf-8") as f:
            return json.load(f)
    return await store.get_value(INPUT_KEY)


async def run_extraction(input_path: Optional[str] = None) -> RunResult:
    store = KeyValueStore(settings.STORAGE_DIR)
    dataset = DatasetStore(settings.STORAGE_DIR)
    raw_input = await load_input(store, input_path)

    service = ExtractionService(
        dataset, store, reporter=ProgressReporter(get_logger("extraction")), settings=settings
    )
    result = await service.run(raw_input)
    logger.info(f"Extraction completed: {result.model_dump()}")
    return result


def main():
    """Main entry point for a single extraction run."""
    logger.info("KOSIS extraction starting...")

    input_path = sys.argv[1] if len(sys.argv) > 1 else None
    if input_path and not Path(input_path).is_file():
        logger.error(f"Input file not found: {input_path}")
        sys.exit(1)

    try:
        result = asyncio.run(run_extraction(input_path))
    except json.JSONDecodeError as exc:
        logger.error(f"Input is not valid JSON: {exc}")
        sys.exit(1)

    return result


if __name__ == "__main__":
    main()

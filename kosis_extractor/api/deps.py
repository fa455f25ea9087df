"""API dependencies"""

from kosis_extractor.core.config import Settings, settings
from kosis_extractor.core.storage import DatasetStore, KeyValueStore


def get_settings() -> Settings:
    return settings


def get_dataset() -> DatasetStore:
    """Default dataset that scheduled and background runs write to."""
    return DatasetStore(settings.STORAGE_DIR)


def get_key_value_store() -> KeyValueStore:
    return KeyValueStore(settings.STORAGE_DIR)

"""Shared fixtures and fakes for the extractor tests"""

from typing import Any, Dict, List, Optional

import pytest

from kosis_extractor.core.config import Settings
from kosis_extractor.core.logging import ProgressReporter
from kosis_extractor.core.storage import KeyValueStore, MemoryDataset
from kosis_extractor.ingestion.base import BaseStatisticsSource
from kosis_extractor.schemas.records import TableDescriptor


class RecordingReporter(ProgressReporter):
    """Reporter that remembers monitoring events"""

    def __init__(self):
        super().__init__()
        self.events: List[tuple] = []

    def event(self, name: str, **data: Any) -> None:
        self.events.append((name, data))
        super().event(name, **data)

    def names(self) -> List[str]:
        return [name for name, _ in self.events]


class SleepRecorder:
    """Stand-in for the inter-table delay"""

    def __init__(self):
        self.calls: List[int] = []

    async def __call__(self, milliseconds: int) -> None:
        self.calls.append(milliseconds)


class FakeSource(BaseStatisticsSource):
    """In-memory statistics source with scripted failures"""

    name = "fake"

    def __init__(
        self,
        tables: Optional[List[Dict[str, Any]]] = None,
        rows: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        list_error: Optional[Exception] = None,
        data_errors: Optional[Dict[str, Exception]] = None,
        metadata_error: Optional[Exception] = None,
    ):
        self.tables = tables or []
        self.rows = rows or {}
        self.list_error = list_error
        self.data_errors = data_errors or {}
        self.metadata_error = metadata_error
        self.list_calls: List[Dict[str, Any]] = []
        self.data_calls: List[tuple] = []
        self.metadata_calls: List[str] = []

    async def list_tables(self, params=None):
        self.list_calls.append(dict(params or {}))
        if self.list_error:
            raise self.list_error
        return [TableDescriptor.model_validate(t) for t in self.tables]

    async def fetch_metadata(self, table_id):
        self.metadata_calls.append(table_id)
        if self.metadata_error:
            raise self.metadata_error
        return {"tableId": table_id, "note": "fake"}

    async def fetch_data(self, table_id, params=None):
        self.data_calls.append((table_id, dict(params or {})))
        if table_id in self.data_errors:
            raise self.data_errors[table_id]
        return self.rows.get(table_id, [])


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def sink():
    return MemoryDataset()


@pytest.fixture
def store(tmp_path):
    return KeyValueStore(str(tmp_path))


@pytest.fixture
def no_key_settings(tmp_path):
    return Settings(KOSIS_API_KEY=None, STORAGE_DIR=str(tmp_path), _env_file=None)


@pytest.fixture
def key_settings(tmp_path):
    return Settings(KOSIS_API_KEY="test-api-key", STORAGE_DIR=str(tmp_path), _env_file=None)

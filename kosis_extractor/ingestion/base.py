"""Abstract statistics source interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from kosis_extractor.schemas.records import TableDescriptor


class BaseStatisticsSource(ABC):
    """A provider adapter: lists tables and fetches their rows."""

    name: str

    @abstractmethod
    async def list_tables(self, params: Optional[Mapping[str, Any]] = None) -> List[TableDescriptor]:
        """Return the tables available under the given taxonomy selectors."""

    @abstractmethod
    async def fetch_metadata(self, table_id: str) -> Dict[str, Any]:
        """Return descriptive metadata for a table (best effort)."""

    @abstractmethod
    async def fetch_data(self, table_id: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Return the raw data rows of a table."""

    @staticmethod
    def merge_params(defaults: Mapping[str, Any], overrides: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Overlay caller parameters on the defaults; overlay keys always win."""
        merged = dict(defaults)
        if overrides:
            merged.update({key: value for key, value in overrides.items() if value is not None})
        return merged

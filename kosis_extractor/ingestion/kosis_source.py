"""KOSIS (Korean Statistical Information Service) source implementation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from kosis_extractor.core.exceptions import ApiError, ApiErrorKind
from kosis_extractor.core.logging import get_logger
from kosis_extractor.schemas.records import TableDescriptor, utc_now_iso
from .base import BaseStatisticsSource

log = get_logger("ingestion.kosis")

STATS_LIST_PATH = "/statisticsList.do"
STATS_DATA_PATH = "/Param/statisticsParameterData.do"

DEFAULT_ORG_ID = "101"  # Statistics Korea

# KOSIS answers some failures with HTTP 200 and {"err": code, "errMsg": ...}
NO_RESULT_CODE = "30"
AUTH_ERROR_CODES = frozenset({"10", "11"})  # missing / expired key


class KosisSource(BaseStatisticsSource):
    """Lists KOSIS tables and fetches their data through a bound API client."""

    name = "kosis"

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def list_tables(self, params: Optional[Mapping[str, Any]] = None) -> List[TableDescriptor]:
        operation = "getStatsList"
        defaults = {"method": "getList", "vwCd": "MT_ZTITLE", "parentId": "A"}
        query = self.merge_params(defaults, params)

        data = await self._get_json(STATS_LIST_PATH, query, operation)
        rows = self._check_payload(data, operation)

        tables: List[TableDescriptor] = []
        for item in rows:
            if not isinstance(item, dict):
                log.warning(f"Skipping non-object entry in statistics list: {item!r}")
                continue
            try:
                tables.append(TableDescriptor.model_validate(item))
            except ValidationError as exc:
                raise ApiError(
                    operation,
                    "Invalid response format from KOSIS API",
                    ApiErrorKind.INVALID_RESPONSE,
                ) from exc
        log.info(f"Fetched {len(tables)} table descriptors from KOSIS (vwCd={query['vwCd']}, parentId={query['parentId']})")
        return tables

    async def fetch_metadata(self, table_id: str) -> Dict[str, Any]:
        # KOSIS has no metadata endpoint matching the list/data API; keep the shape stable.
        return {
            "tableId": table_id,
            "note": "Metadata retrieved from KOSIS API",
            "lastUpdated": utc_now_iso(),
        }

    async def fetch_data(self, table_id: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        operation = f"getStatsData for {table_id}"
        defaults = {
            "method": "getList",
            "orgId": DEFAULT_ORG_ID,
            "tblId": table_id,
            "objL1": "ALL",  # first classification
            "itmId": "T1",
            "prdSe": "Y",  # Y=yearly, Q=quarterly, M=monthly
            "newEstPrdCnt": "5",  # latest 5 periods
        }
        query = self.merge_params(defaults, params)

        data = await self._get_json(STATS_DATA_PATH, query, operation, table_id=table_id)
        rows = self._check_payload(data, operation, table_id=table_id)
        log.info(f"Fetched {len(rows)} rows for table {table_id}")
        return rows

    async def _get_json(
        self,
        path: str,
        params: Dict[str, Any],
        operation: str,
        table_id: Optional[str] = None,
    ) -> Any:
        try:
            resp = await self.client.get(path, params=params)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise ApiError(
                operation,
                f"Status {status} - {self._provider_message(exc.response)}",
                ApiErrorKind.HTTP,
                status_code=status,
                table_id=table_id,
            ) from exc
        except httpx.TransportError as exc:
            raise ApiError(
                operation,
                "No response received from server.",
                ApiErrorKind.NO_RESPONSE,
                table_id=table_id,
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL, TypeError, ValueError) as exc:
            raise ApiError(operation, str(exc), ApiErrorKind.REQUEST, table_id=table_id) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(
                operation,
                "Invalid response format from KOSIS API",
                ApiErrorKind.INVALID_RESPONSE,
                status_code=resp.status_code,
                table_id=table_id,
            ) from exc

    @staticmethod
    def _check_payload(data: Any, operation: str, table_id: Optional[str] = None) -> List[Any]:
        if isinstance(data, list):
            return data

        if isinstance(data, dict) and "err" in data:
            code = str(data.get("err"))
            message = data.get("errMsg") or "Unknown API error"
            if code == NO_RESULT_CODE:
                log.info(f"KOSIS reported no results ({operation}): {message}")
                return []
            kind = ApiErrorKind.AUTH if code in AUTH_ERROR_CODES else ApiErrorKind.PROVIDER
            raise ApiError(operation, f"Error {code} - {message}", kind, provider_code=code, table_id=table_id)

        raise ApiError(
            operation,
            "Invalid response format from KOSIS API",
            ApiErrorKind.INVALID_RESPONSE,
            table_id=table_id,
        )

    @staticmethod
    def _provider_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return "Unknown API error"
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or body.get("errMsg") or "Unknown API error")
        return "Unknown API error"

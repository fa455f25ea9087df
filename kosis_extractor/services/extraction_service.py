"""End-to-end extraction run: KOSIS table list -> per-table data -> normalized records -> sink."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import httpx

from kosis_extractor.core.config import Settings, settings as default_settings
from kosis_extractor.core.exceptions import (
    ApiError,
    as_processing_error,
    error_kind,
    should_fallback_silently,
)
from kosis_extractor.core.logging import ProgressReporter
from kosis_extractor.core.storage import KeyValueStore, RecordSink
from kosis_extractor.ingestion.base import BaseStatisticsSource
from kosis_extractor.ingestion.client import create_api_client
from kosis_extractor.ingestion.kosis_source import DEFAULT_ORG_ID, KosisSource
from kosis_extractor.schemas.api import RunResult
from kosis_extractor.schemas.input import ExtractionInput, validate_input
from kosis_extractor.schemas.records import (
    NoDataRecord,
    NormalizedRecord,
    RawTableRecord,
    RunErrorRecord,
    SummaryRecord,
    TableDescriptor,
    TableErrorRecord,
)
from kosis_extractor.services.chart import render_chart
from kosis_extractor.services.demo import run_demo_mode
from kosis_extractor.services.normalizer import normalize_statistical_data

API_KEY_STORE_KEY = "KOSIS_API_KEY"

SleepMs = Callable[[int], Awaitable[None]]
ClientFactory = Callable[[str], httpx.AsyncClient]
SourceFactory = Callable[[httpx.AsyncClient], BaseStatisticsSource]
ChartRenderer = Callable[[Sequence[NormalizedRecord], KeyValueStore], Awaitable[None]]


async def sleep_ms(milliseconds: int) -> None:
    await asyncio.sleep(milliseconds / 1000)


def build_search_params(config: ExtractionInput) -> Dict[str, Any]:
    params: Dict[str, Any] = {"vwCd": config.vw_cd, "parentId": config.parent_id}
    # statisticsList.do has no keyword filter; the keyword rides along as a hint.
    if config.search_keyword:
        params["searchKeyword"] = config.search_keyword
    return params


def build_data_params(table: TableDescriptor) -> Dict[str, Any]:
    return {
        "orgId": table.ORG_ID or DEFAULT_ORG_ID,
        "objL1": "ALL",
        "itmId": "T1",
        "prdSe": "Y",
        "newEstPrdCnt": "5",
    }


class ExtractionService:
    """Runs one extraction against KOSIS, falling back to demo data.

    Responsibilities:
    - Validate the run input
    - Route to demo mode when no API key is available
    - List tables and process up to ``maxItems`` of them, one at a time
    - Isolate per-table failures as ``error`` records
    - Pause between tables to respect the provider's rate limits
    - Emit a chart and a final summary
    """

    def __init__(
        self,
        sink: RecordSink,
        store: KeyValueStore,
        reporter: Optional[ProgressReporter] = None,
        settings: Optional[Settings] = None,
        sleep: SleepMs = sleep_ms,
        client_factory: Optional[ClientFactory] = None,
        source_factory: SourceFactory = KosisSource,
        chart_renderer: ChartRenderer = render_chart,
    ):
        self.sink = sink
        self.store = store
        self.reporter = reporter or ProgressReporter()
        self.settings = settings or default_settings
        self.sleep = sleep
        self.client_factory = client_factory or self._default_client
        self.source_factory = source_factory
        self.chart_renderer = chart_renderer

    def _default_client(self, api_key: str) -> httpx.AsyncClient:
        return create_api_client(
            api_key,
            base_url=self.settings.KOSIS_BASE_URL,
            timeout=self.settings.KOSIS_TIMEOUT_SECONDS,
        )

    async def run(self, raw_input: Any = None) -> RunResult:
        """Run one extraction; always emits at least one record."""
        self.reporter.event("actor.started")
        self.reporter.progress("Actor started", input=raw_input)

        config = validate_input(raw_input)
        self.reporter.progress("Input validated", **config.to_output())

        api_key = await self._resolve_api_key()
        if not api_key:
            self.reporter.event("actor.demo_mode")
            self.reporter.progress("Running in demo mode - no KOSIS API key provided")
            count = await run_demo_mode(config, self.sink, self.reporter)
            self.reporter.event("actor.completed", mode="demo")
            return RunResult(mode="demo", status="demo", demo_data_points=count)

        try:
            return await self._run_live(api_key, config)
        except Exception as exc:  # noqa: BLE001
            return await self._fallback(exc, config)

    async def _resolve_api_key(self) -> Optional[str]:
        if self.settings.KOSIS_API_KEY and self.settings.KOSIS_API_KEY.strip():
            return self.settings.KOSIS_API_KEY.strip()

        try:
            stored = await self.store.get_value(API_KEY_STORE_KEY)
        except (OSError, ValueError) as exc:
            self.reporter.warning("Could not read stored KOSIS API key", error=str(exc))
            return None
        if isinstance(stored, str) and stored.strip():
            return stored.strip()
        return None

    # -------------------------------------------------------------------------
    # Live run
    # -------------------------------------------------------------------------
    async def _run_live(self, api_key: str, config: ExtractionInput) -> RunResult:
        async with self.client_factory(api_key) as client:
            source = self.source_factory(client)
            self.reporter.progress("KOSIS API client created")

            search_params = build_search_params(config)
            self.reporter.progress("Search parameters built", **search_params)

            self.reporter.event("api.call_initiated", api="getStatsList", params=search_params)
            self.reporter.progress("Fetching statistical tables list...")
            tables = await source.list_tables(search_params)
            self.reporter.event("api.call_successful", api="getStatsList", resultCount=len(tables))
            self.reporter.progress(f"Found {len(tables)} statistical tables")

            if not tables:
                self.reporter.progress("No statistical tables found for the given criteria")
                await self.sink.push_data(NoDataRecord(search_params=search_params).to_output())
                self.reporter.event("actor.completed", mode="api", status="no_data")
                return RunResult(mode="api", status="no_data")

            to_process = tables[: config.max_items]
            self.reporter.progress(f"Processing {len(to_process)} tables")

            tables_processed = 0
            total_data_points = 0
            accumulated: List[NormalizedRecord] = []

            for position, table in enumerate(to_process, start=1):
                tables_processed += 1
                data_points = await self._process_table(
                    source, table, position, len(to_process), config, accumulated
                )
                if data_points is None:
                    continue
                total_data_points += data_points
                # Rate limiting - wait after each processed table
                await self.sleep(config.delay_between_requests_ms)

        if accumulated:
            await self._render_chart(accumulated)

        self.reporter.progress(
            "Processing completed",
            tablesProcessed=tables_processed,
            totalDataPoints=total_data_points,
            searchCriteria=config.to_output(),
        )
        summary = SummaryRecord(
            tables_processed=tables_processed,
            total_data_points=total_data_points,
            search_criteria=config.to_output(),
        )
        await self.sink.push_data(summary.to_output())
        self.reporter.event(
            "actor.completed",
            mode="api",
            status="success",
            tablesProcessed=tables_processed,
            totalDataPoints=total_data_points,
        )
        return RunResult(
            mode="api",
            status="success",
            tables_processed=tables_processed,
            total_data_points=total_data_points,
        )

    async def _process_table(
        self,
        source: BaseStatisticsSource,
        table: TableDescriptor,
        position: int,
        total: int,
        config: ExtractionInput,
        accumulated: List[NormalizedRecord],
    ) -> Optional[int]:
        """Process one table; returns emitted data points, or None if it failed."""
        table_id = table.display_id(position)
        title = table.display_title()

        self.reporter.event("table.processing_started", tableId=table_id, title=title)
        self.reporter.progress(f"Processing table {position}/{total}: {title}", tableId=table_id, title=title)

        try:
            metadata = await self._fetch_metadata(source, table_id) if config.include_metadata else None

            self.reporter.event("api.call_initiated", api="getStatsData", tableId=table_id)
            rows = await source.fetch_data(table_id, build_data_params(table))
            self.reporter.event("api.call_successful", api="getStatsData", tableId=table_id)
            self.reporter.progress("Statistical data retrieved", rows=len(rows))

            if config.wants_raw:
                raw = RawTableRecord(
                    table_id=table_id,
                    table_info=table.as_payload(),
                    metadata=metadata,
                    raw_data=rows,
                )
                await self.sink.push_data(raw.to_output())

            data_points = 0
            if config.wants_structured:
                normalized = normalize_statistical_data(rows, metadata, table_id)
                accumulated.extend(normalized)
                for record in normalized:
                    await self.sink.push_data(record.to_output())
                    data_points += 1
                self.reporter.progress(f"Processed {len(normalized)} data points from table")

            self.reporter.event("table.processing_successful", tableId=table_id)
            return data_points

        except Exception as exc:  # noqa: BLE001
            kind = error_kind(exc)
            self.reporter.event("table.processing_failed", tableId=table_id, error=str(exc), kind=kind)
            self.reporter.warning(f"Error processing table {table_id}", error=str(exc), tableTitle=title)
            await self.sink.push_data(
                TableErrorRecord(table_id=table_id, table_title=title, error=str(exc), error_kind=kind).to_output()
            )
            return None

    async def _fetch_metadata(self, source: BaseStatisticsSource, table_id: str) -> Optional[Dict[str, Any]]:
        try:
            self.reporter.event("api.call_initiated", api="getMetaInfo", tableId=table_id)
            metadata = await source.fetch_metadata(table_id)
            self.reporter.event("api.call_successful", api="getMetaInfo", tableId=table_id)
            self.reporter.progress("Metadata retrieved")
            return metadata
        except Exception as exc:  # noqa: BLE001
            self.reporter.event("api.call_failed", api="getMetaInfo", tableId=table_id, error=str(exc))
            self.reporter.warning("Could not retrieve metadata", error=str(exc))
            return None

    async def _render_chart(self, records: Sequence[NormalizedRecord]) -> None:
        try:
            await self.chart_renderer(records, self.store)
        except Exception as exc:  # noqa: BLE001
            self.reporter.warning("Chart rendering failed", error=str(exc))

    # -------------------------------------------------------------------------
    # Fallback
    # -------------------------------------------------------------------------
    async def _fallback(self, exc: Exception, config: ExtractionInput) -> RunResult:
        self.reporter.event("api.call_failed", error=str(exc))
        self.reporter.progress("API error occurred, falling back to demo mode", error=str(exc))

        if should_fallback_silently(exc):
            auth = exc.is_auth_failure if isinstance(exc, ApiError) else None
            self.reporter.progress(
                "Falling back to demo mode due to API authentication issues",
                kind=error_kind(exc),
                authFailure=auth,
            )
            count = await run_demo_mode(config, self.sink, self.reporter)
            self.reporter.event("actor.completed", mode="demo", status="fallback")
            return RunResult(mode="demo", status="fallback", demo_data_points=count, error=str(exc))

        failure = as_processing_error(exc)
        await self.sink.push_data(
            RunErrorRecord(error=str(failure), error_kind=error_kind(failure), input=config.to_output()).to_output()
        )
        count = await run_demo_mode(config, self.sink, self.reporter)
        self.reporter.event("actor.completed", mode="demo", status="error_fallback")
        return RunResult(mode="demo", status="error_fallback", demo_data_points=count, error=str(failure))

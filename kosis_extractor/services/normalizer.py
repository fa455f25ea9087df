"""Normalization of raw KOSIS rows into the unified statistical record schema."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional, Sequence

from kosis_extractor.core.logging import get_logger
from kosis_extractor.schemas.records import NormalizedRecord, utc_now_iso
from kosis_extractor.services.classification import classify_data_type

log = get_logger("normalizer")

NATIONAL_REGION = "Korea"
REGION_INDICATORS = ("지역",)

# First present (non-empty) field wins.
STAT_NAME_FIELDS = ("TBL_NM",)
VALUE_FIELDS = ("DT",)
UNIT_FIELDS = ("UNIT_NM", "UNIT_NM_ENG")
PERIOD_FIELDS = ("PRD_DE",)
CATEGORY1_FIELDS = ("C1_NM", "ITM_NM")
CATEGORY2_FIELDS = ("C2_NM",)
UPDATED_FIELDS = ("LST_CHN_DE",)

_FLOAT_PREFIX = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _first_present(row: Dict[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        value = row.get(field)
        if value not in (None, ""):
            return value
    return None


def _text(row: Dict[str, Any], fields: Sequence[str], default: str) -> str:
    value = _first_present(row, fields)
    return default if value is None else str(value)


def parse_value(raw: Any) -> float:
    """Leading-number parse; anything unparseable becomes 0."""
    if isinstance(raw, bool):
        return 0.0
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else 0.0
    if isinstance(raw, str):
        match = _FLOAT_PREFIX.match(raw.replace(",", ""))
        if match:
            value = float(match.group(0))
            return value if math.isfinite(value) else 0.0
    return 0.0


def detect_region(classification: Optional[str]) -> str:
    if classification and any(indicator in classification for indicator in REGION_INDICATORS):
        return classification
    return NATIONAL_REGION


def _normalize_row(
    row: Dict[str, Any],
    metadata: Optional[Dict[str, Any]],
    source_table_id: str,
) -> NormalizedRecord:
    stat_name = _text(row, STAT_NAME_FIELDS, "Unknown Statistic")
    c1 = row.get("C1_NM")

    record_metadata: Dict[str, Any] = {
        "tableTitle": stat_name,
        "categories": {
            "c1": c1,
            "c2": row.get("C2_NM"),
            "c3": row.get("C3_NM"),
            "item": row.get("ITM_NM"),
        },
        "originalData": row,
    }
    if metadata is not None:
        record_metadata["tableMetadata"] = metadata

    return NormalizedRecord(
        stat_name=stat_name,
        survey_date=_text(row, PERIOD_FIELDS, "Unknown Period"),
        region=detect_region(c1 if isinstance(c1, str) else None),
        category1=_text(row, CATEGORY1_FIELDS, "General"),
        category2=_text(row, CATEGORY2_FIELDS, ""),
        value=parse_value(_first_present(row, VALUE_FIELDS)),
        unit=_text(row, UNIT_FIELDS, ""),
        source_table_id=source_table_id,
        data_type=classify_data_type(stat_name),
        last_updated=_text(row, UPDATED_FIELDS, utc_now_iso()),
        metadata=record_metadata,
    )


def error_record(exc: Exception, raw_rows: Any, source_table_id: str) -> NormalizedRecord:
    return NormalizedRecord(
        stat_name="Error Processing Data",
        survey_date="Unknown Date",
        region=NATIONAL_REGION,
        category1="Error",
        category2="",
        value=0,
        unit="",
        source_table_id=source_table_id,
        data_type="error",
        last_updated=utc_now_iso(),
        metadata={"error": str(exc), "rawData": raw_rows},
    )


def normalize_statistical_data(
    raw_rows: Any,
    metadata: Optional[Dict[str, Any]],
    source_table_id: str,
) -> List[NormalizedRecord]:
    """Normalize one table's rows.

    A failure anywhere in the batch replaces the whole batch with a single
    ``dataType="error"`` record carrying the message and the raw payload.
    """
    rows = raw_rows if isinstance(raw_rows, list) else [raw_rows]

    try:
        return [_normalize_row(row, metadata, source_table_id) for row in rows]
    except Exception as exc:  # noqa: BLE001
        log.error(f"Error normalizing KOSIS data for {source_table_id}: {exc}")
        return [error_record(exc, raw_rows, source_table_id)]

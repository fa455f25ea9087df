"""Run input schema - normalizes raw actor input into a bounded configuration."""

from __future__ import annotations

import math
import re
import sys
from collections.abc import Mapping
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

OutputFormat = Literal["structured", "raw", "both"]

OUTPUT_FORMATS = ("structured", "raw", "both")
DEFAULT_VIEW_CODE = "MT_ZTITLE"
DEFAULT_PARENT_ID = "A"
DEFAULT_MAX_ITEMS = 10
MAX_ITEMS_LIMIT = 100
DEFAULT_DELAY_MS = 1000
MIN_DELAY_MS = 500

# KOSIS service view codes (vwCd)
KOSIS_VIEW_CODES = {
    "DOMESTIC_TOPIC": "MT_ZTITLE",  # 국내통계 주제별
    "DOMESTIC_AGENCY": "MT_OTITLE",  # 국내통계 기관별
    "LOCAL_TOPIC": "MT_GTITLE01",  # e-지방지표(주제별)
    "LOCAL_REGION": "MT_GTITLE02",  # e-지방지표(지역별)
    "HISTORICAL": "MT_CHOSUN_TITLE",  # 광복이전통계(1908~1943)
    "YEARBOOK": "MT_HANKUK_TITLE",  # 대한민국통계연감
    "DISCONTINUED": "MT_STOP_TITLE",  # 작성중지통계
    "INTERNATIONAL": "MT_RTITLE",  # 국제통계
    "NORTH_KOREA": "MT_BUKHAN",  # 북한통계
    "TARGET_BASED": "MT_TM1_TITLE",  # 대상별통계
    "ISSUE_BASED": "MT_TM2_TITLE",  # 이슈별통계
    "ENGLISH": "MT_ETITLE",  # 영문 KOSIS
}

_INT_PREFIX = re.compile(r"^\s*([+-]?)(\d+)")
# Longer digit runs saturate instead of hitting the int-string conversion limit.
MAX_INT_DIGITS = 18
_FALSY_STRINGS = {"false", "0", "no", "off"}


def _leading_int(value: Any) -> Optional[int]:
    """Parse an integer the lenient way: ``"12abc"`` -> 12, junk -> None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        if not match:
            return None
        sign, digits = match.groups()
        parsed = sys.maxsize if len(digits) > MAX_INT_DIGITS else int(digits)
        return -parsed if sign == "-" else parsed
    return None


def _trimmed(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class ExtractionInput(BaseModel):
    """Validated run configuration. Every field is within bounds once built."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    search_keyword: str = Field(
        "",
        validation_alias=AliasChoices("searchKeyword", "search_keyword"),
        serialization_alias="searchKeyword",
    )
    vw_cd: str = Field(
        DEFAULT_VIEW_CODE,
        validation_alias=AliasChoices("vwCd", "viewCode", "vw_cd"),
        serialization_alias="vwCd",
    )
    parent_id: str = Field(
        DEFAULT_PARENT_ID,
        validation_alias=AliasChoices("parentId", "parent_id"),
        serialization_alias="parentId",
    )
    max_items: int = Field(
        DEFAULT_MAX_ITEMS,
        validation_alias=AliasChoices("maxItems", "max_items"),
        serialization_alias="maxItems",
    )
    include_metadata: bool = Field(
        True,
        validation_alias=AliasChoices("includeMetadata", "include_metadata"),
        serialization_alias="includeMetadata",
    )
    output_format: OutputFormat = Field(
        "structured",
        validation_alias=AliasChoices("outputFormat", "output_format"),
        serialization_alias="outputFormat",
    )
    delay_between_requests_ms: int = Field(
        DEFAULT_DELAY_MS,
        validation_alias=AliasChoices(
            "delayBetweenRequestsMs", "delayBetweenRequests", "delay_between_requests_ms"
        ),
        serialization_alias="delayBetweenRequestsMs",
    )

    @field_validator("search_keyword", mode="before")
    @classmethod
    def _trim_keyword(cls, value: Any) -> str:
        return _trimmed(value)

    @field_validator("vw_cd", mode="before")
    @classmethod
    def _default_view_code(cls, value: Any) -> str:
        return _trimmed(value) or DEFAULT_VIEW_CODE

    @field_validator("parent_id", mode="before")
    @classmethod
    def _default_parent_id(cls, value: Any) -> str:
        return _trimmed(value) or DEFAULT_PARENT_ID

    @field_validator("max_items", mode="before")
    @classmethod
    def _clamp_max_items(cls, value: Any) -> int:
        parsed = _leading_int(value) or DEFAULT_MAX_ITEMS
        return min(max(parsed, 1), MAX_ITEMS_LIMIT)

    @field_validator("include_metadata", mode="before")
    @classmethod
    def _metadata_flag(cls, value: Any) -> bool:
        if value is False:
            return False
        if isinstance(value, str) and value.strip().lower() in _FALSY_STRINGS:
            return False
        if isinstance(value, int) and not isinstance(value, bool) and value == 0:
            return False
        return True

    @field_validator("output_format", mode="before")
    @classmethod
    def _coerce_output_format(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip().lower() in OUTPUT_FORMATS:
            return value.strip().lower()
        return "structured"

    @field_validator("delay_between_requests_ms", mode="before")
    @classmethod
    def _floor_delay(cls, value: Any) -> int:
        parsed = _leading_int(value) or DEFAULT_DELAY_MS
        return max(parsed, MIN_DELAY_MS)

    @property
    def wants_raw(self) -> bool:
        return self.output_format in ("raw", "both")

    @property
    def wants_structured(self) -> bool:
        return self.output_format in ("structured", "both")

    def to_output(self) -> dict:
        """Camel-cased form embedded in output records."""
        return self.model_dump(by_alias=True)


def validate_input(raw: Any) -> ExtractionInput:
    """Build an ``ExtractionInput`` from arbitrary input; never raises."""
    if not isinstance(raw, Mapping):
        raw = {}
    cleaned = {key: value for key, value in raw.items() if isinstance(key, str)}
    return ExtractionInput.model_validate(cleaned)

"""Output record schemas pushed to the dataset."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TableDescriptor(BaseModel):
    """One entry of the KOSIS statistics list (a table or a list folder)."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    TBL_ID: Optional[str] = None
    TBL_NM: Optional[str] = None
    LIST_ID: Optional[str] = None
    LIST_NM: Optional[str] = None
    ORG_ID: Optional[str] = None

    def display_id(self, position: int) -> str:
        return self.TBL_ID or self.LIST_ID or f"table_{position}"

    def display_title(self) -> str:
        return self.TBL_NM or self.LIST_NM or "Unknown Table"

    def as_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OutputRecord(BaseModel):
    """Base for everything written to the sink (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class NormalizedRecord(OutputRecord):
    """Unified statistical data point."""

    stat_name: str
    survey_date: str
    region: str
    category1: str
    category2: str
    value: float
    unit: str
    source_table_id: str
    data_type: str
    last_updated: str
    metadata: Dict[str, Any]
    extracted_at: str = Field(default_factory=utc_now_iso)


class RawTableRecord(OutputRecord):
    type: Literal["raw"] = "raw"
    table_id: str
    table_info: Dict[str, Any]
    metadata: Optional[Dict[str, Any]] = None
    raw_data: List[Any]
    extracted_at: str = Field(default_factory=utc_now_iso)


class TableErrorRecord(OutputRecord):
    type: Literal["error"] = "error"
    table_id: str
    table_title: str
    error: str
    error_kind: str
    extracted_at: str = Field(default_factory=utc_now_iso)


class RunErrorRecord(OutputRecord):
    type: Literal["error"] = "error"
    error: str
    error_kind: str
    message: str = "An error occurred while processing. Falling back to demo mode."
    input: Dict[str, Any]
    extracted_at: str = Field(default_factory=utc_now_iso)


class NoDataRecord(OutputRecord):
    type: Literal["message"] = "message"
    code: Literal["no_data"] = "no_data"
    message: str = "No statistical tables found for the given search criteria"
    search_params: Dict[str, Any]
    extracted_at: str = Field(default_factory=utc_now_iso)


class SummaryRecord(OutputRecord):
    type: Literal["summary"] = "summary"
    tables_processed: int
    total_data_points: int
    search_criteria: Dict[str, Any]
    completed_at: str = Field(default_factory=utc_now_iso)


class RegistrationInfo(OutputRecord):
    url: str = "https://kosis.kr/openapi/index/index.jsp"
    note: str = "Register for KOSIS API access (Korean phone number or i-PIN required)"
    warning: str = "KOSIS API key registration requires Korean identity verification"


class DemoSummaryRecord(OutputRecord):
    type: Literal["demo_summary"] = "demo_summary"
    message: str = "Demo mode completed. To access real KOSIS data, please provide KOSIS_API_KEY."
    demo_data_points: int
    search_criteria: Dict[str, Any]
    registration_info: RegistrationInfo = Field(default_factory=RegistrationInfo)
    completed_at: str = Field(default_factory=utc_now_iso)

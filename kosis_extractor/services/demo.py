"""Demo mode - fixed sample statistics used when live KOSIS access is unavailable."""

from __future__ import annotations

from typing import List

from kosis_extractor.core.logging import ProgressReporter
from kosis_extractor.core.storage import RecordSink
from kosis_extractor.schemas.input import ExtractionInput
from kosis_extractor.schemas.records import DemoSummaryRecord, NormalizedRecord

DEMO_NOTE = "This is demo data for Korean statistics"


def _sample(
    table_id: str,
    stat_name: str,
    survey_date: str,
    category1: str,
    category2: str,
    value: float,
    unit: str,
    data_type: str,
    last_updated: str,
    categories: dict,
) -> NormalizedRecord:
    return NormalizedRecord(
        stat_name=stat_name,
        survey_date=survey_date,
        region="전국",
        category1=category1,
        category2=category2,
        value=value,
        unit=unit,
        source_table_id=table_id,
        data_type=data_type,
        last_updated=last_updated,
        metadata={"tableTitle": stat_name, "categories": categories, "note": DEMO_NOTE},
    )


def build_demo_data() -> List[NormalizedRecord]:
    """Return a fresh copy of the sample pool (extractedAt is stamped per call)."""
    return [
        _sample(
            "demo_001", "인구총조사 총인구", "2020년", "총인구", "계", 51829023, "명",
            "population", "2021-08-31T00:00:00Z", {"area": "전국", "gender": "계"},
        ),
        _sample(
            "demo_002", "경제활동인구조사 취업자수", "2023년 12월", "취업자", "전체", 28432000, "명",
            "labor", "2024-01-15T00:00:00Z", {"area": "전국", "employment": "취업자"},
        ),
        _sample(
            "demo_003", "국내총생산(GDP)", "2023년", "실질GDP", "연간", 2080000, "십억원",
            "economic", "2024-03-26T00:00:00Z", {"type": "실질GDP", "period": "연간"},
        ),
        _sample(
            "demo_004", "소비자물가지수", "2024년 8월", "총지수", "전월대비", 102.3, "지수",
            "prices", "2024-09-01T00:00:00Z", {"type": "총지수", "comparison": "전월대비"},
        ),
    ]


def select_demo_data(config: ExtractionInput) -> List[NormalizedRecord]:
    records = build_demo_data()
    if config.search_keyword:
        keyword = config.search_keyword.lower()
        records = [
            rec
            for rec in records
            if keyword in rec.stat_name.lower()
            or keyword in rec.category1.lower()
            or keyword in rec.data_type.lower()
        ]
    return records[: config.max_items]


async def run_demo_mode(config: ExtractionInput, sink: RecordSink, reporter: ProgressReporter) -> int:
    """Emit the filtered sample records plus a ``demo_summary``; returns the sample count."""
    reporter.progress("Generating demo data for Korean Government Statistics Analyzer")
    records = select_demo_data(config)

    for record in records:
        await sink.push_data(record.to_output())

    summary = DemoSummaryRecord(demo_data_points=len(records), search_criteria=config.to_output())
    await sink.push_data(summary.to_output())

    reporter.progress("Demo mode completed", dataPoints=len(records), searchKeyword=config.search_keyword)
    return len(records)

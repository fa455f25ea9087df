"""Coarse topic classification of statistic names."""

from __future__ import annotations

from typing import Tuple

# Checked in order; the first topic with a matching keyword wins.
TOPIC_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("population", ("인구", "population")),
    ("economic", ("경제", "gdp", "경제성장")),
    ("labor", ("노동", "고용", "취업")),
    ("industry", ("산업", "제조업")),
    ("education", ("교육", "학교")),
    ("health", ("의료", "보건", "건강")),
    ("environment", ("환경", "오염")),
    ("housing", ("주택", "부동산")),
    ("income", ("소득", "소비", "가계")),
    ("prices", ("물가", "가격")),
)

GENERAL_TOPIC = "general"


def classify_data_type(name: str) -> str:
    lowered = (name or "").lower()
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return topic
    return GENERAL_TOPIC

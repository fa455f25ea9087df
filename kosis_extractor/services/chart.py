"""Bar chart of a run's normalized values, stored in the key-value store."""

from __future__ import annotations

import io
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from kosis_extractor.core.logging import get_logger  # noqa: E402
from kosis_extractor.core.storage import KeyValueStore  # noqa: E402
from kosis_extractor.schemas.records import NormalizedRecord  # noqa: E402

log = get_logger("chart")

CHART_KEY = "chart.png"
MAX_BARS = 50


def build_chart_png(records: Sequence[NormalizedRecord]) -> bytes:
    shown = list(records)[:MAX_BARS]
    labels = [f"{rec.stat_name} ({rec.survey_date})" for rec in shown]
    values = [rec.value for rec in shown]

    fig, ax = plt.subplots(figsize=(max(6, len(shown) * 0.5), 6))
    try:
        ax.bar(range(len(values)), values, color=(75 / 255, 192 / 255, 192 / 255, 0.2),
               edgecolor=(75 / 255, 192 / 255, 192 / 255, 1.0), linewidth=1)
        ax.set_xticks(range(len(labels)))
        ax.set_xticklabels(labels, rotation=75, ha="right", fontsize=7)
        ax.set_ylabel("Value")
        ax.set_ylim(bottom=min(0, min(values, default=0)))
        fig.tight_layout()

        buffer = io.BytesIO()
        fig.savefig(buffer, format="png")
        return buffer.getvalue()
    finally:
        plt.close(fig)


async def render_chart(records: Sequence[NormalizedRecord], store: KeyValueStore) -> None:
    image = build_chart_png(records)
    await store.set_value(CHART_KEY, image, content_type="image/png")
    log.info(f"Chart with {min(len(records), MAX_BARS)} bars stored under {CHART_KEY}")

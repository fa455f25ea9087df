"""Chart rendering tests"""

import pytest

from kosis_extractor.services.chart import CHART_KEY, build_chart_png, render_chart
from kosis_extractor.services.demo import build_demo_data

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


class TestChart:
    """Test the bar chart of normalized values"""

    def test_png_bytes(self):
        """Test the chart is a PNG image"""
        assert build_chart_png(build_demo_data()).startswith(PNG_SIGNATURE)

    def test_empty_records(self):
        """Test an empty run still renders"""
        assert build_chart_png([]).startswith(PNG_SIGNATURE)

    @pytest.mark.asyncio
    async def test_stored_under_chart_key(self, store):
        """Test the image lands in the key-value store"""
        await render_chart(build_demo_data(), store)

        stored = await store.get_value(CHART_KEY)
        assert CHART_KEY == "chart.png"
        assert stored.startswith(PNG_SIGNATURE)

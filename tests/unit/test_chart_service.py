"""Unit tests for the PDF hourly chart."""

import pytest

from app.services.chart_service import (
    CHART_HEIGHT,
    CHART_WIDTH,
    CHART_X,
    CHART_Y,
    compute_layout,
    hourly_histogram,
    render_chart,
)


class TestHourlyHistogram:
    """Test hourly_histogram()."""

    def test_hour_in_timestamp_offset(self):
        """Test the hour is taken in the timestamp's own offset."""
        records = [
            {"CreatedAt1": "2024-01-01 10:15:00+0000"},
            {"CreatedAt1": "2024-01-01 10:45:00+0300"},
            {"CreatedAt1": "2024-01-01 23:00:00+0000"},
            {"CreatedAt1": "bad"},
            {},
            "garbage",
        ]

        counts = hourly_histogram(records, "CreatedAt1")

        assert len(counts) == 24
        assert counts[10] == 2
        assert counts[23] == 1
        assert sum(counts) == 3


class TestComputeLayout:
    """Test compute_layout()."""

    def test_empty_histogram(self):
        """Test an all-zero histogram has no bars and a unit scale."""
        layout = compute_layout([0] * 24)

        assert layout.max_count == 1
        assert layout.bars == []
        assert len(layout.hour_labels) == 24
        assert [v for v, _ in layout.value_labels] == [0, 0, 0, 1]

    def test_bar_geometry(self):
        """Test bars are scaled to the tallest bucket and stay inside the chart."""
        counts = [0] * 24
        counts[0] = 6
        counts[12] = 3

        layout = compute_layout(counts)

        assert layout.max_count == 6
        assert [b.hour for b in layout.bars] == [0, 12]
        tallest, half = layout.bars
        assert tallest.height == pytest.approx(CHART_HEIGHT)
        assert half.height == pytest.approx(CHART_HEIGHT / 2)
        slot = CHART_WIDTH / 24
        assert tallest.width == pytest.approx(slot * 0.85)
        assert tallest.x == pytest.approx(CHART_X + slot * 0.075)
        for bar in layout.bars:
            assert CHART_X <= bar.x and bar.x + bar.width <= CHART_X + CHART_WIDTH

    def test_gridlines_and_value_labels(self):
        """Test three gridlines and four value labels from zero to max."""
        counts = [0] * 24
        counts[5] = 9

        layout = compute_layout(counts)

        assert layout.gridlines == pytest.approx([CHART_Y + 12, CHART_Y + 24, CHART_Y + 36])
        assert [v for v, _ in layout.value_labels] == [0, 3, 6, 9]


class TestRenderChart:
    """Test render_chart()."""

    def test_writes_pdf(self, tmp_path, record_factory):
        """Test a PDF file is produced."""
        path = render_chart([record_factory()], str(tmp_path / "r.pdf"))

        with open(path, "rb") as f:
            assert f.read(5) == b"%PDF-"

    def test_empty_records_still_render(self, tmp_path):
        """Test an empty record set renders an empty chart."""
        path = render_chart([], str(tmp_path / "empty.pdf"))

        with open(path, "rb") as f:
            assert f.read(5) == b"%PDF-"

    def test_unwritable_path_raises(self, tmp_path):
        """Test I/O failures propagate."""
        with pytest.raises(OSError):
            render_chart([], str(tmp_path / "missing" / "r.pdf"))

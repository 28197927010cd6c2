"""PDF export with a vector hourly histogram."""

from dataclasses import dataclass, field
from typing import Any, List, Tuple
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from .record_fields import parse_offset_timestamp

logger = logging.getLogger(__name__)

HOURS = 24

# Chart geometry in millimetres (A4 portrait, origin bottom-left)
CHART_X = 10.0
CHART_Y = 220.0
CHART_WIDTH = 180.0
CHART_HEIGHT = 36.0
BAR_FILL_RATIO = 0.85
GRID_LINES = 3

TITLE = "AuroScope Report"
CHART_TITLE = "Generations by hour of day"
CAPTION_LINES = (
    "Number of aura generations per hour of the day (0-23).",
    "Helps to spot peak hours and plan the work of the complex.",
)

COLORS = {
    "bar": colors.HexColor("#26A69A"),
    "axis": colors.black,
    "grid": colors.Color(0.9, 0.9, 0.9),
    "text": colors.black,
}


@dataclass
class Bar:
    hour: int
    count: int
    x: float
    width: float
    height: float


@dataclass
class ChartLayout:
    """Pre-computed chart geometry, all values in millimetres."""

    max_count: int
    bars: List[Bar] = field(default_factory=list)
    gridlines: List[float] = field(default_factory=list)
    value_labels: List[Tuple[int, float]] = field(default_factory=list)
    hour_labels: List[Tuple[int, float]] = field(default_factory=list)


def hourly_histogram(records: List[Any], time_field: str) -> List[int]:
    """Count records per hour of ``time_field`` (hour in the timestamp's own offset)."""
    counts = [0] * HOURS
    for record in records:
        if not isinstance(record, dict):
            continue
        timestamp = parse_offset_timestamp(record.get(time_field))
        if timestamp is not None:
            counts[timestamp.hour] += 1
    return counts


def compute_layout(counts: List[int]) -> ChartLayout:
    """Lay out 24 bars, gridlines and labels for an hourly histogram."""
    max_count = max(counts, default=0) or 1
    slot = CHART_WIDTH / HOURS
    bar_width = slot * BAR_FILL_RATIO
    offset = slot * (1 - BAR_FILL_RATIO) / 2

    layout = ChartLayout(max_count=max_count)

    for hour, count in enumerate(counts):
        x = CHART_X + hour * slot + offset
        if count > 0:
            layout.bars.append(Bar(
                hour=hour,
                count=count,
                x=x,
                width=bar_width,
                height=count / max_count * CHART_HEIGHT,
            ))
        layout.hour_labels.append((hour, x + bar_width / 2))

    step = CHART_HEIGHT / GRID_LINES
    layout.gridlines = [CHART_Y + step * i for i in range(1, GRID_LINES + 1)]
    layout.value_labels = [
        (int(max_count / GRID_LINES * i), CHART_Y + step * i)
        for i in range(GRID_LINES + 1)
    ]

    return layout


def _draw_chart(pdf: canvas.Canvas, layout: ChartLayout) -> None:
    top = CHART_Y + CHART_HEIGHT

    pdf.setFillColor(COLORS["text"])
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(CHART_X * mm, (top + 10) * mm, CHART_TITLE)
    pdf.setFont("Helvetica", 9)
    pdf.drawString(CHART_X * mm, (top + 5) * mm, CAPTION_LINES[0])
    pdf.drawString(CHART_X * mm, (top + 0.5) * mm, CAPTION_LINES[1])

    # Axes
    pdf.setStrokeColor(COLORS["axis"])
    pdf.setLineWidth(1)
    pdf.line(CHART_X * mm, CHART_Y * mm, (CHART_X + CHART_WIDTH) * mm, CHART_Y * mm)
    pdf.line(CHART_X * mm, CHART_Y * mm, CHART_X * mm, top * mm)

    # Gridlines
    pdf.setStrokeColor(COLORS["grid"])
    pdf.setLineWidth(0.3)
    for y in layout.gridlines:
        pdf.line(CHART_X * mm, y * mm, (CHART_X + CHART_WIDTH) * mm, y * mm)

    # Bars
    pdf.setFillColor(COLORS["bar"])
    pdf.setStrokeColor(COLORS["bar"])
    pdf.setLineWidth(0.5)
    for bar in layout.bars:
        pdf.rect(bar.x * mm, CHART_Y * mm, bar.width * mm, bar.height * mm, stroke=1, fill=1)

    # Labels
    pdf.setFillColor(COLORS["text"])
    pdf.setFont("Helvetica", 6)
    for hour, center_x in layout.hour_labels:
        pdf.drawCentredString(center_x * mm, (CHART_Y - 3) * mm, str(hour))

    pdf.setFont("Helvetica", 7)
    for value, y in layout.value_labels:
        pdf.drawRightString((CHART_X - 2) * mm, (y - 1) * mm, str(value))


def render_chart(records: List[Any], path: str, time_field: str = "CreatedAt1") -> str:
    """Render the hourly histogram of ``records`` to a one-page A4 PDF."""
    logger.info(f"Generating PDF report with vector chart to: {path}")

    counts = hourly_histogram(records, time_field)
    layout = compute_layout(counts)

    pdf = canvas.Canvas(path, pagesize=A4)
    pdf.setTitle(TITLE)
    pdf.setFont("Helvetica-Bold", 24)
    pdf.drawString(20 * mm, 280 * mm, TITLE)
    _draw_chart(pdf, layout)
    pdf.showPage()
    pdf.save()

    logger.info(f"PDF report generated ({sum(counts)} records charted)")
    return path

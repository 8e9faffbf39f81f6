"""Chart generation - renders native chart shapes on PowerPoint slides.

Converts category/series data into python-pptx chart shapes with brand
colours and the design system's typography.

Supported chart kinds:
    COLUMN - Grouped column chart (multi-series side-by-side)

Usage:
    from social_report.generator.charts import ChartSeries, ChartKind, add_category_chart

    add_category_chart(slide, ChartKind.COLUMN, ["Jan", "Feb", "Mär"],
                       [ChartSeries("Follower", [980, 1010, 1050], "#84CC16")],
                       Position(0.5, 1.0, 9.0, 3.0), design)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pptx.chart.data import CategoryChartData
from pptx.dml.color import RGBColor
from pptx.enum.chart import XL_CHART_TYPE, XL_LEGEND_POSITION, XL_LABEL_POSITION
from pptx.util import Inches, Pt

from ..schema.models import DesignSystem, Position


# ---------------------------------------------------------------------------
# Chart types
# ---------------------------------------------------------------------------

class ChartKind(Enum):
    COLUMN = "column"


@dataclass
class ChartSeries:
    """One named data series with an optional ``#RRGGBB`` colour."""
    name: str
    values: list = field(default_factory=list)
    color: str | None = None


_CHART_TYPE_MAP: dict[ChartKind, int] = {
    ChartKind.COLUMN: XL_CHART_TYPE.COLUMN_CLUSTERED,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def hex_to_rgb(hex_color: str) -> RGBColor:
    """Convert a hex color string (#RRGGBB) to an RGBColor."""
    return RGBColor.from_string(hex_color.lstrip("#").upper())


def _safe_value(value: Any) -> float:
    """Coerce a value to a safe float for chart data.  None/NaN/inf → 0."""
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return 0.0
        return float(value)
    return 0.0


# ---------------------------------------------------------------------------
# Chart data builder
# ---------------------------------------------------------------------------

def build_chart_data(categories: list[str],
                     series: list[ChartSeries]) -> CategoryChartData | None:
    """Build chart data, padding or trimming series to the category count.

    Returns None if there are no categories or no series.
    """
    if not categories or not series:
        return None

    chart_data = CategoryChartData()
    chart_data.categories = [str(c) for c in categories]
    n = len(categories)
    for s in series:
        values = list(s.values or [])
        if len(values) < n:
            values += [0.0] * (n - len(values))
        chart_data.add_series(s.name, tuple(_safe_value(v) for v in values[:n]))
    return chart_data


# ---------------------------------------------------------------------------
# Chart styling
# ---------------------------------------------------------------------------

def _apply_series_colors(chart, series: list[ChartSeries]) -> None:
    """Apply per-series fill colours."""
    plot = chart.plots[0]
    for idx, s in enumerate(series):
        if idx >= len(plot.series) or not s.color:
            continue
        plot_series = plot.series[idx]
        plot_series.format.fill.solid()
        plot_series.format.fill.fore_color.rgb = hex_to_rgb(s.color)


def _apply_chart_style(chart, series: list[ChartSeries], design: DesignSystem,
                       number_format: str | None, data_labels: bool) -> None:
    """Apply general styling: font, legend, value axis and labels."""
    chart.font.name = design.primary_font
    chart.font.size = Pt(design.caption_size_pt)
    chart.font.color.rgb = hex_to_rgb(design.dark_gray)

    if len(series) > 1:
        chart.has_legend = True
        chart.legend.include_in_layout = False
        chart.legend.position = XL_LEGEND_POSITION.BOTTOM
        chart.legend.font.name = design.primary_font
        chart.legend.font.size = Pt(design.caption_size_pt)
    else:
        chart.has_legend = False

    value_axis = chart.value_axis
    value_axis.has_major_gridlines = True
    value_axis.major_gridlines.format.line.color.rgb = hex_to_rgb(design.border)
    value_axis.format.line.fill.background()
    if number_format:
        value_axis.tick_labels.number_format = number_format
        value_axis.tick_labels.number_format_is_linked = False

    if data_labels:
        plot = chart.plots[0]
        plot.has_data_labels = True
        labels = plot.data_labels
        labels.font.size = Pt(design.caption_size_pt)
        labels.font.bold = True
        if number_format:
            labels.number_format = number_format
            labels.number_format_is_linked = False
        labels.position = XL_LABEL_POSITION.OUTSIDE_END


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def add_category_chart(
    slide,
    kind: ChartKind,
    categories: list[str],
    series: list[ChartSeries],
    box: Position,
    design: DesignSystem,
    number_format: str | None = None,
    data_labels: bool = False,
):
    """Add a category chart to a slide.

    Args:
        slide: python-pptx Slide object.
        kind: Chart kind (grouped columns).
        categories: Category axis labels.
        series: Data series in legend order.
        box: Position of the chart frame in inches.
        design: DesignSystem for styling.
        number_format: Excel number format for axis and labels, e.g. ``'#,##0'``.
        data_labels: Show the value above each column.

    Returns:
        The graphic frame, or None if skipped due to missing data.
    """
    chart_data = build_chart_data(categories, series)
    if chart_data is None:
        return None

    graphic_frame = slide.shapes.add_chart(
        _CHART_TYPE_MAP[kind],
        Inches(box.left),
        Inches(box.top),
        Inches(box.width),
        Inches(box.height),
        chart_data,
    )
    chart = graphic_frame.chart

    _apply_series_colors(chart, series)
    _apply_chart_style(chart, series, design, number_format, data_labels)
    return graphic_frame

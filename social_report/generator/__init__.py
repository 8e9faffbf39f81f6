"""Presentation generator package - document sinks and rendering support.

Slide modules draw through a DocumentSink; the composer drives them.

Modules:
    layout: Pure geometry helpers (bar scaling, grids, image fitting)
    assets: Per-report image cache
    document: DocumentSink protocol, PPTXDocument, RecordingDocument
    charts: Native chart generation (column, bar, line)
    composer: DocumentComposer, import it from ``social_report.generator.composer``
"""

from .assets import UNAVAILABLE, AssetCache
from .charts import ChartKind, ChartSeries, add_category_chart
from .document import (
    DocumentSink,
    PPTXDocument,
    RecordingDocument,
    ShapeKind,
    TableStyle,
)
from .layout import bar_extents, fit_contain, grid_positions

__all__ = [
    "AssetCache",
    "ChartKind",
    "ChartSeries",
    "DocumentSink",
    "PPTXDocument",
    "RecordingDocument",
    "ShapeKind",
    "TableStyle",
    "UNAVAILABLE",
    "add_category_chart",
    "bar_extents",
    "fit_contain",
    "grid_positions",
]

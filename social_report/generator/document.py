"""Document sinks - the narrow drawing interface slide modules render through.

Slide modules never touch python-pptx directly. They draw through a
``DocumentSink``: start a slide, then place text, shapes, images, tables and
charts on it by box (inches). Two sinks exist:

- ``PPTXDocument`` renders a real .pptx with python-pptx.
- ``RecordingDocument`` records every call as plain data; used by tests and
  by the CLI dry run, and serialises to JSON.

Both support ``truncate(count)`` so the composer can roll back the slides of
a module that failed half-way.

Usage::

    doc = PPTXDocument(settings)
    doc.add_slide(background="#F9F9F9")
    doc.add_text("Facebook", Position(0.5, 0.2, 7, 0.45), FontSpec(size_pt=26, bold=True))
    data = doc.to_bytes()
"""

import io
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from lxml import etree
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from ..schema.models import FontSpec, Position, ReportSettings
from .charts import ChartKind, ChartSeries, add_category_chart, hex_to_rgb


# ---------------------------------------------------------------------------
# Drawing vocabulary
# ---------------------------------------------------------------------------

class ShapeKind(Enum):
    RECTANGLE = "rect"
    ROUNDED_RECTANGLE = "roundRect"
    OVAL = "ellipse"
    HEXAGON = "hexagon"


@dataclass
class TableStyle:
    """Styling for ``add_table``: a coloured header row and striped body."""
    header_fill: str = "#84CC16"
    header_color: str = "#FFFFFF"
    body_color: str = "#333333"
    stripe_fill: str | None = "#F5F5F5"
    font_name: str = "Inter"
    header_size_pt: float = 9.0
    body_size_pt: float = 8.0
    col_widths: list[float] | None = None
    align: list[str] = field(default_factory=list)    # per column, default left
    emphasis_col: int | None = None                     # bold + highlight column
    emphasis_color: str | None = None


class DocumentSink(Protocol):
    """What a slide module may do to the document."""

    @property
    def slide_count(self) -> int: ...

    def add_slide(self, background: str | None = None) -> int: ...

    def add_text(self, text: str, box: Position, font: FontSpec | None = None) -> None: ...

    def add_shape(self, kind: ShapeKind, box: Position, fill: str | None = None,
                  line: str | None = None, line_width: float = 1.0,
                  transparency: int = 0, rotation: float = 0.0) -> None: ...

    def add_image(self, data: bytes, box: Position) -> None: ...

    def add_table(self, header: list[str], rows: list[list[str]], box: Position,
                  style: TableStyle | None = None) -> None: ...

    def add_chart(self, kind: ChartKind, categories: list[str],
                  series: list[ChartSeries], box: Position,
                  number_format: str | None = None,
                  data_labels: bool = False) -> None: ...

    def truncate(self, count: int) -> None: ...

    def to_bytes(self) -> bytes: ...


_ALIGN_MAP = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}

_ANCHOR_MAP = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

_SHAPE_MAP = {
    ShapeKind.RECTANGLE: MSO_SHAPE.RECTANGLE,
    ShapeKind.ROUNDED_RECTANGLE: MSO_SHAPE.ROUNDED_RECTANGLE,
    ShapeKind.OVAL: MSO_SHAPE.OVAL,
    ShapeKind.HEXAGON: MSO_SHAPE.HEXAGON,
}


def _apply_font(run, font: FontSpec) -> None:
    """Apply a FontSpec to a python-pptx Run."""
    run.font.name = font.name
    run.font.size = Pt(font.size_pt)
    run.font.bold = font.bold
    run.font.italic = font.italic
    if font.color:
        run.font.color.rgb = hex_to_rgb(font.color)


def _set_alpha(shape, transparency: int) -> None:
    """Make a solid shape fill partly transparent (0-100)."""
    srgb = shape._element.spPr.find(qn("a:solidFill"))
    if srgb is None:
        return
    clr = srgb.find(qn("a:srgbClr"))
    if clr is None:
        return
    etree.SubElement(clr, qn("a:alpha"), val=str((100 - transparency) * 1000))


# ---------------------------------------------------------------------------
# PPTXDocument
# ---------------------------------------------------------------------------

class PPTXDocument:
    """python-pptx backed document sink.

    Parameters
    ----------
    settings : ReportSettings, optional
        Supplies the slide size and the design system used for default fonts
        and chart styling.
    """

    def __init__(self, settings: ReportSettings | None = None) -> None:
        self.settings = settings or ReportSettings()
        self.design = self.settings.design
        self.prs = Presentation()
        self.prs.slide_width = Inches(self.settings.slide_width)
        self.prs.slide_height = Inches(self.settings.slide_height)
        self._slide = None

    @property
    def slide_count(self) -> int:
        return len(self.prs.slides)

    def _current(self):
        if self._slide is None:
            raise RuntimeError("add_slide() must be called before drawing")
        return self._slide

    def _default_font(self) -> FontSpec:
        return FontSpec(name=self.design.primary_font,
                        size_pt=self.design.body_size_pt,
                        color=self.design.black)

    # ------------------------------------------------------------------
    # Slides
    # ------------------------------------------------------------------

    def add_slide(self, background: str | None = None) -> int:
        """Append a blank slide and make it the drawing target."""
        layout = self.prs.slide_layouts[6]  # Blank layout
        slide = self.prs.slides.add_slide(layout)
        if background:
            fill = slide.background.fill
            fill.solid()
            fill.fore_color.rgb = hex_to_rgb(background)
        self._slide = slide
        return self.slide_count - 1

    def truncate(self, count: int) -> None:
        """Drop every slide after the first ``count``."""
        sld_ids = self.prs.slides._sldIdLst
        for sld_id in list(sld_ids)[count:]:
            self.prs.part.drop_rel(sld_id.rId)
            sld_ids.remove(sld_id)
        slides = self.prs.slides
        self._slide = slides[len(slides) - 1] if len(slides) else None

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def add_text(self, text: str, box: Position, font: FontSpec | None = None) -> None:
        """Add a text box; newlines start new paragraphs."""
        font = font or self._default_font()
        txbox = self._current().shapes.add_textbox(
            Inches(box.left), Inches(box.top),
            Inches(box.width), Inches(box.height),
        )
        tf = txbox.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = _ANCHOR_MAP.get(font.valign, MSO_ANCHOR.TOP)
        for idx, line in enumerate(str(text).split("\n")):
            p = tf.paragraphs[0] if idx == 0 else tf.add_paragraph()
            p.alignment = _ALIGN_MAP.get(font.align, PP_ALIGN.LEFT)
            run = p.add_run()
            run.text = line
            _apply_font(run, font)

    def add_shape(self, kind: ShapeKind, box: Position, fill: str | None = None,
                  line: str | None = None, line_width: float = 1.0,
                  transparency: int = 0, rotation: float = 0.0) -> None:
        shape = self._current().shapes.add_shape(
            _SHAPE_MAP[kind],
            Inches(box.left), Inches(box.top),
            Inches(box.width), Inches(box.height),
        )
        if fill:
            shape.fill.solid()
            shape.fill.fore_color.rgb = hex_to_rgb(fill)
            if transparency:
                _set_alpha(shape, transparency)
        else:
            shape.fill.background()
        if line:
            shape.line.color.rgb = hex_to_rgb(line)
            shape.line.width = Pt(line_width)
        else:
            shape.line.fill.background()
        if rotation:
            shape.rotation = rotation
        if kind == ShapeKind.ROUNDED_RECTANGLE:
            shape.adjustments[0] = 0.1
        shape.shadow.inherit = False

    def add_image(self, data: bytes, box: Position) -> None:
        self._current().shapes.add_picture(
            io.BytesIO(data),
            Inches(box.left), Inches(box.top),
            Inches(box.width), Inches(box.height),
        )

    def add_table(self, header: list[str], rows: list[list[str]], box: Position,
                  style: TableStyle | None = None) -> None:
        """Render a native table with a coloured header row."""
        style = style or TableStyle(font_name=self.design.primary_font)
        num_cols = len(header)
        table_shape = self._current().shapes.add_table(
            len(rows) + 1, num_cols,
            Inches(box.left), Inches(box.top),
            Inches(box.width), Inches(box.height),
        )
        table = table_shape.table
        if style.col_widths:
            for col_idx, width in enumerate(style.col_widths[:num_cols]):
                table.columns[col_idx].width = Inches(width)

        for col_idx, text in enumerate(header):
            cell = table.cell(0, col_idx)
            cell.text = str(text)
            self._style_table_cell(cell, style, col_idx, is_header=True)

        for row_idx, row in enumerate(rows):
            for col_idx in range(num_cols):
                cell = table.cell(row_idx + 1, col_idx)
                cell.text = str(row[col_idx]) if col_idx < len(row) else ""
                stripe = style.stripe_fill if row_idx % 2 == 0 else None
                self._style_table_cell(cell, style, col_idx, fill=stripe)

    def _style_table_cell(self, cell, style: TableStyle, col_idx: int,
                          is_header: bool = False, fill: str | None = None) -> None:
        """Apply styling to a table cell."""
        cell.vertical_anchor = MSO_ANCHOR.MIDDLE
        align = style.align[col_idx] if col_idx < len(style.align) else "left"
        emphasis = not is_header and col_idx == style.emphasis_col

        for paragraph in cell.text_frame.paragraphs:
            paragraph.alignment = _ALIGN_MAP.get(align, PP_ALIGN.LEFT)
            for run in paragraph.runs:
                run.font.name = style.font_name
                if is_header:
                    run.font.size = Pt(style.header_size_pt)
                    run.font.bold = True
                    run.font.color.rgb = hex_to_rgb(style.header_color)
                else:
                    run.font.size = Pt(style.body_size_pt)
                    run.font.bold = emphasis
                    color = (style.emphasis_color if emphasis and style.emphasis_color
                             else style.body_color)
                    run.font.color.rgb = hex_to_rgb(color)

        # Header row and stripes carry an explicit fill, other rows none
        background = style.header_fill if is_header else fill
        if background:
            cell.fill.solid()
            cell.fill.fore_color.rgb = hex_to_rgb(background)
        else:
            cell.fill.background()

    def add_chart(self, kind: ChartKind, categories: list[str],
                  series: list[ChartSeries], box: Position,
                  number_format: str | None = None,
                  data_labels: bool = False) -> None:
        add_category_chart(self._current(), kind, categories, series, box,
                           self.design, number_format=number_format,
                           data_labels=data_labels)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        buf = io.BytesIO()
        self.prs.save(buf)
        return buf.getvalue()


# ---------------------------------------------------------------------------
# RecordingDocument
# ---------------------------------------------------------------------------

class RecordingDocument:
    """Records drawing calls instead of producing a binary.

    ``slides`` is a list of slides, each a list of call dicts like
    ``{"op": "text", "text": "...", "box": {...}, "font": {...}}``.
    """

    def __init__(self, settings: ReportSettings | None = None) -> None:
        self.settings = settings or ReportSettings()
        self.slides: list[dict[str, Any]] = []

    @property
    def slide_count(self) -> int:
        return len(self.slides)

    def _record(self, op: str, **kwargs) -> None:
        if not self.slides:
            raise RuntimeError("add_slide() must be called before drawing")
        self.slides[-1]["calls"].append({"op": op, **kwargs})

    def add_slide(self, background: str | None = None) -> int:
        self.slides.append({"background": background, "calls": []})
        return len(self.slides) - 1

    def truncate(self, count: int) -> None:
        del self.slides[count:]

    def add_text(self, text: str, box: Position, font: FontSpec | None = None) -> None:
        self._record("text", text=str(text), box=box.to_dict(),
                     font=font.to_dict() if font else None)

    def add_shape(self, kind: ShapeKind, box: Position, fill: str | None = None,
                  line: str | None = None, line_width: float = 1.0,
                  transparency: int = 0, rotation: float = 0.0) -> None:
        self._record("shape", kind=kind.value, box=box.to_dict(), fill=fill,
                     line=line, transparency=transparency, rotation=rotation)

    def add_image(self, data: bytes, box: Position) -> None:
        self._record("image", size=len(data), box=box.to_dict())

    def add_table(self, header: list[str], rows: list[list[str]], box: Position,
                  style: TableStyle | None = None) -> None:
        self._record("table", header=list(header),
                     rows=[list(r) for r in rows], box=box.to_dict())

    def add_chart(self, kind: ChartKind, categories: list[str],
                  series: list[ChartSeries], box: Position,
                  number_format: str | None = None,
                  data_labels: bool = False) -> None:
        self._record("chart", kind=kind.value, categories=list(categories),
                     series=[{"name": s.name, "values": list(s.values)} for s in series],
                     box=box.to_dict())

    # -- inspection helpers -------------------------------------------------

    def calls(self, index: int, op: str | None = None) -> list[dict]:
        return [c for c in self.slides[index]["calls"] if op is None or c["op"] == op]

    def texts(self, index: int) -> list[str]:
        return [c["text"] for c in self.calls(index, "text")]

    def all_texts(self) -> list[str]:
        return [t for i in range(len(self.slides)) for t in self.texts(i)]

    def to_bytes(self) -> bytes:
        return json.dumps({"slides": self.slides}, ensure_ascii=False,
                          indent=2).encode("utf-8")

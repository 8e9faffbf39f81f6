"""Shared drawing helpers used by the slide modules.

Header, footer, cards, trend pills, icons and the 3-month KPI table. All
geometry is in inches on the 10 x 5.625 canvas.
"""

from ..generator.document import DocumentSink, ShapeKind
from ..generator.layout import column_lefts, fit_contain
from ..processor.periods import month_name
from ..schema.design_system import Trend, format_number, format_percent
from ..schema.models import FontSpec, MonthlyKPI, Platform, Position
from .base import RenderContext

NO_DATA_TEXT = "Keine Daten für diesen Zeitraum verfügbar"

# Facebook share counts come from the Graph API with restricted availability;
# the table always labels them as limited.
SHARES_ALWAYS_LIMITED = True

CONTENT_TOP = 1.0
CONTENT_BOTTOM = 4.85


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

def font(context: RenderContext, size: float, bold: bool = False,
         color: str | None = None, align: str = "left",
         valign: str = "top", italic: bool = False) -> FontSpec:
    """FontSpec in the report's primary font."""
    return FontSpec(name=context.design.primary_font, size_pt=size, bold=bold,
                    italic=italic, color=color or context.design.black,
                    align=align, valign=valign)


def text(document: DocumentSink, context: RenderContext, value: str,
         left: float, top: float, width: float, height: float,
         size: float = 10, **kwargs) -> None:
    document.add_text(value, Position(left, top, width, height),
                      font(context, size, **kwargs))


# ---------------------------------------------------------------------------
# Slide chrome
# ---------------------------------------------------------------------------

def start_slide(document: DocumentSink, context: RenderContext,
                background: str | None = None) -> int:
    """Append a slide and take the next page number for it."""
    document.add_slide(background=background or context.design.background)
    return context.pages.next()


def branding_line(document: DocumentSink, context: RenderContext,
                  color: str | None = None) -> None:
    document.add_shape(ShapeKind.RECTANGLE,
                       Position(0, 0, context.settings.slide_width, 0.06),
                       fill=color or context.primary)


def watermark(document: DocumentSink, context: RenderContext) -> None:
    document.add_shape(ShapeKind.RECTANGLE, Position(9.2, 0, 0.8, 0.06),
                       fill=context.secondary, transparency=70)


def customer_logo(document: DocumentSink, context: RenderContext, box: Position,
                  size: float = 14, align: str = "right") -> bool:
    """Draw the customer logo fitted into ``box``, or the name as text.

    Returns True when the logo image was used.
    """
    url = context.customer.logo_url
    data = context.assets.get(url)
    if data is not None:
        dims = context.assets.image_size(url)
        target = fit_contain(dims[0], dims[1], box) if dims else box
        document.add_image(data, target)
        return True
    document.add_text(context.customer.name, box,
                      font(context, size, bold=True, color=context.design.dark_gray,
                           align=align, valign="middle"))
    return False


def footer(document: DocumentSink, context: RenderContext, page: int,
           color: str | None = None) -> None:
    """Agency hexagon bottom left, zero-padded page number bottom right."""
    margin = context.design.margin
    document.add_shape(ShapeKind.HEXAGON, Position(margin, 4.95, 0.3, 0.3),
                       fill=color or context.primary)
    document.add_text(f"{page:02d}", Position(9.5 - margin, 5.1, 0.5, 0.3),
                      font(context, 10, color=context.design.medium_gray,
                           align="right"))


def slide_header(document: DocumentSink, context: RenderContext, title: str,
                 subtitle: str) -> int:
    """Start a standard content slide and return its page number."""
    page = start_slide(document, context)
    margin = context.design.margin
    branding_line(document, context)
    watermark(document, context)
    customer_logo(document, context, Position(7.5, 0.15, 2.0, 0.5))
    text(document, context, title, margin, 0.2, 7, 0.45,
         size=context.design.title_size_pt, bold=True)
    text(document, context, subtitle, margin, 0.6, 7, 0.3,
         size=context.design.subtitle_size_pt, color=context.design.medium_gray)
    return page


def placeholder(document: DocumentSink, context: RenderContext,
                message: str = NO_DATA_TEXT) -> None:
    """Centred grey notice used instead of an empty content area."""
    text(document, context, message, 1, 2.5, 8, 0.5, size=14,
         color=context.design.medium_gray, align="center")


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def card(document: DocumentSink, context: RenderContext, box: Position,
         border: str | None = None, border_width: float = 0.5,
         offset: float = 0.04) -> None:
    """White rounded card with a flat drop shadow."""
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, box.shifted(offset, offset),
                       fill=context.design.shadow)
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, box,
                       fill=context.design.white,
                       line=border or context.design.border,
                       line_width=border_width)


def trend_pill(document: DocumentSink, context: RenderContext, box: Position,
               trend: Trend, size: float = 11) -> None:
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, box, fill=trend.color)
    document.add_text(trend.text, box,
                      font(context, size, bold=True, color=context.design.white,
                           align="center", valign="middle"))


def platform_badge(document: DocumentSink, context: RenderContext,
                   platform: Platform, box: Position, size: float = 14) -> None:
    """Facebook "f" disc or Instagram camera outline."""
    color = context.platform_color(platform)
    if platform == Platform.INSTAGRAM:
        line_width = 4 if box.width >= 0.8 else 2
        document.add_shape(ShapeKind.ROUNDED_RECTANGLE, box, line=color,
                           line_width=line_width)
        document.add_shape(ShapeKind.OVAL, box.inset(box.width * 0.25, box.height * 0.25),
                           line=color, line_width=line_width * 0.75)
    elif platform == Platform.ADS:
        document.add_shape(ShapeKind.ROUNDED_RECTANGLE, box, fill=color)
        document.add_text("€", box, font(context, size, bold=True,
                                         color=context.design.white,
                                         align="center", valign="middle"))
    else:
        document.add_shape(ShapeKind.OVAL, box, fill=color)
        document.add_text("f", box, font(context, size, bold=True,
                                         color=context.design.white,
                                         align="center", valign="middle"))


def draw_icon(document: DocumentSink, name: str, left: float, top: float,
              size: float, color: str) -> None:
    """Simple pictograms built from shapes: ``user``, ``eye``, ``chat``."""
    if name == "user":
        document.add_shape(ShapeKind.OVAL,
                           Position(left + size * 0.3, top, size * 0.4, size * 0.4),
                           fill=color)
        document.add_shape(ShapeKind.ROUNDED_RECTANGLE,
                           Position(left + size * 0.15, top + size * 0.45,
                                    size * 0.7, size * 0.5), fill=color)
    elif name == "eye":
        document.add_shape(ShapeKind.OVAL,
                           Position(left, top + size * 0.25, size, size * 0.5),
                           line=color, line_width=2)
        document.add_shape(ShapeKind.OVAL,
                           Position(left + size * 0.35, top + size * 0.35,
                                    size * 0.3, size * 0.3), fill=color)
    elif name == "chat":
        document.add_shape(ShapeKind.ROUNDED_RECTANGLE,
                           Position(left, top, size, size * 0.7), fill=color)
        document.add_shape(ShapeKind.RECTANGLE,
                           Position(left + size * 0.15, top + size * 0.65,
                                    size * 0.2, size * 0.2),
                           fill=color, rotation=45)
    else:
        raise ValueError(f"Unknown icon: {name!r}")


def table_header(document: DocumentSink, context: RenderContext, headers: list[str],
                 widths: list[float], top: float, color: str, height: float = 0.4,
                 size: float = 9, first_left: int = 1) -> None:
    """Coloured header bar with column labels.

    The first ``first_left`` columns are left aligned, the rest centred.
    """
    margin = context.design.margin
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE,
                       Position(margin, top, sum(widths), height), fill=color)
    for i, (label, x) in enumerate(zip(headers, column_lefts(margin, widths))):
        text(document, context, label, x + 0.1, top, widths[i] - 0.2, height,
             size=size, bold=True, color=context.design.white,
             align="left" if i < first_left else "center", valign="middle")


def table_row(document: DocumentSink, context: RenderContext, values: list[str],
              widths: list[float], top: float, height: float, stripe: bool,
              size: float = 8, first_left: int = 1,
              emphasis: dict[int, str] | None = None) -> None:
    """One striped body row; ``emphasis`` maps column index to a bold colour."""
    margin = context.design.margin
    emphasis = emphasis or {}
    if stripe:
        document.add_shape(ShapeKind.RECTANGLE,
                           Position(margin + 0.05, top, sum(widths) - 0.1, height),
                           fill=context.design.light_gray)
    for i, (value, x) in enumerate(zip(values, column_lefts(margin, widths))):
        text(document, context, value, x + 0.1, top, widths[i] - 0.2, height,
             size=size, bold=i in emphasis,
             color=emphasis.get(i, context.design.dark_gray),
             align="left" if i < first_left else "center", valign="middle")


# ---------------------------------------------------------------------------
# Three-month KPI table
# ---------------------------------------------------------------------------

def kpi_rows(platform: Platform, kpis: list[MonthlyKPI]) -> list[tuple[str, list[str]]]:
    """Labelled table rows, current month first."""
    newest_first = list(reversed(kpis))
    if platform == Platform.INSTAGRAM:
        shared_label = "Saves"
    else:
        shared_label = "Shares (limited)" if SHARES_ALWAYS_LIMITED else "Shares"
    return [
        ("Beiträge", [format_number(k.posts_count) for k in newest_first]),
        ("Reichweite Gesamt", [format_number(k.reach) for k in newest_first]),
        ("Impressionen", [format_number(k.impressions) for k in newest_first]),
        ("Reaktionen", [format_number(k.reactions) for k in newest_first]),
        ("Kommentare", [format_number(k.comments) for k in newest_first]),
        (shared_label, [format_number(k.shares_or_saves) for k in newest_first]),
        ("Engagement-Rate", [format_percent(k.engagement_rate) for k in newest_first]),
        ("Follower", [format_number(k.followers) for k in newest_first]),
    ]


def kpi_table(document: DocumentSink, context: RenderContext, platform: Platform,
              top: float = CONTENT_TOP) -> None:
    """Premium 3-month comparison table, newest month on the left."""
    design = context.design
    kpis = context.kpis(platform)
    rows = kpi_rows(platform, kpis)
    left = design.margin
    width = context.settings.slide_width - 2 * design.margin
    widths = [2.8, 2.1, 2.1, width - 7.0]
    row_h, header_h = 0.38, 0.48
    color = context.platform_color(platform)
    total_h = header_h + row_h * len(rows) + 0.1

    card(document, context, Position(left, top, width, total_h))
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE,
                       Position(left, top, width, header_h), fill=color)
    document.add_shape(ShapeKind.RECTANGLE,
                       Position(left, top + header_h - 0.1, width, 0.1), fill=color)

    headers = ["Kennzahl"] + [month_name(k.month) for k in reversed(kpis)]
    lefts = column_lefts(left, widths)
    for i, label in enumerate(headers):
        text(document, context, label, lefts[i] + 0.15, top, widths[i] - 0.3, header_h,
             size=11, bold=True, color=design.white,
             align="left" if i == 0 else "center", valign="middle")

    y = top + header_h + 0.05
    for idx, (label, values) in enumerate(rows):
        if idx % 2 == 0:
            document.add_shape(ShapeKind.RECTANGLE,
                               Position(left + 0.05, y, width - 0.1, row_h),
                               fill=design.light_gray)
        text(document, context, label, lefts[0] + 0.15, y, widths[0] - 0.3, row_h,
             size=10, bold=True, color=design.dark_gray, valign="middle")
        for i, value in enumerate(values):
            current = i == 0
            text(document, context, value, lefts[i + 1] + 0.1, y,
                 widths[i + 1] - 0.2, row_h, size=10, bold=current,
                 color=design.black if current else design.medium_gray,
                 align="center", valign="middle")
        y += row_h

"""Facebook and Instagram three-month KPI tables."""

from ..generator.document import DocumentSink
from ..processor.periods import month_name
from ..schema.models import Platform
from .base import RenderContext
from .helpers import SHARES_ALWAYS_LIMITED, footer, kpi_table, slide_header, text


def _render_kpis(document: DocumentSink, context: RenderContext,
                 platform: Platform, title: str) -> DocumentSink:
    page = slide_header(document, context, title,
                        f"Monatsvergleich bis {month_name(context.period.target)}")
    kpi_table(document, context, platform)
    if platform == Platform.FACEBOOK and SHARES_ALWAYS_LIMITED:
        text(document, context,
             "Shares werden von Facebook nur eingeschränkt bereitgestellt.",
             context.design.margin, 4.66, 6, 0.25,
             size=context.design.caption_size_pt, italic=True,
             color=context.design.medium_gray)
    footer(document, context, page, context.platform_color(platform))
    return document


def render_fb_kpis(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_kpis(document, context, Platform.FACEBOOK, "Facebook Kennzahlen")


def render_ig_kpis(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_kpis(document, context, Platform.INSTAGRAM, "Instagram Kennzahlen")

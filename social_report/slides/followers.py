"""Facebook fans: current follower count, monthly growth and a 3-month chart."""

from ..generator.charts import ChartKind, ChartSeries
from ..generator.document import DocumentSink
from ..processor.periods import month_name
from ..schema.design_system import format_number
from ..schema.models import Platform, Position
from .base import RenderContext
from .helpers import NO_DATA_TEXT, card, footer, slide_header, text


def growth_text(new_followers: int) -> str:
    sign = "+" if new_followers >= 0 else ""
    return f"{sign}{format_number(new_followers)} neue Fans im Berichtsmonat"


def render_fb_followers(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    margin = design.margin
    page = slide_header(document, context, "Facebook", "Fans (Entwicklung)")

    width = context.settings.slide_width - 2 * margin
    card(document, context, Position(margin, 1.0, width, 3.5))

    kpis = context.kpis(Platform.FACEBOOK)
    current = kpis[-1]
    text(document, context, "Aktuelle Fans", margin + 0.3, 1.2, 3, 0.3,
         size=12, bold=True, color=design.dark_gray)
    text(document, context, format_number(current.followers), margin + 0.3, 1.5, 3, 0.5,
         size=28, bold=True, color=context.primary)
    text(document, context, growth_text(current.new_followers), margin + 0.3, 2.0, 3.2, 0.3,
         color=design.trend_up if current.new_followers >= 0 else design.trend_down)

    chart_box = Position(margin + 3.7, 1.2, width - 4.0, 3.1)
    if any(k.followers for k in kpis):
        document.add_chart(
            ChartKind.COLUMN,
            [month_name(k.month) for k in kpis],
            [ChartSeries("Fans", [k.followers for k in kpis], context.primary)],
            chart_box,
            number_format="#,##0",
            data_labels=True,
        )
    else:
        text(document, context, NO_DATA_TEXT, chart_box.left, 2.5, chart_box.width, 0.4,
             size=12, color=design.medium_gray, align="center")

    footer(document, context, page)
    return document

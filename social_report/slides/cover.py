"""Cover slide: agency mark, customer logo, report title and month."""

from ..generator.document import DocumentSink, ShapeKind
from ..processor.periods import long_name
from ..schema.models import Position
from .base import RenderContext
from .helpers import branding_line, customer_logo, start_slide, text


def render_cover(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    settings = context.settings
    margin = design.margin
    width = settings.slide_width

    start_slide(document, context)
    branding_line(document, context)

    text(document, context, f"{settings.agency_name}.", margin, 0.25, 2, 0.4,
         size=18, bold=True)
    badge = Position(margin, 0.7, 2.2, 0.25)
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, badge, fill=design.meta_blue)
    text(document, context, settings.partner_badge, margin + 0.05, 0.7, 2.1, 0.25,
         size=7, bold=True, color=design.white, valign="middle")

    document.add_shape(ShapeKind.RECTANGLE, Position(7.5, 0.15, 1.4, 1.4),
                       fill=context.primary, rotation=45)
    document.add_shape(ShapeKind.RECTANGLE, Position(8.15, 0.7, 1.1, 1.1),
                       fill=context.secondary, rotation=45)

    if context.assets.get(context.customer.logo_url) is not None:
        customer_logo(document, context, Position(3, 1.5, 4, 1.5))
    else:
        text(document, context, context.customer.name, 0, 1.8, width, 0.8,
             size=36, bold=True, color=design.dark_gray, align="center")
    text(document, context, settings.report_title, 0, 3.4, width, 0.55,
         size=30, bold=True, align="center")
    text(document, context, long_name(context.period.target), 0, 3.95, width, 0.4,
         size=18, color=context.primary, align="center")
    return document

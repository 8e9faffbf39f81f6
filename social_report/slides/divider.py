"""Section divider slides for Facebook, Instagram and Paid Ads."""

from ..generator.document import DocumentSink, ShapeKind
from ..processor.periods import month_name
from ..schema.models import Platform, Position
from .base import RenderContext
from .helpers import branding_line, platform_badge, start_slide, text

SECTION_TITLES = {
    Platform.FACEBOOK: "Facebook",
    Platform.INSTAGRAM: "Instagram",
    Platform.ADS: "Paid Ads",
}


def _render_divider(document: DocumentSink, context: RenderContext,
                    platform: Platform) -> DocumentSink:
    margin = context.design.margin
    color = context.platform_color(platform)

    start_slide(document, context)
    branding_line(document, context, color)
    document.add_shape(ShapeKind.RECTANGLE, Position(6.5, -0.5, 3, 3),
                       fill=color, transparency=10, rotation=45)
    document.add_shape(ShapeKind.RECTANGLE, Position(7.2, 0.2, 2.3, 2.3),
                       fill=color, transparency=20, rotation=45)

    platform_badge(document, context, platform, Position(margin, 1.5, 1.0, 1.0),
                   size=40)
    text(document, context, SECTION_TITLES[platform], margin + 1.3, 1.5, 6, 0.6,
         size=42, bold=True)
    text(document, context, month_name(context.period.target), margin + 1.3, 2.15,
         6, 0.4, size=18, color=color)
    document.add_shape(ShapeKind.RECTANGLE, Position(margin + 1.3, 2.65, 3, 0.04),
                       fill=color)
    return document


def render_fb_divider(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_divider(document, context, Platform.FACEBOOK)


def render_ig_divider(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_divider(document, context, Platform.INSTAGRAM)


def render_ads_divider(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_divider(document, context, Platform.ADS)

"""Top three image posts per platform, ranked by interactions."""

from ..generator.document import DocumentSink, ShapeKind
from ..generator.layout import fit_contain
from ..schema.design_system import format_date, format_number, format_percent
from ..schema.models import Platform, Position, PostRecord
from .base import RenderContext
from .helpers import font, footer, placeholder, slide_header, text

TOP_COUNT = 3
IMAGE_W, IMAGE_H = 2.8, 3.5
START_Y = 1.0
GAP = 0.35


def top_posts(posts: list[PostRecord], count: int = TOP_COUNT) -> list[PostRecord]:
    """Non-video posts with the most interactions; ties keep publication order."""
    candidates = [p for p in posts if not p.is_video]
    return sorted(candidates, key=lambda p: p.interactions, reverse=True)[:count]


def _post_tile(document: DocumentSink, context: RenderContext, post: PostRecord,
               rank: int, left: float, color: str) -> None:
    design = context.design
    box = Position(left, START_Y, IMAGE_W, IMAGE_H)
    document.add_shape(ShapeKind.RECTANGLE, box.shifted(0.05, 0.05), fill=design.shadow)

    data = context.assets.get(post.thumbnail_url)
    if data is None:
        document.add_shape(ShapeKind.RECTANGLE, box, fill=design.light_gray,
                           line=design.border, line_width=1)
        text(document, context, "Kein Bild", left, START_Y + IMAGE_H / 2 - 0.15,
             IMAGE_W, 0.3, color=design.medium_gray, align="center")
    else:
        document.add_shape(ShapeKind.RECTANGLE, box, fill=design.black)
        dims = context.assets.image_size(post.thumbnail_url)
        document.add_image(data, fit_contain(dims[0], dims[1], box) if dims else box)

    date_box = Position(left + IMAGE_W - 0.98, START_Y + 0.08, 0.9, 0.28)
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, date_box, fill=design.black,
                       transparency=40)
    document.add_text(format_date(post.created_time), date_box,
                      _white(context, 8))

    overlay_h = IMAGE_H * 0.35
    overlay_y = START_Y + IMAGE_H - overlay_h
    document.add_shape(ShapeKind.RECTANGLE, Position(left, overlay_y, IMAGE_W, overlay_h),
                       fill=design.black, transparency=35)
    metrics_y = overlay_y + 0.15
    for offset, label, value in ((0.0, "Reichweite", post.reach),
                                 (0.52, "Interaktionen", post.interactions)):
        text(document, context, label, left + 0.1, metrics_y + offset,
             IMAGE_W - 0.2, 0.2, size=8, color="#CCCCCC")
        text(document, context, format_number(value), left + 0.1,
             metrics_y + offset + 0.18, IMAGE_W - 0.2, 0.28, size=14, bold=True,
             color=design.white)

    pill = Position(left + IMAGE_W - 1.0, metrics_y + 0.75, 0.9, 0.25)
    document.add_shape(ShapeKind.ROUNDED_RECTANGLE, pill, fill=color)
    document.add_text(format_percent(post.engagement_rate, decimals=1), pill,
                      _white(context, 9, bold=True))

    badge = Position(left - 0.15, START_Y - 0.15, 0.4, 0.4)
    document.add_shape(ShapeKind.OVAL, badge, fill=color)
    document.add_text(str(rank), badge, _white(context, 14, bold=True))


def _white(context: RenderContext, size: float, bold: bool = False):
    return font(context, size, bold=bold, color=context.design.white,
                align="center", valign="middle")


def _render_top_posts(document: DocumentSink, context: RenderContext,
                      platform: Platform, title: str) -> DocumentSink:
    page = slide_header(document, context, title, "Top Beiträge nach Interaktionen")
    color = context.platform_color(platform)
    posts = top_posts(context.posts(platform))
    if not posts:
        placeholder(document, context)
    start_x = context.design.margin + 0.2
    for idx, post in enumerate(posts):
        _post_tile(document, context, post, idx + 1,
                   start_x + idx * (IMAGE_W + GAP), color)
    footer(document, context, page, color)
    return document


def render_fb_top_posts(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_top_posts(document, context, Platform.FACEBOOK, "Facebook")


def render_ig_top_posts(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_top_posts(document, context, Platform.INSTAGRAM, "Instagram")

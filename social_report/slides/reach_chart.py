"""Bar chart of the four posts with the highest reach, thumbnails inside the bars."""

from ..generator.document import DocumentSink, ShapeKind
from ..generator.layout import bar_extents
from ..schema.design_system import format_date, format_number
from ..schema.models import Platform, Position, PostRecord
from .base import RenderContext
from .helpers import footer, placeholder, slide_header, text

BAR_COUNT = 4
CHART_LEFT = 1.2
CHART_BOTTOM = 4.5
CHART_WIDTH = 8.0
MAX_BAR_HEIGHT = 3.2
BAR_WIDTH = 1.0
BAR_SPACING = 1.8
THUMB_SIZE = 0.7
FOOTNOTE = "Reichweite = Anzahl der Konten, die den Beitrag mindestens einmal gesehen haben."


def top_by_reach(posts: list[PostRecord], count: int = BAR_COUNT) -> list[PostRecord]:
    return sorted(posts, key=lambda p: p.reach, reverse=True)[:count]


def _render_reach_chart(document: DocumentSink, context: RenderContext,
                        platform: Platform, title: str) -> DocumentSink:
    design = context.design
    page = slide_header(document, context, title, "Beiträge mit der höchsten Reichweite")
    color = context.platform_color(platform)
    posts = top_by_reach(context.posts(platform))
    if not posts:
        placeholder(document, context)
        footer(document, context, page, color)
        return document

    document.add_shape(ShapeKind.RECTANGLE,
                       Position(CHART_LEFT - 0.1, CHART_BOTTOM, CHART_WIDTH, 0.01),
                       fill=design.border)
    heights = bar_extents([p.reach for p in posts], MAX_BAR_HEIGHT)
    for idx, (post, height) in enumerate(zip(posts, heights)):
        bar_x = CHART_LEFT + idx * BAR_SPACING + 0.3
        bar_y = CHART_BOTTOM - height
        if height > 0:
            document.add_shape(ShapeKind.RECTANGLE,
                               Position(bar_x, bar_y, BAR_WIDTH, height), fill=color)
        data = context.assets.get(post.thumbnail_url)
        if data is not None and height >= THUMB_SIZE + 0.2:
            document.add_image(data, Position(bar_x + (BAR_WIDTH - THUMB_SIZE) / 2,
                                              bar_y + 0.1, THUMB_SIZE, THUMB_SIZE))
        text(document, context, format_number(post.reach), bar_x - 0.1, bar_y - 0.3,
             BAR_WIDTH + 0.2, 0.25, bold=True, align="center")
        text(document, context, format_date(post.created_time), bar_x - 0.2,
             CHART_BOTTOM + 0.1, BAR_WIDTH + 0.4, 0.25, size=9,
             color=design.medium_gray, align="center")

    text(document, context, FOOTNOTE, 1.0, 4.95, 7.5, 0.2,
         size=design.caption_size_pt, color=design.medium_gray)
    footer(document, context, page, color)
    return document


def render_fb_reach_chart(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_reach_chart(document, context, Platform.FACEBOOK, "Facebook Reichweite")


def render_ig_reach_chart(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_reach_chart(document, context, Platform.INSTAGRAM, "Instagram Reichweite")

"""Facebook video and Instagram reel tables."""

from ..generator.document import DocumentSink
from ..generator.layout import row_positions, truncate
from ..schema.design_system import format_date, format_number
from ..schema.models import Platform, PostRecord
from .base import RenderContext
from .helpers import footer, placeholder, slide_header, table_header, table_row

MAX_ROWS = 8
ROW_H = 0.4
HEADER_Y = 1.0
LAST_ROW_TOP = 4.6
CAPTION_LIMIT = 50

FB_WIDTHS = [0.5, 3.5, 1.5, 1.5, 1.5, 1.0]
FB_HEADERS = ["#", "Video", "3s Views", "Reichweite", "Interaktionen", "Datum"]
IG_WIDTHS = [0.5, 3.5, 1.3, 1.3, 1.3, 1.1]
IG_HEADERS = ["#", "Reel", "Likes", "Reichweite", "Saves", "Datum"]


def ranked_videos(posts: list[PostRecord], key) -> list[PostRecord]:
    videos = [p for p in posts if p.is_video]
    return sorted(videos, key=key, reverse=True)[:MAX_ROWS]


def _fb_row(rank: int, post: PostRecord) -> list[str]:
    return [
        str(rank),
        truncate(post.message, CAPTION_LIMIT, fallback="Video"),
        format_number(post.video_views),
        format_number(post.reach),
        format_number(post.reactions + post.comments),
        format_date(post.created_time),
    ]


def _ig_row(rank: int, post: PostRecord) -> list[str]:
    return [
        str(rank),
        truncate(post.message, CAPTION_LIMIT, fallback="Reel"),
        format_number(post.reactions),
        format_number(post.reach),
        format_number(post.saves),
        format_date(post.created_time),
    ]


def _render_video_table(document: DocumentSink, context: RenderContext,
                        platform: Platform, title: str, subtitle: str,
                        headers: list[str], widths: list[float], sort_key,
                        row_builder, empty_text: str) -> DocumentSink:
    page = slide_header(document, context, title, subtitle)
    color = context.platform_color(platform)
    videos = ranked_videos(context.posts(platform), sort_key)
    if not videos:
        placeholder(document, context, empty_text)
        footer(document, context, page, color)
        return document

    table_header(document, context, headers, widths, HEADER_Y, color,
                 height=ROW_H, first_left=2)
    tops = row_positions(len(videos), HEADER_Y + 0.45, ROW_H, LAST_ROW_TOP)
    for idx, (post, top) in enumerate(zip(videos, tops)):
        table_row(document, context, row_builder(idx + 1, post), widths, top,
                  ROW_H, stripe=idx % 2 == 0, first_left=2, emphasis={2: color})
    footer(document, context, page, color)
    return document


def render_fb_videos(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_video_table(
        document, context, Platform.FACEBOOK, "Facebook", "Videos nach 3-Sekunden-Views",
        FB_HEADERS, FB_WIDTHS, lambda p: p.video_views, _fb_row,
        "Keine Videos für diesen Zeitraum verfügbar",
    )


def render_ig_reels(document: DocumentSink, context: RenderContext) -> DocumentSink:
    return _render_video_table(
        document, context, Platform.INSTAGRAM, "Instagram", "Reels & Videos",
        IG_HEADERS, IG_WIDTHS, lambda p: p.reactions, _ig_row,
        "Keine Reels für diesen Zeitraum verfügbar",
    )

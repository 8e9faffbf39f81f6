"""Executive summary: cross-platform totals with trend pills and a verdict."""

from ..generator.document import DocumentSink
from ..processor.periods import month_name
from ..schema.design_system import format_number, format_percent, trend
from ..schema.models import SOCIAL_PLATFORMS, Platform, Position
from .base import RenderContext
from .helpers import (
    NO_DATA_TEXT,
    card,
    draw_icon,
    footer,
    platform_badge,
    slide_header,
    text,
    trend_pill,
)

PLATFORM_NAMES = {Platform.FACEBOOK: "Facebook", Platform.INSTAGRAM: "Instagram"}


def _verdict(context: RenderContext, reach: int, previous_reach: int,
             platforms: list[Platform]) -> str:
    if reach > previous_reach:
        word = "positive"
    elif reach < previous_reach:
        word = "rückläufige"
    else:
        word = "stabile"
    if len(platforms) > 1:
        where = "auf beiden Plattformen"
    elif platforms:
        where = f"auf {PLATFORM_NAMES[platforms[0]]}"
    else:
        where = "in allen Kanälen"
    return (f"Der {month_name(context.period.target)} zeigt eine {word} "
            f"Performance {where}. Die organische Basis bleibt solide und "
            f"bietet eine gute Ausgangslage für neue Impulse.")


def render_executive_summary(document: DocumentSink,
                             context: RenderContext) -> DocumentSink:
    design = context.design
    margin = design.margin
    platforms = [p for p in SOCIAL_PLATFORMS if context.has_platform(p)]
    current = [context.current_kpi(p) for p in platforms]
    previous = [context.previous_kpi(p) for p in platforms]

    page = slide_header(document, context, "Executive Summary",
                        f"{month_name(context.period.target)} – Alle Plattformen")

    totals = [
        ("user", "Beiträge Gesamt",
         sum(k.posts_count for k in current), sum(k.posts_count for k in previous)),
        ("eye", "Reichweite Gesamt",
         sum(k.reach for k in current), sum(k.reach for k in previous)),
        ("chat", "Interaktionen Gesamt",
         sum(k.interactions for k in current), sum(k.interactions for k in previous)),
    ]

    box_w, box_h, box_gap, box_y = 2.1, 1.8, 0.25, 1.1
    pill_w, pill_h = 1.1, 0.32
    for idx, (icon, label, value, prior) in enumerate(totals):
        x = margin + idx * (box_w + box_gap)
        card(document, context, Position(x, box_y, box_w, box_h),
             border=context.primary, border_width=1.5)
        draw_icon(document, icon, x + 0.25, box_y + 0.18, 0.5, context.primary)
        text(document, context, label, x + 0.1, box_y + 0.7, box_w - 0.2, 0.25,
             color=design.medium_gray, align="center")
        text(document, context, format_number(value), x + 0.1, box_y + 0.95,
             box_w - 0.2, 0.45, size=26, bold=True, align="center")
        trend_pill(document, context,
                   Position(x + (box_w - pill_w) / 2, box_y + box_h - 0.5, pill_w, pill_h),
                   trend(value, prior, design))

    verdict_x = margin + (box_w + box_gap) * 3 + 0.2
    verdict_w = context.settings.slide_width - verdict_x - margin
    card(document, context, Position(verdict_x, box_y, verdict_w, box_h),
         border=context.secondary, border_width=1.5)
    text(document, context, "Gesamtfazit", verdict_x + 0.15, box_y + 0.12,
         verdict_w - 0.3, 0.3, size=12, bold=True, color=context.secondary)
    text(document, context, _verdict(context, totals[1][2], totals[1][3], platforms),
         verdict_x + 0.15, box_y + 0.45, verdict_w - 0.3, 1.3,
         color=design.dark_gray)

    breakdown_y, breakdown_w, breakdown_h = box_y + box_h + 0.35, 4.2, 1.5
    if not platforms:
        text(document, context, NO_DATA_TEXT, margin, breakdown_y + 0.5, 9, 0.4,
             size=12, color=design.medium_gray, align="center")
    for idx, platform in enumerate(platforms):
        kpi = context.current_kpi(platform)
        x = margin + idx * (breakdown_w + 0.6)
        color = context.platform_color(platform)
        card(document, context, Position(x, breakdown_y, breakdown_w, breakdown_h),
             border=color, border_width=1, offset=0.03)
        platform_badge(document, context, platform,
                       Position(x + 0.15, breakdown_y + 0.12, 0.35, 0.35))
        text(document, context, PLATFORM_NAMES[platform], x + 0.55,
             breakdown_y + 0.15, 2, 0.3, size=12, bold=True)
        text(document, context,
             f"{format_number(kpi.reach)} Reichweite\n"
             f"{format_number(kpi.posts_count)} Beiträge\n"
             f"{format_percent(kpi.engagement_rate)} Engagement",
             x + 0.15, breakdown_y + 0.5, breakdown_w - 0.3, 0.9,
             color=design.dark_gray)

    footer(document, context, page)
    return document

"""Paid ads: campaign overview, post promotions (PPAs) and campaign cards."""

from ..generator.document import DocumentSink, ShapeKind
from ..generator.layout import grid_positions, row_positions, truncate
from ..processor.periods import month_name
from ..schema.design_system import NO_TREND, format_currency, format_number, format_percent
from ..schema.models import AdsMonthlySummary, CampaignSummary, Platform, Position
from .base import RenderContext
from .helpers import (
    CONTENT_BOTTOM,
    card,
    footer,
    slide_header,
    table_header,
    table_row,
    text,
)

NO_CAMPAIGNS_TEXT = "Keine Kampagnen in diesem Monat"


# ---------------------------------------------------------------------------
# Campaign overview
# ---------------------------------------------------------------------------

OVERVIEW_WIDTHS = [3.5, 1.5, 1.5, 1.5, 1.0]
OVERVIEW_HEADERS = ["Kampagne", "Budget", "Reichweite", "Impressionen", "Klicks"]
OVERVIEW_MAX_ROWS = 10
OVERVIEW_ROW_H = 0.32


def _kpi_box(document: DocumentSink, context: RenderContext, left: float,
             label: str, value: str, highlight: bool) -> None:
    design = context.design
    card(document, context, Position(left, 1.0, 2.1, 0.85),
         border=context.primary if highlight else design.border,
         border_width=1.5 if highlight else 0.5, offset=0.03)
    text(document, context, label, left + 0.1, 1.05, 1.9, 0.25,
         size=8, color=design.medium_gray)
    text(document, context, value, left + 0.1, 1.3, 1.9, 0.45, size=18, bold=True,
         color=context.primary if highlight else design.dark_gray)


def campaign_row(campaign: CampaignSummary) -> list[str]:
    return [
        truncate(campaign.name, 40, fallback="Kampagne"),
        format_currency(campaign.spend),
        format_number(campaign.reach),
        format_number(campaign.impressions),
        format_number(campaign.clicks),
    ]


def render_ads_campaigns(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    ads = context.current_ads
    page = slide_header(document, context, "Paid Ads", "Kampagnenübersicht")

    boxes = [
        ("Gesamtbudget", format_currency(ads.spend)),
        ("Reichweite", format_number(ads.reach)),
        ("Impressionen", format_number(ads.impressions)),
        ("Klicks", format_number(ads.clicks)),
    ]
    for i, (label, value) in enumerate(boxes):
        _kpi_box(document, context, design.margin + i * 2.25, label, value, i == 0)

    table_y = 2.1
    table_header(document, context, OVERVIEW_HEADERS, OVERVIEW_WIDTHS, table_y,
                 context.primary, height=0.38)
    campaigns = ads.campaigns[:OVERVIEW_MAX_ROWS]
    row_y = table_y + 0.42
    if not campaigns:
        text(document, context, NO_CAMPAIGNS_TEXT, design.margin, row_y + 0.3, 9, 0.4,
             size=12, color=design.medium_gray, align="center")
        row_y += 0.7
    tops = row_positions(len(campaigns), row_y, OVERVIEW_ROW_H, 4.7)
    for idx, (campaign, top) in enumerate(zip(campaigns, tops)):
        table_row(document, context, campaign_row(campaign), OVERVIEW_WIDTHS, top,
                  OVERVIEW_ROW_H, stripe=idx % 2 == 0,
                  emphasis={1: context.platform_color(campaign.platform)})
        row_y = top + OVERVIEW_ROW_H

    footer_y = min(row_y + 0.2, 4.8)
    averages = [
        ("Ø CPC", format_currency(ads.cpc)),
        ("Ø CPM", format_currency(ads.cpm)),
        ("Ø CTR", format_percent(ads.ctr)),
    ]
    for idx, (label, value) in enumerate(averages):
        x = design.margin + 0.5 + idx * 3
        text(document, context, f"{label}: ", x, footer_y, 1, 0.3, size=9,
             color=design.medium_gray, align="right")
        text(document, context, value, x + 1, footer_y, 1.5, 0.3, size=11, bold=True)

    footer(document, context, page)
    return document


# ---------------------------------------------------------------------------
# Post promotions (PPAs)
# ---------------------------------------------------------------------------

PPA_WIDTHS = [3.2, 2.0, 2.0, 2.0]
PPA_ROW_H = 0.3
PPA_TABLE_TOP = 1.0
CAMPAIGN_LINE_H = 0.22
CAMPAIGN_STEP = 0.24


def ppa_rows(summaries: list[AdsMonthlySummary]) -> list[tuple[str, list[str]]]:
    """3-month promotion metrics, oldest month first."""
    def per_month(fn):
        return [fn(s) for s in summaries]

    return [
        ("Reichweite", per_month(lambda s: format_number(s.reach))),
        ("Impressionen", per_month(lambda s: format_number(s.impressions))),
        ("CPM", per_month(lambda s: format_currency(s.cpm) if s.impressions else NO_TREND)),
        ("Interaktionen", per_month(lambda s: format_number(s.engagement))),
        ("Video Views", per_month(lambda s: format_number(s.video_views))),
        ("Link-Klicks", per_month(lambda s: format_number(s.link_clicks))),
        ("Kosten/Interaktion", per_month(
            lambda s: format_currency(s.cost_per_engagement) if s.engagement else NO_TREND)),
        ("Budget", per_month(lambda s: format_currency(s.spend))),
    ]


def render_ads_ppas(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    margin = design.margin
    summaries = [s.for_platform(Platform.FACEBOOK) for s in context.ads]
    page = slide_header(document, context, "Facebook", "Beitragsbewerbungen (PPAs)")

    headers = ["Kennzahl"] + [month_name(s.month) for s in summaries]
    table_header(document, context, headers, PPA_WIDTHS, PPA_TABLE_TOP, context.primary,
                 height=0.35)

    width = sum(PPA_WIDTHS)
    current = len(summaries) - 1
    y = PPA_TABLE_TOP + 0.4
    for idx, (label, values) in enumerate(ppa_rows(summaries)):
        document.add_shape(ShapeKind.RECTANGLE, Position(margin, y, width, PPA_ROW_H),
                           fill=design.light_gray if idx % 2 == 0 else design.white)
        text(document, context, label, margin + 0.1, y, PPA_WIDTHS[0] - 0.2, PPA_ROW_H,
             size=9, bold=True, color=design.dark_gray, valign="middle")
        x = margin + PPA_WIDTHS[0]
        for i, value in enumerate(values):
            is_current = i == current
            text(document, context, value, x + 0.1, y, PPA_WIDTHS[i + 1] - 0.2, PPA_ROW_H,
                 size=9, bold=is_current,
                 color=design.black if is_current else design.medium_gray,
                 align="center", valign="middle")
            x += PPA_WIDTHS[i + 1]
        y += PPA_ROW_H

    list_y = y + 0.1
    text(document, context, "Einzelne Kampagnen", margin, list_y, 4, 0.3,
         bold=True, color=design.dark_gray)
    campaign_y = list_y + 0.3
    campaigns = summaries[-1].campaigns
    if not campaigns:
        text(document, context, NO_CAMPAIGNS_TEXT, margin + 0.1, campaign_y, 5,
             CAMPAIGN_LINE_H, size=8, color=design.medium_gray)
    for campaign in campaigns:
        if campaign_y + CAMPAIGN_LINE_H > CONTENT_BOTTOM:
            break
        text(document, context, f"• {campaign.name or 'Unbekannt'}", margin + 0.1,
             campaign_y, 5, CAMPAIGN_LINE_H, size=8, color=design.dark_gray)
        text(document, context,
             f"{format_currency(campaign.spend)} | {format_number(campaign.reach)} Reichw. "
             f"| {format_number(campaign.impressions)} Impr.",
             5.2, campaign_y, 4.3, CAMPAIGN_LINE_H, size=8, color=design.medium_gray,
             align="right")
        campaign_y += CAMPAIGN_STEP

    footer(document, context, page)
    return document


# ---------------------------------------------------------------------------
# Campaign cards
# ---------------------------------------------------------------------------

CARD_W, CARD_H = 4.2, 1.6
CARD_COLS = 2
MAX_CARDS = 6


def card_metrics(campaign: CampaignSummary) -> list[tuple[str, str]]:
    return [
        ("Budget", format_currency(campaign.spend)),
        ("Reichweite", format_number(campaign.reach)),
        ("Impressionen", format_number(campaign.impressions)),
        ("Klicks", format_number(campaign.clicks)),
        ("Interaktionen", format_number(campaign.engagement)),
        ("Video Views", format_number(campaign.video_views)),
    ]


def _campaign_card(document: DocumentSink, context: RenderContext,
                   campaign: CampaignSummary, box: Position) -> None:
    design = context.design
    color = context.primary
    card(document, context, box, border=color, border_width=1, offset=0.03)
    text(document, context, truncate(campaign.display_name, 45, fallback="Kampagne"),
         box.left + 0.15, box.top + 0.1, box.width - 0.3, 0.35, size=9, bold=True,
         color=design.dark_gray)
    document.add_shape(ShapeKind.RECTANGLE,
                       Position(box.left + 0.15, box.top + 0.45, box.width - 0.3, 0.03),
                       fill=color)
    metric_w = (box.width - 0.3) / 3
    for mi, (label, value) in enumerate(card_metrics(campaign)):
        mx = box.left + 0.15 + (mi % 3) * metric_w
        my = box.top + 0.55 + (mi // 3) * 0.5
        text(document, context, label, mx, my, metric_w, 0.2, size=7,
             color=design.medium_gray)
        text(document, context, value, mx, my + 0.18, metric_w, 0.25, size=11,
             bold=True, color=color if mi == 0 else design.dark_gray)


def render_ads_campaign_cards(document: DocumentSink,
                              context: RenderContext) -> DocumentSink:
    """One card per Facebook campaign; no slide at all without campaigns."""
    campaigns = context.current_ads.for_platform(Platform.FACEBOOK).campaigns
    if not campaigns:
        return document

    page = slide_header(document, context, "Facebook", "Einzelkampagnen")
    boxes = grid_positions(min(len(campaigns), MAX_CARDS), CARD_COLS,
                           (context.design.margin, 1.1), (CARD_W, CARD_H),
                           gap=(0.4, 0.25), max_bottom=5.0)
    for campaign, box in zip(campaigns, boxes):
        _campaign_card(document, context, campaign, box)
    footer(document, context, page)
    return document

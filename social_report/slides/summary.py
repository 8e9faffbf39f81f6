"""Closing summary (per-platform bullet cards, paid ads, notes) and glossary."""

from ..generator.document import DocumentSink, ShapeKind
from ..generator.layout import row_positions
from ..schema.design_system import format_currency, format_number, format_percent
from ..schema.models import SOCIAL_PLATFORMS, MonthlyKPI, Platform, Position
from .base import RenderContext
from .executive_summary import PLATFORM_NAMES
from .helpers import card, footer, platform_badge, slide_header, table_header, text


def reach_change(current: MonthlyKPI, previous: MonthlyKPI) -> str:
    """Whole-percent reach change; ``+0%`` when there is nothing to compare."""
    pct = 0
    if previous.reach > 0:
        pct = round((current.reach - previous.reach) / previous.reach * 100)
    sign = "+" if pct >= 0 else ""
    return f"{sign}{pct}%"


def platform_bullets(current: MonthlyKPI, previous: MonthlyKPI) -> str:
    return (f"• Reichweite: {format_number(current.reach)} "
            f"({reach_change(current, previous)})\n"
            f"• {format_number(current.posts_count)} Postings\n"
            f"• Engagement: {format_percent(current.engagement_rate)}")


def render_summary(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    margin = design.margin
    platforms = [p for p in SOCIAL_PLATFORMS if context.has_platform(p)]
    subtitle = " & ".join(PLATFORM_NAMES[p] for p in platforms) or "Paid Ads"
    page = slide_header(document, context, "Zusammenfassung", subtitle)

    for idx, platform in enumerate(platforms):
        x = margin + idx * 4.5
        color = context.platform_color(platform)
        card(document, context, Position(x, 1.0, 4.3, 1.8), border=color,
             border_width=1, offset=0.03)
        platform_badge(document, context, platform, Position(x + 0.15, 1.12, 0.35, 0.35))
        text(document, context, PLATFORM_NAMES[platform], x + 0.55, 1.15, 2, 0.3,
             size=12, bold=True)
        text(document, context,
             platform_bullets(context.current_kpi(platform), context.previous_kpi(platform)),
             x + 0.15, 1.5, 4, 1.2, color=design.dark_gray)

    ads = context.current_ads
    show_ads = context.has_platform(Platform.ADS) and ads.spend > 0
    if show_ads:
        card(document, context, Position(margin, 3.0, 8.8, 1.4), offset=0.03)
        text(document, context, "Paid Ads", margin + 0.15, 3.1, 2, 0.3, size=12,
             bold=True, color=context.primary)
        text(document, context,
             f"Gesamtbudget: {format_currency(ads.spend)} | "
             f"Reichweite: {format_number(ads.reach)} | "
             f"Impressionen: {format_number(ads.impressions)} | "
             f"Klicks: {format_number(ads.clicks)}",
             margin + 0.15, 3.45, 8.5, 0.3, color=design.dark_gray)
        for idx, platform in enumerate(SOCIAL_PLATFORMS):
            split = ads.for_platform(platform)
            text(document, context,
                 f"{PLATFORM_NAMES[platform]}: {format_currency(split.spend)} Budget | "
                 f"{format_number(split.reach)} Reichweite",
                 margin + 0.15 + idx * 4.35, 3.85, 4, 0.25, size=9,
                 color=design.medium_gray)

    if context.notes:
        notes_y = 4.45 if show_ads else 3.1
        text(document, context, "Anmerkungen:", margin, notes_y, 2, 0.25, size=9,
             bold=True, color=design.dark_gray)
        text(document, context, context.notes, margin, notes_y + 0.25, 8.8, 0.25,
             size=9, color=design.medium_gray)

    footer(document, context, page)
    return document


# ---------------------------------------------------------------------------
# Glossary
# ---------------------------------------------------------------------------

GLOSSARY = [
    ("Reichweite", "Anzahl der Personen, die einen Beitrag mindestens einmal gesehen haben (dedupliziert)."),
    ("Impressionen", "Gesamtzahl der Anzeigen eines Beitrags (inkl. Mehrfachansichten derselben Person)."),
    ("Engagement-Rate", "Verhältnis von Interaktionen (Likes, Kommentare, Shares/Saves) zur Reichweite in Prozent."),
    ("Reaktionen", "Likes, Love, Haha, Wow, Traurig, Wütend: alle Reaktionstypen zusammengefasst."),
    ("Saves", "Anzahl der Nutzer, die einen Instagram-Beitrag gespeichert haben."),
    ("Shares", "Anzahl der Nutzer, die einen Facebook-Beitrag geteilt haben."),
    ("3-Sekunden-Views", "Videoaufrufe, bei denen das Video mindestens 3 Sekunden angesehen wurde."),
    ("CPC", "Cost per Click: durchschnittliche Kosten pro Klick auf eine Anzeige."),
    ("CPM", "Cost per Mille: Kosten pro 1.000 Impressionen einer Anzeige."),
    ("CTR", "Click-Through-Rate: Verhältnis von Klicks zu Impressionen in Prozent."),
    ("PPA", "Pay per Action / Beitragsbewerbung: bezahlte Werbung für organische Beiträge."),
    ("Bezahlte Reichweite", "Deduplizierte Reichweite auf Account-Ebene (nicht Summe der Kampagnen-Reichweiten)."),
    ("Organische Reichweite", "Gesamtreichweite minus bezahlte Reichweite = unbezahlte Sichtbarkeit."),
]

GLOSSARY_ROW_H = 0.3


def render_glossary(document: DocumentSink, context: RenderContext) -> DocumentSink:
    design = context.design
    page = slide_header(document, context, "Glossar", "KPI-Definitionen")
    width = context.settings.slide_width - 2 * design.margin
    widths = [2.5, width - 2.5]
    table_header(document, context, ["Begriff", "Definition"], widths, 1.0,
                 context.primary, height=0.38, first_left=2)

    tops = row_positions(len(GLOSSARY), 1.42, GLOSSARY_ROW_H, 4.7)
    for idx, ((term, description), top) in enumerate(zip(GLOSSARY, tops)):
        if idx % 2 == 0:
            document.add_shape(ShapeKind.RECTANGLE,
                               Position(design.margin + 0.05, top, width - 0.1, GLOSSARY_ROW_H),
                               fill=design.light_gray)
        text(document, context, term, design.margin + 0.1, top, widths[0] - 0.2,
             GLOSSARY_ROW_H, size=8, bold=True, color=context.primary, valign="middle")
        text(document, context, description, design.margin + widths[0] + 0.1, top,
             widths[1] - 0.2, GLOSSARY_ROW_H, size=8, color=design.dark_gray,
             valign="middle")

    footer(document, context, page)
    return document

"""Slide module catalog.

``REGISTRY`` lists every slide module the composer can run. Which of them
end up in a report, and in which order, is decided by ``build_slide_list``
from the enabled platforms and per-request overrides.
"""

from ..schema.models import Category, Platform
from .ads import render_ads_campaign_cards, render_ads_campaigns, render_ads_ppas
from .base import PageCounter, RenderContext, SlideModule
from .contact import render_contact
from .cover import render_cover
from .divider import render_ads_divider, render_fb_divider, render_ig_divider
from .executive_summary import render_executive_summary
from .followers import render_fb_followers
from .kpi_tables import render_fb_kpis, render_ig_kpis
from .reach_chart import render_fb_reach_chart, render_ig_reach_chart
from .summary import render_glossary, render_summary
from .top_posts import render_fb_top_posts, render_ig_top_posts
from .videos import render_fb_videos, render_ig_reels

FB, IG, ADS, GENERAL = Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS, Platform.GENERAL

REGISTRY: tuple[SlideModule, ...] = (
    SlideModule("cover", "Titelfolie", GENERAL, Category.COVER, 0, render_cover,
                description="Kundenlogo, Berichtstitel und Monat"),
    SlideModule("executive_summary", "Executive Summary", GENERAL, Category.SUMMARY, 1,
                render_executive_summary,
                description="Plattformübergreifende Kennzahlen mit Trends und Fazit"),
    SlideModule("fb_divider", "FB Trennfolie", FB, Category.DIVIDER, 10, render_fb_divider),
    SlideModule("fb_kpis", "FB Kennzahlen", FB, Category.KPI, 11, render_fb_kpis,
                description="Facebook 3-Monats-Vergleich"),
    SlideModule("fb_top_posts", "FB Top Posts", FB, Category.CONTENT, 12,
                render_fb_top_posts,
                description="Top 3 Facebook-Beiträge nach Interaktionen mit Bildern"),
    SlideModule("fb_videos", "FB Videos", FB, Category.CONTENT, 13, render_fb_videos,
                description="Facebook Videos nach 3-Sekunden-Views"),
    SlideModule("fb_reach_chart", "FB Reichweite", FB, Category.CONTENT, 14,
                render_fb_reach_chart),
    SlideModule("fb_followers", "FB Fans", FB, Category.KPI, 16, render_fb_followers,
                description="Aktuelle Fans und Entwicklung"),
    SlideModule("ig_divider", "IG Trennfolie", IG, Category.DIVIDER, 30, render_ig_divider),
    SlideModule("ig_kpis", "IG Kennzahlen", IG, Category.KPI, 31, render_ig_kpis,
                description="Instagram 3-Monats-Vergleich"),
    SlideModule("ig_top_posts", "IG Top Posts", IG, Category.CONTENT, 32,
                render_ig_top_posts),
    SlideModule("ig_reels", "IG Reels", IG, Category.CONTENT, 33, render_ig_reels,
                description="Instagram Reels & Videos Tabelle"),
    SlideModule("ig_reach_chart", "IG Reichweite", IG, Category.CONTENT, 34,
                render_ig_reach_chart),
    SlideModule("ads_divider", "Ads Trennfolie", ADS, Category.DIVIDER, 39,
                render_ads_divider),
    SlideModule("ads_campaigns", "Ads Kampagnen", ADS, Category.ADS, 40,
                render_ads_campaigns,
                description="Paid Ads Kampagnenübersicht mit Budget, Reichweite, CPC/CPM/CTR"),
    SlideModule("ads_ppas", "PPAs", ADS, Category.ADS, 41, render_ads_ppas,
                description="Beitragsbewerbungen mit 3-Monats-Vergleich und Kampagnenliste"),
    SlideModule("ads_campaign_cards", "Einzelkampagnen", ADS, Category.ADS, 42,
                render_ads_campaign_cards),
    SlideModule("summary", "Zusammenfassung", GENERAL, Category.SUMMARY, 90, render_summary),
    SlideModule("glossary", "Glossar", GENERAL, Category.SUMMARY, 91, render_glossary,
                default_enabled=False, description="KPI-Definitionen"),
    SlideModule("contact", "Kontakt", GENERAL, Category.CONTACT, 99, render_contact),
)


def _is_enabled(module: SlideModule, overrides: dict[str, bool]) -> bool:
    if module.category == Category.COVER:
        return True
    return overrides.get(module.id, module.default_enabled)


def build_slide_list(platforms, overrides: dict[str, bool] | None = None,
                     registry=REGISTRY) -> list[SlideModule]:
    """Modules to run for a report, in page order.

    Args:
        platforms: Enabled platforms; ``general`` modules are always eligible.
        overrides: Module id -> enabled flag, applied over ``default_enabled``.
            Cover modules ignore overrides; every report opens with its cover.
        registry: Module catalog to select from.

    The sort is stable, so modules sharing an order keep catalog order.
    """
    enabled = set(platforms) | {Platform.GENERAL}
    overrides = overrides or {}
    selected = [
        m for m in registry
        if m.platform in enabled and _is_enabled(m, overrides)
    ]
    return sorted(selected, key=lambda m: m.order)


def get_module(module_id: str, registry=REGISTRY) -> SlideModule:
    for module in registry:
        if module.id == module_id:
            return module
    raise KeyError(module_id)


__all__ = [
    "REGISTRY",
    "PageCounter",
    "RenderContext",
    "SlideModule",
    "build_slide_list",
    "get_module",
]

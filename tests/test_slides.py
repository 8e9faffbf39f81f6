"""Tests for the slide modules, rendered into a RecordingDocument."""

from datetime import datetime

import pytest

from conftest import InMemoryAds, InMemoryStore, make_post
from social_report.generator.document import RecordingDocument
from social_report.schema.models import AdsMonthlySummary, CampaignSummary, MonthlyKPI, Platform
from social_report.slides.ads import (
    NO_CAMPAIGNS_TEXT,
    campaign_row,
    ppa_rows,
    render_ads_campaign_cards,
    render_ads_campaigns,
    render_ads_ppas,
)
from social_report.slides.contact import render_contact
from social_report.slides.cover import render_cover
from social_report.slides.divider import render_ads_divider, render_fb_divider, render_ig_divider
from social_report.slides.executive_summary import render_executive_summary
from social_report.slides.followers import growth_text, render_fb_followers
from social_report.slides.helpers import NO_DATA_TEXT, kpi_rows
from social_report.slides.kpi_tables import render_fb_kpis, render_ig_kpis
from social_report.slides.reach_chart import FOOTNOTE, render_fb_reach_chart, top_by_reach
from social_report.slides.summary import (
    GLOSSARY,
    reach_change,
    render_glossary,
    render_summary,
)
from social_report.slides.top_posts import render_fb_top_posts, render_ig_top_posts, top_posts
from social_report.slides.videos import render_fb_videos, render_ig_reels

FB, IG, ADS = Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS


def render(module, context):
    doc = RecordingDocument(context.settings)
    result = module(doc, context)
    assert result is doc
    return doc


def footer_page(doc, index=0):
    """The zero-padded page number printed bottom right, if any."""
    for call in doc.calls(index, "text"):
        if call["box"]["left"] >= 8.5 and call["box"]["top"] >= 4.9:
            return call["text"]
    return None


@pytest.fixture
def empty_context(make_context):
    return lambda platforms=(FB, IG, ADS): make_context(
        platforms, metrics=InMemoryStore(), ads=InMemoryAds())


# ---------------------------------------------------------------------------
# Cover, dividers, contact
# ---------------------------------------------------------------------------

class TestCover:
    def test_name_instead_of_missing_logo(self, make_context):
        doc = render(render_cover, make_context())
        texts = doc.texts(0)
        assert "Müller & Söhne" in texts
        assert "Social Media Reporting" in texts
        assert "März 2024" in texts
        assert doc.calls(0, "image") == []
        assert footer_page(doc) is None

    def test_logo_image(self, make_context):
        context = make_context()
        context.customer.logo_url = "https://cdn.example.com/logo.png"
        doc = render(render_cover, context)
        assert len(doc.calls(0, "image")) == 1
        assert "Müller & Söhne" not in doc.texts(0)

    def test_consumes_page_number(self, make_context):
        context = make_context()
        render(render_cover, context)
        assert context.pages.issued == 1


class TestDividers:
    @pytest.mark.parametrize("module,title,color_attr", [
        (render_fb_divider, "Facebook", "primary"),
        (render_ig_divider, "Instagram", "secondary"),
        (render_ads_divider, "Paid Ads", "primary"),
    ])
    def test_section(self, make_context, module, title, color_attr):
        context = make_context()
        doc = render(module, context)
        assert doc.slide_count == 1
        assert title in doc.texts(0)
        assert "März" in doc.texts(0)
        assert doc.calls(0, "shape")[0]["fill"] == getattr(context, color_attr)


class TestContact:
    def test_black_background_and_contact(self, make_context):
        context = make_context()
        doc = render(render_contact, context)
        assert doc.slides[0]["background"] == context.design.black
        texts = " ".join(doc.texts(0))
        assert context.settings.contact.name in texts
        assert context.settings.contact.email in texts
        assert context.settings.tagline in texts


# ---------------------------------------------------------------------------
# Executive summary and KPI tables
# ---------------------------------------------------------------------------

class TestExecutiveSummary:
    def test_totals_and_trends(self, make_context):
        doc = render(render_executive_summary, make_context())
        texts = doc.texts(0)
        assert "5" in texts                 # 3 FB + 2 IG posts
        assert "27.500" in texts            # 7.500 + 20.000 reach
        assert "1.092" in texts             # 192 + 900 interactions
        assert "+400,0%" in texts
        assert footer_page(doc) == "01"

    def test_verdict_both_platforms(self, make_context):
        texts = " ".join(render(render_executive_summary, make_context()).texts(0))
        assert "positive Performance auf beiden Plattformen" in texts

    def test_verdict_single_platform(self, make_context):
        texts = " ".join(render(render_executive_summary, make_context((IG,))).texts(0))
        assert "auf Instagram" in texts
        assert "Facebook" not in texts

    def test_no_social_platforms(self, make_context):
        doc = render(render_executive_summary, make_context((ADS,)))
        assert NO_DATA_TEXT in doc.texts(0)
        assert "stabile Performance in allen Kanälen" in " ".join(doc.texts(0))

    def test_empty_data_uses_dash(self, empty_context):
        texts = render(render_executive_summary, empty_context()).texts(0)
        assert texts.count("–") == 3


class TestKpiTables:
    def test_facebook_rows(self, make_context):
        doc = render(render_fb_kpis, make_context())
        texts = doc.texts(0)
        assert "Facebook Kennzahlen" in texts
        assert texts.index("März") < texts.index("Februar") < texts.index("Januar")
        assert "Shares (limited)" in texts
        assert "7.500" in texts
        assert "2,56%" in texts
        assert "1.100" in texts
        assert any("eingeschränkt" in t for t in texts)

    def test_instagram_saves_row(self, make_context):
        context = make_context()
        texts = render(render_ig_kpis, context).texts(0)
        assert "Saves" in texts
        assert "55" in texts
        assert "4,50%" in texts
        assert not any("eingeschränkt" in t for t in texts)

    def test_footer_in_platform_colour(self, make_context):
        context = make_context()
        doc = render(render_ig_kpis, context)
        hexagons = [c for c in doc.calls(0, "shape") if c["kind"] == "hexagon"]
        assert hexagons[0]["fill"] == context.secondary

    def test_rows_newest_first(self):
        kpis = [MonthlyKPI("2024-01", posts_count=1), MonthlyKPI("2024-02", posts_count=2),
                MonthlyKPI("2024-03", posts_count=3)]
        rows = dict(kpi_rows(FB, kpis))
        assert rows["Beiträge"] == ["3", "2", "1"]
        assert len(rows) == 8

    def test_zero_data_table(self, empty_context):
        texts = render(render_fb_kpis, empty_context()).texts(0)
        assert "0,00%" in texts


# ---------------------------------------------------------------------------
# Content slides
# ---------------------------------------------------------------------------

class TestTopPosts:
    def test_ranking_excludes_videos(self, march_posts):
        ranked = top_posts(march_posts[(FB, "2024-03")])
        assert [p.post_id for p in ranked] == ["fb-a", "fb-b"]

    def test_limit(self):
        posts = [make_post(f"p{i}", reactions=i) for i in range(6)]
        assert [p.post_id for p in top_posts(posts)] == ["p5", "p4", "p3"]

    def test_tiles(self, make_context):
        doc = render(render_fb_top_posts, make_context())
        texts = doc.texts(0)
        assert len(doc.calls(0, "image")) == 1
        assert "Kein Bild" in texts
        assert "05.03." in texts
        assert "112" in texts               # 100 + 10 + 2 saves
        assert "2,8%" in texts
        assert {"1", "2"} <= set(texts)

    def test_instagram_without_images(self, make_context):
        doc = render(render_ig_top_posts, make_context())
        assert doc.calls(0, "image") == []
        assert doc.texts(0).count("Kein Bild") == 1

    def test_placeholder(self, empty_context):
        doc = render(render_fb_top_posts, empty_context())
        assert NO_DATA_TEXT in doc.texts(0)
        assert footer_page(doc) == "01"


class TestVideos:
    def test_facebook_video_row(self, make_context):
        texts = render(render_fb_videos, make_context()).texts(0)
        assert "3s Views" in texts
        assert "Behind the scenes" in texts
        assert "900" in texts
        assert "20.03." in texts

    def test_facebook_interactions_exclude_shares_and_saves(self, make_context):
        video = make_post("fb-x", post_type="video", reactions=30, comments=3,
                          shares=7, saves=50, reach=1500, video_views=900,
                          message="Messe-Rundgang")
        store = InMemoryStore({(FB, "2024-03"): [video]})
        texts = render(render_fb_videos, make_context((FB,), metrics=store)).texts(0)
        assert "33" in texts
        assert "90" not in texts

    def test_instagram_reel_row(self, make_context):
        texts = render(render_ig_reels, make_context()).texts(0)
        assert "Reel" in texts             # caption fallback
        assert "12.000" in texts
        assert "40" in texts

    def test_sorted_and_capped(self, make_context):
        posts = [make_post(f"v{i}", post_type="video", video_views=i * 10,
                           created=datetime(2024, 3, i + 1), message=f"Video {i}")
                 for i in range(12)]
        store = InMemoryStore({(FB, "2024-03"): posts})
        texts = render(render_fb_videos, make_context((FB,), metrics=store)).texts(0)
        assert "Video 11" in texts
        assert "Video 3" not in texts
        assert texts.index("Video 11") < texts.index("Video 10")

    def test_placeholders(self, empty_context):
        context = empty_context()
        assert "Keine Videos für diesen Zeitraum verfügbar" in \
            render(render_fb_videos, context).texts(0)
        assert "Keine Reels für diesen Zeitraum verfügbar" in \
            render(render_ig_reels, context).texts(0)


class TestReachChart:
    def test_top_by_reach(self, march_posts):
        ranked = top_by_reach(march_posts[(FB, "2024-03")])
        assert [p.post_id for p in ranked] == ["fb-a", "fb-b", "fb-v"]

    def test_bars_scaled_to_peak(self, make_context):
        context = make_context()
        doc = render(render_fb_reach_chart, context)
        bars = [c for c in doc.calls(0, "shape")
                if c["fill"] == context.primary and c["box"]["width"] == 1.0]
        assert [round(b["box"]["height"], 2) for b in bars] == [3.2, 1.6, 1.2]
        assert len(doc.calls(0, "image")) == 1
        assert FOOTNOTE in doc.texts(0)
        assert "4.000" in doc.texts(0)

    def test_no_thumbnail_in_short_bar(self, make_context):
        posts = [
            make_post("big", reach=10000),
            make_post("small", reach=100, thumbnail_url="https://cdn.example.com/s.jpg"),
        ]
        store = InMemoryStore({(FB, "2024-03"): posts})
        doc = render(render_fb_reach_chart, make_context((FB,), metrics=store))
        assert doc.calls(0, "image") == []

    def test_placeholder(self, empty_context):
        assert NO_DATA_TEXT in render(render_fb_reach_chart, empty_context()).texts(0)


class TestFollowers:
    def test_growth_text(self):
        assert growth_text(100) == "+100 neue Fans im Berichtsmonat"
        assert growth_text(-1200) == "-1.200 neue Fans im Berichtsmonat"

    def test_chart_and_counts(self, make_context):
        doc = render(render_fb_followers, make_context())
        texts = doc.texts(0)
        assert "1.100" in texts
        assert "+100 neue Fans im Berichtsmonat" in texts
        chart = doc.calls(0, "chart")[0]
        assert chart["categories"] == ["Januar", "Februar", "März"]
        assert chart["series"][0]["values"] == [950, 1000, 1100]

    def test_no_followers(self, empty_context):
        doc = render(render_fb_followers, empty_context())
        assert doc.calls(0, "chart") == []
        assert NO_DATA_TEXT in doc.texts(0)


# ---------------------------------------------------------------------------
# Paid ads
# ---------------------------------------------------------------------------

class TestAdsCampaigns:
    def test_overview(self, make_context):
        context = make_context()
        doc = render(render_ads_campaigns, context)
        texts = doc.texts(0)
        assert "370,50 €" in texts
        assert "FB_Frühlingsaktion" in texts
        assert "Ø CPC: " in texts
        budget_cells = [c for c in doc.calls(0, "text") if c["text"] == "120,00 €"]
        assert budget_cells[0]["font"]["color"] == context.secondary

    def test_campaign_row(self):
        row = campaign_row(CampaignSummary("c", "X" * 60, spend=1234.5, reach=2000))
        assert row[0] == "X" * 40 + "..."
        assert row[1] == "1.234,50 €"

    def test_no_campaigns(self, empty_context):
        texts = render(render_ads_campaigns, empty_context()).texts(0)
        assert NO_CAMPAIGNS_TEXT in texts
        assert "0,00 €" in texts


class TestAdsPPAs:
    def test_rows_cover_three_months(self, ads_summaries):
        summaries = [AdsMonthlySummary.empty("2024-01"), ads_summaries["2024-02"],
                     ads_summaries["2024-03"]]
        rows = dict(ppa_rows(summaries))
        assert rows["CPM"] == ["–", "9,00 €", "6,74 €"]
        assert rows["Budget"] == ["0,00 €", "90,00 €", "370,50 €"]
        assert len(rows) == 8

    def test_facebook_campaigns_only(self, make_context):
        texts = render(render_ads_ppas, make_context()).texts(0)
        assert {"Kennzahl", "Januar", "Februar", "März"} <= set(texts)
        assert "250,50 €" in texts
        assert "370,50 €" not in texts
        assert "• FB_Frühlingsaktion" in texts
        assert "• IG_Reels Push" not in texts

    def test_campaign_list_stays_above_footer(self, make_context):
        campaigns = [CampaignSummary(f"c{i}", f"FB_Kampagne {i}", spend=100 - i)
                     for i in range(6)]
        ads = InMemoryAds({"2024-03": AdsMonthlySummary("2024-03", campaigns)})
        doc = render(render_ads_ppas, make_context(ads=ads))
        bullets = [c for c in doc.calls(0, "text") if c["text"].startswith("• ")]
        assert bullets[0]["text"] == "• FB_Kampagne 0"
        assert 0 < len(bullets) < 6
        for call in bullets:
            assert call["box"]["top"] + call["box"]["height"] <= 4.85

    def test_no_campaigns_notice_above_footer(self, make_context):
        ads = InMemoryAds({"2024-03": AdsMonthlySummary("2024-03", [
            CampaignSummary("c2", "IG_Only", spend=10.0)])})
        doc = render(render_ads_ppas, make_context(ads=ads))
        notice = [c for c in doc.calls(0, "text") if c["text"] == NO_CAMPAIGNS_TEXT]
        assert len(notice) == 1
        assert notice[0]["box"]["top"] < 4.8


class TestCampaignCards:
    def test_cards(self, make_context):
        doc = render(render_ads_campaign_cards, make_context())
        texts = doc.texts(0)
        assert "Frühlingsaktion" in texts
        assert "Einzelkampagnen" in texts

    def test_skipped_without_facebook_campaigns(self, make_context):
        ads = InMemoryAds({"2024-03": AdsMonthlySummary("2024-03", [
            CampaignSummary("c2", "IG_Only", spend=10.0)])})
        context = make_context(ads=ads)
        doc = render(render_ads_campaign_cards, context)
        assert doc.slide_count == 0
        assert context.pages.issued == 0

    def test_grid_drops_overflow(self, make_context):
        campaigns = [CampaignSummary(f"c{i}", f"FB_Kampagne {i}", spend=100 - i)
                     for i in range(8)]
        ads = InMemoryAds({"2024-03": AdsMonthlySummary("2024-03", campaigns)})
        texts = render(render_ads_campaign_cards, make_context(ads=ads)).texts(0)
        assert "Kampagne 3" in texts
        assert "Kampagne 4" not in texts


# ---------------------------------------------------------------------------
# Summary and glossary
# ---------------------------------------------------------------------------

class TestSummary:
    def test_reach_change(self):
        assert reach_change(MonthlyKPI("m", reach=150), MonthlyKPI("m", reach=100)) == "+50%"
        assert reach_change(MonthlyKPI("m", reach=50), MonthlyKPI("m", reach=100)) == "-50%"
        assert reach_change(MonthlyKPI("m", reach=50), MonthlyKPI("m")) == "+0%"

    def test_platform_cards_and_ads(self, make_context):
        doc = render(render_summary, make_context(notes="Kampagne verlängert"))
        texts = doc.texts(0)
        assert "Facebook & Instagram" in texts
        assert any(t.startswith("• Reichweite: 7.500 (+150%)") for t in texts)
        assert any(t.startswith("• Reichweite: 20.000 (+0%)") for t in texts)
        assert any(t.startswith("Gesamtbudget: 370,50 €") for t in texts)
        assert "Facebook: 250,50 € Budget | 20.000 Reichweite" in texts
        assert "Kampagne verlängert" in texts
        notes = [c for c in doc.calls(0, "text") if c["text"] == "Anmerkungen:"]
        assert notes[0]["box"]["top"] == 4.45

    def test_without_ads(self, make_context):
        doc = render(render_summary, make_context((FB,), notes="Hinweis"))
        texts = doc.texts(0)
        assert "Facebook" in texts
        assert not any(t.startswith("Gesamtbudget") for t in texts)
        notes = [c for c in doc.calls(0, "text") if c["text"] == "Anmerkungen:"]
        assert notes[0]["box"]["top"] == 3.1

    def test_ads_only_subtitle(self, make_context):
        assert "Paid Ads" in render(render_summary, make_context((ADS,))).texts(0)


class TestGlossary:
    def test_rows_that_fit(self, make_context):
        texts = render(render_glossary, make_context()).texts(0)
        assert "Begriff" in texts
        assert "PPA" in texts
        assert "Bezahlte Reichweite" not in texts
        assert len(GLOSSARY) == 13

"""Shared fixtures: customers, in-memory metrics collaborators, images."""

import io
from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from PIL import Image

from social_report.errors import CustomerNotFound
from social_report.generator.assets import AssetCache
from social_report.processor.aggregator import KPIAggregator
from social_report.processor.periods import ReportPeriod
from social_report.schema.models import (
    AdsMonthlySummary,
    BrandColors,
    CampaignSummary,
    Customer,
    Platform,
    PostRecord,
    ReportRequest,
    ReportSettings,
)
from social_report.slides.base import PageCounter, RenderContext


def make_png(width: int = 64, height: int = 64) -> bytes:
    """A noisy PNG, large enough to pass the minimum asset size."""
    img = Image.effect_noise((width, height), 64).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def make_post(post_id, platform=Platform.FACEBOOK, created=datetime(2024, 3, 5, 12),
              **metrics) -> PostRecord:
    return PostRecord(post_id=str(post_id), platform=platform, created_time=created,
                      **metrics)


class InMemoryDirectory:
    def __init__(self, *customers):
        self.customers = {c.customer_id: c for c in customers}

    def get_customer(self, customer_id):
        try:
            return self.customers[customer_id]
        except KeyError:
            raise CustomerNotFound(customer_id) from None


class InMemoryStore:
    """Posts keyed by (platform, month key); followers keyed by (platform, date)."""

    def __init__(self, posts=None, followers=None, failing_months=()):
        self.posts = posts or {}
        self.followers = followers or {}
        self.failing_months = set(failing_months)
        self.post_queries = []

    def query_posts(self, platform, account_ids, month):
        self.post_queries.append((platform, month.key))
        if (platform, month.key) in self.failing_months:
            raise RuntimeError("database unavailable")
        return list(self.posts.get((platform, month.key), []))

    def query_follower_snapshot(self, platform, account_ids, at_or_before: date):
        return self.followers.get((platform, at_or_before.strftime("%Y-%m")), 0)


class InMemoryAds:
    def __init__(self, summaries=None):
        self.summaries = summaries or {}

    def query_ads_summary(self, account_ids, month):
        return self.summaries.get(month.key, AdsMonthlySummary.empty(month.key))


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def settings():
    return ReportSettings()


@pytest.fixture
def customer():
    return Customer(
        customer_id="42",
        name="Müller & Söhne",
        brand_colors=BrandColors("#0EA5E9", "#F97316"),
        logo_url=None,
        accounts={
            Platform.FACEBOOK: ["fb-1"],
            Platform.INSTAGRAM: ["ig-1"],
            Platform.ADS: ["act-1"],
        },
    )


@pytest.fixture
def march_posts():
    return {
        (Platform.FACEBOOK, "2024-03"): [
            make_post("fb-a", reactions=100, comments=10, shares=5, saves=2,
                      reach=4000, impressions=6000,
                      thumbnail_url="https://cdn.example.com/a.jpg"),
            make_post("fb-b", created=datetime(2024, 3, 9), reactions=40, comments=4,
                      reach=2000, impressions=2500),
            make_post("fb-v", created=datetime(2024, 3, 20), post_type="video",
                      reactions=30, comments=3, reach=1500, video_views=900,
                      message="Behind the scenes"),
        ],
        (Platform.FACEBOOK, "2024-02"): [
            make_post("fb-old", created=datetime(2024, 2, 14), reactions=50,
                      comments=5, reach=3000, impressions=3500),
        ],
        (Platform.INSTAGRAM, "2024-03"): [
            make_post("ig-a", Platform.INSTAGRAM, reactions=300, comments=20, saves=15,
                      reach=8000, impressions=9000),
            make_post("ig-r", Platform.INSTAGRAM, created=datetime(2024, 3, 11),
                      post_type="reel", reactions=500, comments=25, saves=40,
                      reach=12000, video_views=20000),
        ],
    }


@pytest.fixture
def followers():
    return {
        (Platform.FACEBOOK, "2023-12"): 900,
        (Platform.FACEBOOK, "2024-01"): 950,
        (Platform.FACEBOOK, "2024-02"): 1000,
        (Platform.FACEBOOK, "2024-03"): 1100,
        (Platform.INSTAGRAM, "2024-02"): 5000,
        (Platform.INSTAGRAM, "2024-03"): 5200,
    }


@pytest.fixture
def ads_summaries():
    return {
        "2024-03": AdsMonthlySummary("2024-03", [
            CampaignSummary("c1", "FB_Frühlingsaktion", spend=250.5, impressions=40000,
                            clicks=800, reach=20000, engagement=1200, video_views=300,
                            link_clicks=600),
            CampaignSummary("c2", "IG_Reels Push", spend=120.0, impressions=15000,
                            clicks=200, reach=9000, engagement=500),
        ]),
        "2024-02": AdsMonthlySummary("2024-02", [
            CampaignSummary("c3", "FB_Winter", spend=90.0, impressions=10000,
                            clicks=150, reach=7000, engagement=400),
        ]),
    }


@pytest.fixture
def store(march_posts, followers):
    return InMemoryStore(march_posts, followers)


@pytest.fixture
def ads_source(ads_summaries):
    return InMemoryAds(ads_summaries)


@pytest.fixture
def image_session(png_bytes):
    """A requests.Session double that serves the test PNG for every URL."""
    session = MagicMock()
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.headers = {"content-type": "image/png"}
    response.content = png_bytes
    session.get.return_value = response
    return session


@pytest.fixture
def make_context(customer, store, ads_source, settings, image_session):
    """Factory for a RenderContext over the shared March 2024 data."""

    def build(platforms=(Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS),
              notes="", metrics=None, ads=None, month="2024-03"):
        request = ReportRequest(customer.customer_id, month, tuple(platforms), notes=notes)
        period = ReportPeriod.from_month(month)
        aggregator = KPIAggregator(metrics or store, ads or ads_source)
        data = aggregator.aggregate(customer, period, platforms)
        return RenderContext(
            customer=customer,
            request=request,
            period=period,
            data=data,
            colors=customer.brand_colors,
            settings=settings,
            assets=AssetCache(session=image_session, min_bytes=100),
            platforms=frozenset(platforms) | {Platform.GENERAL},
            pages=PageCounter(),
        )

    return build

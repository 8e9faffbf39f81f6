"""Tests for the three-month KPI aggregation."""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from conftest import InMemoryStore, make_post

from social_report.processor.aggregator import KPIAggregator, build_kpi_row
from social_report.processor.periods import ReportPeriod
from social_report.schema.models import Platform


@pytest.fixture
def period():
    return ReportPeriod.from_month("2024-03")


ALL = [Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS]


class TestBuildKpiRow:
    def test_zero_posts(self):
        row = build_kpi_row(Platform.FACEBOOK, "2024-03", [])
        assert row.posts_count == 0
        assert row.reach == 0
        assert row.avg_reach_per_post == 0
        assert row.engagement_rate == 0.0

    def test_facebook_sums_shares(self):
        posts = [make_post("a", reactions=10, comments=2, shares=3, saves=7, reach=100),
                 make_post("b", reactions=5, comments=1, shares=1, reach=100)]
        row = build_kpi_row(Platform.FACEBOOK, "2024-03", posts)
        assert row.posts_count == 2
        assert row.shares_or_saves == 4
        assert row.interactions == 15 + 3 + 4
        assert row.avg_reach_per_post == 100
        assert row.engagement_rate == pytest.approx(22 / 200 * 100)

    def test_instagram_sums_saves(self):
        posts = [make_post("a", Platform.INSTAGRAM, reactions=10, shares=3, saves=7,
                           reach=50)]
        row = build_kpi_row(Platform.INSTAGRAM, "2024-03", posts)
        assert row.shares_or_saves == 7

    def test_duplicate_post_ids_counted_once(self):
        posts = [make_post("a", reactions=10, reach=100),
                 make_post("a", reactions=12, reach=120)]
        row = build_kpi_row(Platform.FACEBOOK, "2024-03", posts)
        assert row.posts_count == 1
        assert row.reach == 120

    def test_zero_reach_has_zero_engagement(self):
        row = build_kpi_row(Platform.FACEBOOK, "2024-03",
                            [make_post("a", reactions=10, reach=0)])
        assert row.engagement_rate == 0.0


class TestAggregate:
    def test_three_rows_oldest_first(self, customer, store, ads_source, period):
        data = KPIAggregator(store, ads_source).aggregate(customer, period, ALL)
        months = [k.month for k in data.kpis[Platform.FACEBOOK]]
        assert months == ["2024-01", "2024-02", "2024-03"]
        assert [s.month for s in data.ads] == months

    def test_posts_only_for_target_month(self, customer, store, period):
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        ids = [p.post_id for p in data.posts_for(Platform.FACEBOOK)]
        assert ids == ["fb-a", "fb-b", "fb-v"]

    def test_follower_deltas(self, customer, store, period):
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        fb = data.kpis_for(Platform.FACEBOOK)
        assert [k.followers for k in fb] == [950, 1000, 1100]
        assert [k.new_followers for k in fb] == [50, 50, 100]

    def test_oldest_month_without_baseline(self, customer, store, period):
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        ig = data.kpis_for(Platform.INSTAGRAM)
        assert ig[0].followers == 0
        assert ig[0].new_followers == 0
        assert ig[1].new_followers == 5000
        assert ig[2].new_followers == 200

    def test_disabled_platform_not_queried(self, customer, store, period):
        data = KPIAggregator(store).aggregate(customer, period, [Platform.FACEBOOK])
        assert Platform.INSTAGRAM not in data.kpis
        assert all(p == Platform.FACEBOOK for p, _ in store.post_queries)
        assert all(s.spend == 0 for s in data.ads)

    def test_failing_month_becomes_zero_row(self, customer, march_posts, followers,
                                            period, caplog):
        store = InMemoryStore(march_posts, followers,
                              failing_months={(Platform.FACEBOOK, "2024-02")})
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        feb = data.kpis_for(Platform.FACEBOOK)[1]
        assert feb.posts_count == 0
        assert feb.reach == 0
        assert feb.new_followers == 0
        assert data.kpis_for(Platform.FACEBOOK)[2].posts_count == 3
        assert "Posts unavailable" in caplog.text

    def test_customer_without_accounts(self, customer, store, period):
        customer.accounts = {}
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        assert [k.posts_count for k in data.kpis_for(Platform.FACEBOOK)] == [0, 0, 0]
        assert store.post_queries == []

    def test_as_of_cuts_off_later_posts(self, customer, store, period):
        aggregator = KPIAggregator(store, as_of=datetime(2024, 3, 10))
        data = aggregator.aggregate(customer, period, ALL)
        ids = [p.post_id for p in data.posts_for(Platform.FACEBOOK)]
        assert ids == ["fb-a", "fb-b"]

    def test_posts_outside_month_dropped(self, customer, period):
        stray = make_post("stray", created=datetime(2024, 4, 1))
        store = InMemoryStore({(Platform.FACEBOOK, "2024-03"): [stray]})
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        assert data.kpis_for(Platform.FACEBOOK)[2].posts_count == 0

    def test_failing_ads_source(self, customer, store, period):
        ads = MagicMock()
        ads.query_ads_summary.side_effect = RuntimeError("boom")
        data = KPIAggregator(store, ads).aggregate(customer, period, ALL)
        assert [s.spend for s in data.ads] == [0, 0, 0]

    def test_engagement_rate_bounds(self, customer, store, period):
        data = KPIAggregator(store).aggregate(customer, period, ALL)
        for platform in (Platform.FACEBOOK, Platform.INSTAGRAM):
            for row in data.kpis_for(platform):
                assert row.engagement_rate >= 0
                if row.reach == 0:
                    assert row.engagement_rate == 0

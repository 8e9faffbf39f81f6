"""KPI aggregation: three months of per-platform metrics for one customer.

The ``KPIAggregator`` pulls posts, follower snapshots and ad campaigns from
the metrics collaborators and reduces them to ``MonthlyKPI`` rows, oldest
month first. A failing query never aborts a report: the affected month
becomes a zero-filled row and a warning is logged.

Usage::

    aggregator = KPIAggregator(store, ads_source)
    data = aggregator.aggregate(customer, ReportPeriod.from_month("2024-03"),
                                [Platform.FACEBOOK, Platform.INSTAGRAM])
    data.kpis[Platform.FACEBOOK]      # [Jan, Feb, Mar]
    data.posts[Platform.FACEBOOK]     # March posts only
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

import pandas as pd

from ..errors import DataUnavailable
from ..schema.models import (
    SOCIAL_PLATFORMS,
    AdsMonthlySummary,
    Customer,
    MonthlyKPI,
    MonthRange,
    Platform,
    PostRecord,
)
from .periods import ReportPeriod
from .sources import AdsDataSource, MetricsStore

logger = logging.getLogger(__name__)

METRIC_COLUMNS = [
    "reactions", "comments", "shares", "saves",
    "reach", "impressions", "video_views",
]


# ---------------------------------------------------------------------------
# Result container
# ---------------------------------------------------------------------------

@dataclass
class AggregatedData:
    """Everything the slide modules read, keyed by platform."""
    kpis: dict[Platform, list[MonthlyKPI]] = field(default_factory=dict)
    posts: dict[Platform, list[PostRecord]] = field(default_factory=dict)
    ads: list[AdsMonthlySummary] = field(default_factory=list)

    def kpis_for(self, platform: Platform) -> list[MonthlyKPI]:
        return self.kpis.get(platform, [])

    def posts_for(self, platform: Platform) -> list[PostRecord]:
        return self.posts.get(platform, [])


# ---------------------------------------------------------------------------
# Pure reduction
# ---------------------------------------------------------------------------

def posts_frame(posts: list[PostRecord]) -> pd.DataFrame:
    """One row per post with the summable metric columns."""
    rows = [
        {"post_id": p.post_id, **{c: getattr(p, c) or 0 for c in METRIC_COLUMNS}}
        for p in posts
    ]
    df = pd.DataFrame(rows, columns=["post_id"] + METRIC_COLUMNS)
    df[METRIC_COLUMNS] = df[METRIC_COLUMNS].fillna(0)
    return df


def build_kpi_row(platform: Platform, month: str,
                  posts: list[PostRecord]) -> MonthlyKPI:
    """Reduce one month of posts to a KPI row (followers are filled in later).

    ``shares_or_saves`` holds shares for Facebook and saves for Instagram.
    """
    df = posts_frame(posts).drop_duplicates(subset="post_id", keep="last")
    totals = df[METRIC_COLUMNS].sum()
    posts_count = int(len(df))
    reach = int(totals["reach"])
    reactions = int(totals["reactions"])
    comments = int(totals["comments"])
    shared = int(totals["saves"] if platform == Platform.INSTAGRAM
                 else totals["shares"])

    return MonthlyKPI(
        month=month,
        posts_count=posts_count,
        reactions=reactions,
        comments=comments,
        shares_or_saves=shared,
        reach=reach,
        impressions=int(totals["impressions"]),
        video_views=int(totals["video_views"]),
        avg_reach_per_post=round(reach / posts_count) if posts_count else 0,
        engagement_rate=((reactions + comments + shared) / reach * 100
                         if reach > 0 else 0.0),
    )


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class KPIAggregator:
    """Computes the 3-month rolling KPI window from the metrics collaborators.

    Args:
        store: Post and follower metrics.
        ads_source: Ad campaign totals, or None when ads are not available.
        as_of: Posts created after this moment are ignored, so a report
            for the running month only covers what was published so far.
    """

    def __init__(self, store: MetricsStore, ads_source: AdsDataSource | None = None,
                 as_of: datetime | None = None):
        self.store = store
        self.ads_source = ads_source
        self.as_of = as_of

    def aggregate(self, customer: Customer, period: ReportPeriod,
                  platforms) -> AggregatedData:
        platforms = set(platforms)
        data = AggregatedData()

        for platform in SOCIAL_PLATFORMS:
            if platform not in platforms:
                continue
            kpis, posts = self._platform_window(customer, platform, period)
            data.kpis[platform] = kpis
            data.posts[platform] = posts

        if Platform.ADS in platforms:
            data.ads = self._ads_window(customer, period)
        else:
            data.ads = [AdsMonthlySummary.empty(k) for k in period.keys]
        return data

    # -- social ------------------------------------------------------------

    def _platform_window(self, customer: Customer, platform: Platform,
                         period: ReportPeriod):
        account_ids = customer.account_ids(platform)
        if not account_ids:
            logger.info("No %s accounts for customer %s, using empty rows",
                        platform.value, customer.customer_id)
            return [MonthlyKPI.empty(k) for k in period.keys], []

        followers = [
            self._followers(platform, account_ids, m)
            for m in (period.baseline,) + period.months
        ]

        rows: list[MonthlyKPI] = []
        target_posts: list[PostRecord] = []
        for idx, month in enumerate(period.months):
            posts = self._posts(customer, platform, account_ids, month)
            row = build_kpi_row(platform, month.key, posts or [])
            current, previous = followers[idx + 1], followers[idx]
            row.followers = current
            if posts is None or (idx == 0 and previous == 0):
                row.new_followers = 0
            else:
                row.new_followers = current - previous
            rows.append(row)
            if month == period.target:
                target_posts = list(posts or [])
        return rows, target_posts

    def _posts(self, customer: Customer, platform: Platform,
               account_ids: list[str], month: MonthRange) -> list[PostRecord] | None:
        try:
            posts = self.store.query_posts(platform, account_ids, month)
        except Exception as exc:
            err = exc if isinstance(exc, DataUnavailable) else DataUnavailable(
                str(exc), {"platform": platform.value, "month": month.key})
            logger.warning("Posts unavailable for customer %s %s %s: %s",
                           customer.customer_id, platform.value, month.key, err)
            return None
        posts = [p for p in posts if month.contains(p.created_time)]
        if self.as_of is not None:
            posts = [p for p in posts if p.created_time <= self.as_of]
        return posts

    def _followers(self, platform: Platform, account_ids: list[str],
                   month: MonthRange) -> int:
        try:
            return int(self.store.query_follower_snapshot(
                platform, account_ids, month.last_day) or 0)
        except Exception as exc:
            logger.warning("Follower snapshot unavailable for %s %s: %s",
                           platform.value, month.key, exc)
            return 0

    # -- ads ---------------------------------------------------------------

    def _ads_window(self, customer: Customer,
                    period: ReportPeriod) -> list[AdsMonthlySummary]:
        account_ids = customer.account_ids(Platform.ADS)
        if self.ads_source is None or not account_ids:
            return [AdsMonthlySummary.empty(k) for k in period.keys]

        summaries = []
        for month in period.months:
            try:
                summary = self.ads_source.query_ads_summary(account_ids, month)
            except Exception as exc:
                logger.warning("Ads data unavailable for customer %s %s: %s",
                               customer.customer_id, month.key, exc)
                summary = AdsMonthlySummary.empty(month.key)
            summaries.append(summary)
        return summaries

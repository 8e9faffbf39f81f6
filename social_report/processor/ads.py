"""Ad campaign summaries.

Campaign data arrives in three shapes, depending on where it was read from:

- Graph API style: ``{"insights": {"data": [{"spend": "12.5", "actions": [...]}]}}``
- Cached style: ``{"insight": {"spend": 12.5, ...}}``
- Flat rows: ``{"spend": 12.5, "impressions": 1000, ...}`` (CSV, tests)

``campaign_metric`` reads a single metric from any of them and
``summarise_campaigns`` folds a month's rows into an ``AdsMonthlySummary``.
"""

import logging
import math

from ..schema.models import AdsMonthlySummary, CampaignSummary, Platform

logger = logging.getLogger(__name__)

ACTION_METRICS = {"post_engagement", "video_views", "link_clicks"}

# Summary field -> metric name in the campaign payload
_FIELD_METRICS = {
    "spend": "spend",
    "impressions": "impressions",
    "clicks": "clicks",
    "reach": "reach",
    "engagement": "post_engagement",
    "video_views": "video_views",
    "link_clicks": "link_clicks",
}


def _to_float(value) -> float:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(f) else f


def campaign_metric(campaign: dict | None, metric: str) -> float:
    """Read one metric from a campaign payload, 0 when absent."""
    if not campaign:
        return 0.0

    insights = (campaign.get("insights") or {}).get("data") or []
    if insights:
        row = insights[0]
        if metric in ACTION_METRICS:
            for action in row.get("actions") or []:
                if action.get("action_type") == metric:
                    return _to_float(action.get("value"))
            if metric not in row:
                return 0.0
        return _to_float(row.get(metric))

    insight = campaign.get("insight")
    if isinstance(insight, dict) and insight.get(metric) is not None:
        return _to_float(insight[metric])

    if metric in campaign:
        return _to_float(campaign[metric])
    if metric == "post_engagement" and "engagement" in campaign:
        return _to_float(campaign["engagement"])
    return 0.0


def _platform_of(row: dict) -> Platform | None:
    value = (row.get("platform") or "").strip().lower()
    if value in ("facebook", "instagram"):
        return Platform(value)
    return None


def summarise_campaigns(month: str, campaigns: list[dict]) -> AdsMonthlySummary:
    """Build the monthly ads summary, merging rows of the same campaign.

    The platform of a campaign comes from an explicit ``platform`` field or,
    failing that, from an ``IG_`` name prefix.
    """
    merged: dict[str, CampaignSummary] = {}
    for row in campaigns:
        campaign_id = str(row.get("campaign_id") or row.get("id") or "")
        name = str(row.get("campaign_name") or row.get("name") or campaign_id)
        if not campaign_id:
            logger.warning("Skipping ads row without campaign id: %r", name)
            continue
        summary = merged.get(campaign_id)
        if summary is None:
            summary = CampaignSummary(campaign_id=campaign_id, name=name,
                                      platform=_platform_of(row))
            merged[campaign_id] = summary
        for field_name, metric in _FIELD_METRICS.items():
            value = campaign_metric(row, metric)
            if field_name != "spend":
                value = int(round(value))
            setattr(summary, field_name, getattr(summary, field_name) + value)

    ordered = sorted(merged.values(), key=lambda c: c.spend, reverse=True)
    return AdsMonthlySummary(month=month, campaigns=ordered)

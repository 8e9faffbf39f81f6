"""Collaborator interfaces consumed by the aggregator and the composer.

The engine never talks to a database or an HTTP API directly; it reads
customers, post metrics, follower snapshots and ad campaigns through these
protocols. ``processor.ingestion`` provides file-backed implementations.
"""

from datetime import date
from typing import Protocol

from ..schema.models import (
    AdsMonthlySummary,
    Customer,
    MonthRange,
    Platform,
    PostRecord,
)


class CustomerDirectory(Protocol):
    def get_customer(self, customer_id: str) -> Customer:
        """Return the customer or raise ``CustomerNotFound``."""
        ...


class MetricsStore(Protocol):
    def query_posts(self, platform: Platform, account_ids: list[str],
                    month: MonthRange) -> list[PostRecord]:
        """Posts created inside ``month`` with their latest metrics snapshot."""
        ...

    def query_follower_snapshot(self, platform: Platform,
                                account_ids: list[str],
                                at_or_before: date) -> int:
        """Summed follower count of the accounts' last snapshot on or before a date."""
        ...


class AdsDataSource(Protocol):
    def query_ads_summary(self, account_ids: list[str],
                          month: MonthRange) -> AdsMonthlySummary:
        ...

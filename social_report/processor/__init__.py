"""Data processor package: periods, aggregation and file-backed sources."""

from .ads import campaign_metric, summarise_campaigns
from .aggregator import AggregatedData, KPIAggregator, build_kpi_row
from .ingestion import (
    CsvAdsSource,
    CsvMetricsStore,
    Dataset,
    YamlCustomerDirectory,
    load_dataset,
    parse_numeric,
    read_csv_auto,
)
from .periods import ReportPeriod, long_name, month_name, parse_month
from .sources import AdsDataSource, CustomerDirectory, MetricsStore

__all__ = [
    "AdsDataSource",
    "AggregatedData",
    "CsvAdsSource",
    "CsvMetricsStore",
    "CustomerDirectory",
    "Dataset",
    "KPIAggregator",
    "MetricsStore",
    "ReportPeriod",
    "YamlCustomerDirectory",
    "build_kpi_row",
    "campaign_metric",
    "load_dataset",
    "long_name",
    "month_name",
    "parse_month",
    "parse_numeric",
    "read_csv_auto",
    "summarise_campaigns",
]

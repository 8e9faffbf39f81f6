"""File-backed data sources for report generation.

Reads a data directory exported from the metrics database and exposes it
through the collaborator protocols in ``sources``:

- customers.yaml: customer directory (name, colours, logo, account ids)
- posts.csv: one row per post metrics snapshot
- followers.csv: one row per account follower snapshot
- ads.csv: one row per campaign and day (or month)

CSV files may be UTF-8 (comma) or UTF-16 LE (tab) as produced by
spreadsheet exports; an ``.xlsx`` workbook of the same name is read when
there is no CSV. Missing files mean "no data" for that source.

Usage::

    dataset = load_dataset("exports/2024-03")
    customer = dataset.directory.get_customer("42")
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import yaml

from ..errors import CustomerNotFound, DataUnavailable
from ..schema.models import (
    AdsMonthlySummary,
    BrandColors,
    Customer,
    MonthRange,
    Platform,
    PostRecord,
)
from .ads import summarise_campaigns

logger = logging.getLogger(__name__)

POST_COLUMNS = [
    "platform", "account_id", "post_id", "created_time", "post_type",
    "permalink", "message", "reactions", "comments", "shares", "saves",
    "reach", "impressions", "video_views", "thumbnail_url", "snapshot_time",
]
POST_METRICS = ["reactions", "comments", "shares", "saves",
                "reach", "impressions", "video_views"]
FOLLOWER_COLUMNS = ["platform", "account_id", "snapshot_date", "followers_count"]
ADS_COLUMNS = ["account_id", "campaign_id", "campaign_name", "platform", "date",
               "spend", "impressions", "clicks", "reach", "engagement",
               "video_views", "link_clicks"]
ADS_METRICS = ADS_COLUMNS[5:]


# ---------------------------------------------------------------------------
# Value parsers
# ---------------------------------------------------------------------------

def parse_numeric(value):
    """Parse a numeric cell that may contain thousands separators.

    Examples:
        "63,571" -> 63571.0
        "1,138,771" -> 1138771.0
        "12.5" -> 12.5
        42 -> 42.0
        "" / NaN / "n/a" -> 0.0
    """
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    s = str(value).strip().replace(",", "")
    if not s:
        return 0.0
    try:
        return float(s)
    except ValueError:
        return 0.0


def _to_naive(series: pd.Series) -> pd.Series:
    """Parse timestamps, normalising offsets to naive UTC."""
    return pd.to_datetime(series, errors="coerce", utc=True).dt.tz_localize(None)


def _text(value) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    s = str(value).strip()
    return s or None


# ---------------------------------------------------------------------------
# Encoding detection and CSV reading
# ---------------------------------------------------------------------------

def detect_encoding(path):
    """Detect whether a file is UTF-16 LE (with BOM) or UTF-8.

    Returns (encoding, delimiter) tuple.
    """
    with open(path, "rb") as f:
        raw = f.read(4)
    if raw[:2] == b"\xff\xfe":
        return "utf-16-le", "\t"
    return "utf-8", ","


def clean_columns(df):
    """Strip whitespace and BOMs from column names and lower-case them."""
    df.columns = [c.replace("\ufeff", "").strip().lower() if isinstance(c, str) else c
                  for c in df.columns]
    return df


def read_csv_auto(path, columns):
    """Read a CSV with encoding detection, guaranteeing ``columns`` exist.

    A missing file yields an empty frame with those columns.
    """
    path = Path(path)
    if not path.exists():
        logger.info("%s not found, treating as empty", path.name)
        return pd.DataFrame(columns=columns)
    encoding, sep = detect_encoding(path)
    df = pd.read_csv(path, encoding=encoding, sep=sep, dtype=str,
                     keep_default_na=False)
    df = clean_columns(df)
    for col in columns:
        if col not in df.columns:
            df[col] = ""
    return df


def read_excel_export(path, columns):
    """Read the first sheet of an ``.xlsx`` export as strings."""
    df = pd.read_excel(path, sheet_name=0, dtype=str, engine="openpyxl")
    df = clean_columns(df).fillna("")
    for col in columns:
        if col not in df.columns:
            df[col] = ""
    return df


def read_export(root, stem, columns):
    """Read ``<stem>.csv``, or ``<stem>.xlsx`` when there is no CSV.

    Neither file present yields an empty frame with ``columns``.
    """
    root = Path(root)
    csv_path = root / f"{stem}.csv"
    xlsx_path = root / f"{stem}.xlsx"
    if not csv_path.exists() and xlsx_path.exists():
        return read_excel_export(xlsx_path, columns)
    return read_csv_auto(csv_path, columns)


def clean_numeric_columns(df, columns):
    """Apply parse_numeric to the given columns."""
    for col in columns:
        if col in df.columns:
            df[col] = df[col].apply(parse_numeric)
    return df


# ---------------------------------------------------------------------------
# Customer directory
# ---------------------------------------------------------------------------

class YamlCustomerDirectory:
    """Customer directory read from ``customers.yaml``."""

    def __init__(self, customers: dict[str, Customer]):
        self._customers = customers

    @classmethod
    def from_file(cls, path, default_colors: BrandColors | None = None):
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        entries = data.get("customers", []) if isinstance(data, dict) else data
        customers = {}
        for entry in entries:
            customer = Customer.from_dict(entry, default_colors)
            customers[customer.customer_id] = customer
        logger.info("Loaded %d customers from %s", len(customers), path)
        return cls(customers)

    def get_customer(self, customer_id: str) -> Customer:
        try:
            return self._customers[str(customer_id)]
        except KeyError:
            raise CustomerNotFound(str(customer_id)) from None

    def customer_ids(self) -> list[str]:
        return sorted(self._customers)


# ---------------------------------------------------------------------------
# Metrics store
# ---------------------------------------------------------------------------

class CsvMetricsStore:
    """Post and follower metrics from ``posts.csv`` and ``followers.csv``.

    Each post may have many snapshot rows; queries use the latest snapshot
    taken at or before ``as_of`` (default: no cut-off).
    """

    def __init__(self, posts: pd.DataFrame, followers: pd.DataFrame,
                 as_of: datetime | None = None):
        self.as_of = as_of
        self._posts = self._prepare_posts(posts)
        self._followers = self._prepare_followers(followers)

    @staticmethod
    def _prepare_posts(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["platform"] = df["platform"].astype(str).str.strip().str.lower()
        df["account_id"] = df["account_id"].astype(str).str.strip()
        df["created_time"] = _to_naive(df["created_time"])
        df["snapshot_time"] = _to_naive(df["snapshot_time"])
        df["snapshot_time"] = df["snapshot_time"].fillna(df["created_time"])
        clean_numeric_columns(df, POST_METRICS)
        return df.dropna(subset=["created_time"])

    @staticmethod
    def _prepare_followers(df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df["platform"] = df["platform"].astype(str).str.strip().str.lower()
        df["account_id"] = df["account_id"].astype(str).str.strip()
        df["snapshot_date"] = pd.to_datetime(df["snapshot_date"], errors="coerce")
        clean_numeric_columns(df, ["followers_count"])
        return df.dropna(subset=["snapshot_date"])

    def query_posts(self, platform: Platform, account_ids: list[str],
                    month: MonthRange) -> list[PostRecord]:
        df = self._posts
        mask = (
            (df["platform"] == platform.value)
            & df["account_id"].isin([str(a) for a in account_ids])
            & (df["created_time"] >= month.start)
            & (df["created_time"] < month.end)
        )
        if self.as_of is not None:
            mask &= df["snapshot_time"] <= self.as_of
        rows = df[mask]
        if rows.empty:
            return []
        latest = (rows.sort_values(["post_id", "snapshot_time"], kind="stable")
                  .drop_duplicates(subset="post_id", keep="last")
                  .sort_values("created_time", kind="stable"))
        return [self._to_record(platform, row) for row in latest.to_dict("records")]

    @staticmethod
    def _to_record(platform: Platform, row: dict) -> PostRecord:
        return PostRecord(
            post_id=str(row["post_id"]),
            platform=platform,
            created_time=row["created_time"].to_pydatetime(),
            post_type=_text(row["post_type"]) or "photo",
            permalink=_text(row["permalink"]),
            message=_text(row["message"]),
            thumbnail_url=_text(row["thumbnail_url"]),
            **{m: int(row[m]) for m in POST_METRICS},
        )

    def query_follower_snapshot(self, platform: Platform, account_ids: list[str],
                                at_or_before: date) -> int:
        df = self._followers
        mask = (
            (df["platform"] == platform.value)
            & df["account_id"].isin([str(a) for a in account_ids])
            & (df["snapshot_date"] <= pd.Timestamp(at_or_before))
        )
        rows = df[mask]
        if rows.empty:
            return 0
        latest = (rows.sort_values("snapshot_date", kind="stable")
                  .groupby("account_id")["followers_count"].last())
        return int(latest.sum())


# ---------------------------------------------------------------------------
# Ads source
# ---------------------------------------------------------------------------

class CsvAdsSource:
    """Campaign totals from ``ads.csv``, one row per campaign and day."""

    def __init__(self, ads: pd.DataFrame):
        df = ads.copy()
        df["account_id"] = df["account_id"].astype(str).str.strip()
        df["date"] = pd.to_datetime(df["date"], errors="coerce")
        clean_numeric_columns(df, ADS_METRICS)
        self._ads = df.dropna(subset=["date"])

    def query_ads_summary(self, account_ids: list[str],
                          month: MonthRange) -> AdsMonthlySummary:
        df = self._ads
        mask = (
            df["account_id"].isin([str(a) for a in account_ids])
            & (df["date"] >= month.start)
            & (df["date"] < month.end)
        )
        rows = df[mask]
        if rows.empty:
            return AdsMonthlySummary.empty(month.key)
        return summarise_campaigns(month.key, rows.to_dict("records"))


# ---------------------------------------------------------------------------
# Dataset
# ---------------------------------------------------------------------------

@dataclass
class Dataset:
    """All collaborators backed by one data directory."""
    directory: YamlCustomerDirectory
    store: CsvMetricsStore
    ads_source: CsvAdsSource


def load_dataset(path, as_of: datetime | None = None,
                 default_colors: BrandColors | None = None) -> Dataset:
    """Load a data directory.

    Raises:
        DataUnavailable: if the directory or its ``customers.yaml`` is missing.
    """
    root = Path(path)
    customers_file = root / "customers.yaml"
    if not customers_file.exists():
        raise DataUnavailable(f"No customers.yaml in {root}",
                              {"path": str(root)})

    directory = YamlCustomerDirectory.from_file(customers_file, default_colors)
    store = CsvMetricsStore(
        read_export(root, "posts", POST_COLUMNS),
        read_export(root, "followers", FOLLOWER_COLUMNS),
        as_of=as_of,
    )
    ads_source = CsvAdsSource(read_export(root, "ads", ADS_COLUMNS))
    return Dataset(directory=directory, store=store, ads_source=ads_source)

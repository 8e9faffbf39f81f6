"""Report data models - the contract between aggregator, slide modules and composer.

Defines the typed structure of one monthly report: who the customer is, what
a month of KPIs looks like, the per-post and ads records slide modules draw
from, and the brand/design settings every slide is styled with.
"""

import calendar
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Platform(Enum):
    """Which data source a slide module (or account) belongs to."""
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    ADS = "ads"
    GENERAL = "general"      # Always on, never requested explicitly


SOCIAL_PLATFORMS = (Platform.FACEBOOK, Platform.INSTAGRAM)
REQUESTABLE_PLATFORMS = (Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS)


class Category(Enum):
    """Categorises a slide module's role in the report."""
    COVER = "cover"
    DIVIDER = "divider"
    SUMMARY = "summary"
    KPI = "kpi"
    CONTENT = "content"
    ADS = "ads"
    CONTACT = "contact"


# ---------------------------------------------------------------------------
# Position and styling primitives
# ---------------------------------------------------------------------------

@dataclass
class Position:
    """Shape position and dimensions in inches."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def inset(self, dx: float, dy: float = 0.0) -> "Position":
        """Shrink the box by ``dx`` left/right and ``dy`` top/bottom."""
        return Position(self.left + dx, self.top + dy,
                        max(self.width - 2 * dx, 0.0),
                        max(self.height - 2 * dy, 0.0))

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> "Position":
        return Position(self.left + dx, self.top + dy, self.width, self.height)

    def to_dict(self) -> dict:
        return {"left": self.left, "top": self.top,
                "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, d: dict) -> "Position":
        return cls(left=d["left"], top=d["top"],
                   width=d["width"], height=d["height"])


@dataclass
class FontSpec:
    """Typography specification for a text element."""
    name: str = "Inter"
    size_pt: float = 10.0
    bold: bool = False
    italic: bool = False
    color: str = "#000000"
    align: str = "left"        # left, center, right
    valign: str = "top"        # top, middle, bottom

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"name": self.name, "size_pt": self.size_pt}
        if self.bold:
            d["bold"] = True
        if self.italic:
            d["italic"] = True
        if self.color != "#000000":
            d["color"] = self.color
        if self.align != "left":
            d["align"] = self.align
        if self.valign != "top":
            d["valign"] = self.valign
        return d


@dataclass
class BrandColors:
    """Customer brand colours (``#RRGGBB``)."""
    primary: str = "#84CC16"
    secondary: str = "#A855F7"

    def to_dict(self) -> dict:
        return {"primary": self.primary, "secondary": self.secondary}

    @classmethod
    def from_dict(cls, d: dict | None,
                  default: "BrandColors | None" = None) -> "BrandColors":
        default = default or cls()
        d = d or {}
        return cls(
            primary=normalize_hex(d.get("primary")) or default.primary,
            secondary=normalize_hex(d.get("secondary")) or default.secondary,
        )


_HEX_RE = re.compile(r"^#?([0-9A-Fa-f]{6})$")


def normalize_hex(value: str | None) -> str | None:
    """Return ``#RRGGBB`` for a 6-digit hex colour with or without ``#``."""
    if not value:
        return None
    m = _HEX_RE.match(str(value).strip())
    if not m:
        return None
    return "#" + m.group(1).upper()


# ---------------------------------------------------------------------------
# DesignSystem - global styling rules
# ---------------------------------------------------------------------------

@dataclass
class DesignSystem:
    """Agency design system applied across all slides."""
    # Colors
    background: str = "#F9F9F9"
    white: str = "#FFFFFF"
    black: str = "#000000"
    gray: str = "#666666"
    light_gray: str = "#F5F5F5"
    dark_gray: str = "#333333"
    medium_gray: str = "#999999"
    shadow: str = "#E0E0E0"
    border: str = "#E8E8E8"
    trend_up: str = "#22C55E"
    trend_down: str = "#EF4444"
    trend_neutral: str = "#EAB308"
    meta_blue: str = "#1877F2"

    # Typography
    primary_font: str = "Inter"
    title_size_pt: float = 26.0
    subtitle_size_pt: float = 14.0
    body_size_pt: float = 10.0
    caption_size_pt: float = 8.0

    # Geometry
    margin: float = 0.5

    def to_dict(self) -> dict:
        return {
            "colors": {
                "background": self.background,
                "white": self.white,
                "black": self.black,
                "gray": self.gray,
                "light_gray": self.light_gray,
                "dark_gray": self.dark_gray,
                "medium_gray": self.medium_gray,
                "shadow": self.shadow,
                "border": self.border,
                "trend_up": self.trend_up,
                "trend_down": self.trend_down,
                "trend_neutral": self.trend_neutral,
                "meta_blue": self.meta_blue,
            },
            "typography": {
                "primary_font": self.primary_font,
                "title_size_pt": self.title_size_pt,
                "subtitle_size_pt": self.subtitle_size_pt,
                "body_size_pt": self.body_size_pt,
                "caption_size_pt": self.caption_size_pt,
            },
            "margin": self.margin,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "DesignSystem":
        base = cls()
        colors = d.get("colors", {})
        typo = d.get("typography", {})
        kwargs: dict[str, Any] = {}
        for key in base.to_dict()["colors"]:
            kwargs[key] = normalize_hex(colors.get(key)) or getattr(base, key)
        for key in base.to_dict()["typography"]:
            kwargs[key] = typo.get(key, getattr(base, key))
        kwargs["margin"] = d.get("margin", base.margin)
        return cls(**kwargs)


# ---------------------------------------------------------------------------
# ReportSettings - agency branding and runtime knobs
# ---------------------------------------------------------------------------

@dataclass
class AgencyContact:
    """Contact person printed on the closing slide."""
    name: str = "Sophie Rettig"
    title: str = "Social Media Managerin"
    company: str = "track by track GmbH"
    address: str = "Schliemannstraße 23"
    city: str = "D-10437 Berlin"
    email: str = "sophie.rettig@famefact.com"
    phone: str = "+49 157 51639979"

    def to_dict(self) -> dict:
        return dict(self.__dict__)

    @classmethod
    def from_dict(cls, d: dict) -> "AgencyContact":
        base = cls()
        return cls(**{k: d.get(k, v) for k, v in base.__dict__.items()})


@dataclass
class ReportSettings:
    """Everything about a report that is configuration rather than data."""
    agency_name: str = "famefact"
    tagline: str = "FIRST IN SOCIALTAINMENT"
    partner_badge: str = "Offizieller Meta Business Partner"
    report_title: str = "Social Media Reporting"
    contact: AgencyContact = field(default_factory=AgencyContact)
    default_colors: BrandColors = field(default_factory=BrandColors)
    design: DesignSystem = field(default_factory=DesignSystem)
    slide_width: float = 10.0            # 16:9 canvas in inches
    slide_height: float = 5.625
    asset_timeout: float = 10.0          # seconds per image fetch
    asset_min_bytes: int = 1000          # smaller responses are error pages

    def to_dict(self) -> dict:
        return {
            "agency": {
                "name": self.agency_name,
                "tagline": self.tagline,
                "partner_badge": self.partner_badge,
                "report_title": self.report_title,
                "contact": self.contact.to_dict(),
                "colors": self.default_colors.to_dict(),
            },
            "design": self.design.to_dict(),
            "dimensions": {
                "width_inches": self.slide_width,
                "height_inches": self.slide_height,
            },
            "assets": {
                "timeout_seconds": self.asset_timeout,
                "min_bytes": self.asset_min_bytes,
            },
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ReportSettings":
        base = cls()
        agency = d.get("agency", {})
        dims = d.get("dimensions", {})
        assets = d.get("assets", {})
        return cls(
            agency_name=agency.get("name", base.agency_name),
            tagline=agency.get("tagline", base.tagline),
            partner_badge=agency.get("partner_badge", base.partner_badge),
            report_title=agency.get("report_title", base.report_title),
            contact=AgencyContact.from_dict(agency.get("contact", {})),
            default_colors=BrandColors.from_dict(agency.get("colors")),
            design=DesignSystem.from_dict(d.get("design", {})),
            slide_width=dims.get("width_inches", base.slide_width),
            slide_height=dims.get("height_inches", base.slide_height),
            asset_timeout=float(assets.get("timeout_seconds", base.asset_timeout)),
            asset_min_bytes=int(assets.get("min_bytes", base.asset_min_bytes)),
        )


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------

_TRANSLIT = {"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"}


def slugify(name: str) -> str:
    """Filename-safe lower-case slug: ``"Müller & Söhne"`` -> ``"mueller-soehne"``."""
    s = name.strip().lower()
    for src, dst in _TRANSLIT.items():
        s = s.replace(src, dst)
    s = re.sub(r"[^a-z0-9]+", "-", s)
    return s.strip("-") or "report"


@dataclass
class Customer:
    """A reporting customer as returned by the customer directory."""
    customer_id: str
    name: str
    brand_colors: BrandColors = field(default_factory=BrandColors)
    logo_url: str | None = None
    accounts: dict[Platform, list[str]] = field(default_factory=dict)
    platforms: tuple[Platform, ...] = REQUESTABLE_PLATFORMS
    slug: str | None = None

    @property
    def report_slug(self) -> str:
        return self.slug or slugify(self.name)

    def account_ids(self, platform: Platform) -> list[str]:
        return list(self.accounts.get(platform, []))

    @classmethod
    def from_dict(cls, d: dict,
                  default_colors: BrandColors | None = None) -> "Customer":
        accounts = {
            Platform(k): [str(a) for a in (v or [])]
            for k, v in (d.get("accounts") or {}).items()
        }
        if "platforms" in d:
            platforms = tuple(Platform(p) for p in d["platforms"])
        else:
            platforms = REQUESTABLE_PLATFORMS
        return cls(
            customer_id=str(d["id"]),
            name=d["name"],
            brand_colors=BrandColors.from_dict(d.get("brand_colors"),
                                               default_colors),
            logo_url=d.get("logo_url") or None,
            accounts=accounts,
            platforms=platforms,
            slug=d.get("slug"),
        )


# ---------------------------------------------------------------------------
# Time ranges
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthRange:
    """Half-open calendar month ``[start, end)``."""
    year: int
    month: int

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    @property
    def start(self) -> datetime:
        return datetime(self.year, self.month, 1)

    @property
    def end(self) -> datetime:
        return self.next().start

    @property
    def last_day(self) -> date:
        return date(self.year, self.month,
                    calendar.monthrange(self.year, self.month)[1])

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment < self.end

    def previous(self) -> "MonthRange":
        if self.month == 1:
            return MonthRange(self.year - 1, 12)
        return MonthRange(self.year, self.month - 1)

    def next(self) -> "MonthRange":
        if self.month == 12:
            return MonthRange(self.year + 1, 1)
        return MonthRange(self.year, self.month + 1)


# ---------------------------------------------------------------------------
# KPI rows and post records
# ---------------------------------------------------------------------------

@dataclass
class MonthlyKPI:
    """One aggregated metrics row for a (customer, platform, month)."""
    month: str
    posts_count: int = 0
    reactions: int = 0
    comments: int = 0
    shares_or_saves: int = 0
    reach: int = 0
    impressions: int = 0
    video_views: int = 0
    followers: int = 0
    new_followers: int = 0
    avg_reach_per_post: int = 0
    engagement_rate: float = 0.0

    @property
    def interactions(self) -> int:
        return self.reactions + self.comments + self.shares_or_saves

    @classmethod
    def empty(cls, month: str, followers: int = 0,
              new_followers: int = 0) -> "MonthlyKPI":
        return cls(month=month, followers=followers, new_followers=new_followers)


_VIDEO_TYPES = {"video", "reel", "reels"}


@dataclass
class PostRecord:
    """Per-post metrics from the latest snapshot at query time."""
    post_id: str
    platform: Platform
    created_time: datetime
    post_type: str = "photo"
    permalink: str | None = None
    message: str | None = None
    reactions: int = 0
    comments: int = 0
    shares: int = 0
    saves: int = 0
    reach: int = 0
    impressions: int = 0
    video_views: int = 0
    thumbnail_url: str | None = None

    @property
    def is_video(self) -> bool:
        return (self.post_type or "").lower() in _VIDEO_TYPES

    @property
    def interactions(self) -> int:
        # Saves are added for every platform, Facebook included.
        return self.reactions + self.comments + self.saves

    @property
    def engagement_rate(self) -> float:
        if self.reach <= 0:
            return 0.0
        return self.interactions / self.reach * 100


# ---------------------------------------------------------------------------
# Ads
# ---------------------------------------------------------------------------

@dataclass
class CampaignSummary:
    """Monthly totals for one ad campaign."""
    campaign_id: str
    name: str
    platform: Platform | None = None
    spend: float = 0.0
    impressions: int = 0
    clicks: int = 0
    reach: int = 0
    engagement: int = 0
    video_views: int = 0
    link_clicks: int = 0

    def __post_init__(self) -> None:
        if self.platform is None:
            self.platform = (Platform.INSTAGRAM
                             if self.name.upper().startswith("IG_")
                             else Platform.FACEBOOK)

    @property
    def display_name(self) -> str:
        """Campaign name without the ``FB_``/``IG_`` routing prefix."""
        return re.sub(r"^(FB_|IG_)", "", self.name, flags=re.IGNORECASE)


@dataclass
class AdsMonthlySummary:
    """All campaigns of a customer for one month, totals summed per campaign."""
    month: str
    campaigns: list[CampaignSummary] = field(default_factory=list)

    @classmethod
    def empty(cls, month: str) -> "AdsMonthlySummary":
        return cls(month=month)

    @property
    def spend(self) -> float:
        return sum(c.spend for c in self.campaigns)

    @property
    def impressions(self) -> int:
        return sum(c.impressions for c in self.campaigns)

    @property
    def clicks(self) -> int:
        return sum(c.clicks for c in self.campaigns)

    @property
    def reach(self) -> int:
        return sum(c.reach for c in self.campaigns)

    @property
    def engagement(self) -> int:
        return sum(c.engagement for c in self.campaigns)

    @property
    def video_views(self) -> int:
        return sum(c.video_views for c in self.campaigns)

    @property
    def link_clicks(self) -> int:
        return sum(c.link_clicks for c in self.campaigns)

    @property
    def cpc(self) -> float:
        return self.spend / self.clicks if self.clicks > 0 else 0.0

    @property
    def cpm(self) -> float:
        return self.spend / self.impressions * 1000 if self.impressions > 0 else 0.0

    @property
    def ctr(self) -> float:
        return self.clicks / self.impressions * 100 if self.impressions > 0 else 0.0

    @property
    def cost_per_engagement(self) -> float:
        return self.spend / self.engagement if self.engagement > 0 else 0.0

    def for_platform(self, platform: Platform) -> "AdsMonthlySummary":
        return AdsMonthlySummary(
            month=self.month,
            campaigns=[c for c in self.campaigns if c.platform == platform],
        )


# ---------------------------------------------------------------------------
# Request / result
# ---------------------------------------------------------------------------

PPTX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.presentationml.presentation"
)


@dataclass
class ReportRequest:
    """Input for one report: whose, which month, which platforms."""
    customer_id: str
    target_month: str                    # "YYYY-MM"
    enabled_platforms: tuple[Platform, ...] = REQUESTABLE_PLATFORMS
    notes: str = ""
    slide_overrides: dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        platforms = tuple(Platform(p) for p in self.enabled_platforms)
        for p in platforms:
            if p not in REQUESTABLE_PLATFORMS:
                raise ValueError(f"Platform {p.value!r} cannot be requested")
        self.enabled_platforms = platforms

    @classmethod
    def from_dict(cls, d: dict) -> "ReportRequest":
        return cls(
            customer_id=str(d["customerId"]),
            target_month=d["targetMonth"],
            enabled_platforms=tuple(d.get("enabledPlatforms",
                                          [p.value for p in REQUESTABLE_PLATFORMS])),
            notes=d.get("notes") or "",
            slide_overrides=dict(d.get("slides", {})),
        )


@dataclass
class ReportResult:
    """A finished report ready for delivery."""
    content: bytes
    filename: str
    mime_type: str = PPTX_MIME_TYPE
    slide_ids: list[str] = field(default_factory=list)
    failures: list = field(default_factory=list)   # ModuleRenderFailure

    @property
    def size(self) -> int:
        return len(self.content)

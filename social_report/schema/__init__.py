"""Report schema package: typed models and formatting for monthly reports.

Provides the contract between the aggregator, the slide modules and the
composer:

- models.py: Core dataclasses (Customer, MonthlyKPI, PostRecord, ReportSettings, ...)
- design_system.py: German value formatting and trend derivation
- loader.py: YAML serialization/deserialization of ReportSettings
"""

from .design_system import (
    Trend,
    format_compact,
    format_currency,
    format_date,
    format_number,
    format_percent,
    trend,
)
from .loader import load_settings, save_settings
from .models import (
    AdsMonthlySummary,
    AgencyContact,
    BrandColors,
    CampaignSummary,
    Category,
    Customer,
    DesignSystem,
    FontSpec,
    MonthlyKPI,
    MonthRange,
    Platform,
    Position,
    PostRecord,
    ReportRequest,
    ReportResult,
    ReportSettings,
    slugify,
)

__all__ = [
    # Models
    "AdsMonthlySummary",
    "AgencyContact",
    "BrandColors",
    "CampaignSummary",
    "Category",
    "Customer",
    "DesignSystem",
    "FontSpec",
    "MonthlyKPI",
    "MonthRange",
    "Platform",
    "Position",
    "PostRecord",
    "ReportRequest",
    "ReportResult",
    "ReportSettings",
    # Loader
    "load_settings",
    "save_settings",
    # Formatting
    "Trend",
    "format_compact",
    "format_currency",
    "format_date",
    "format_number",
    "format_percent",
    "slugify",
    "trend",
]

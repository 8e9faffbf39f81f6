"""Slide module contract: the context every module reads and the module record.

A slide module is a plain function ``render(document, context) -> document``
wrapped in a ``SlideModule`` record that tags it with a platform, a category
and a sort order. Modules may add zero, one or several slides.
"""

from dataclasses import dataclass, field
from typing import Callable

from ..generator.assets import AssetCache
from ..generator.document import DocumentSink
from ..processor.aggregator import AggregatedData
from ..processor.periods import ReportPeriod
from ..schema.models import (
    AdsMonthlySummary,
    BrandColors,
    Category,
    Customer,
    DesignSystem,
    MonthlyKPI,
    Platform,
    PostRecord,
    ReportRequest,
    ReportSettings,
)


class PageCounter:
    """Hands out page numbers, one per emitted slide."""

    def __init__(self, start: int = 1):
        self._next = start

    def next(self) -> int:
        page = self._next
        self._next += 1
        return page

    @property
    def issued(self) -> int:
        """The last page number handed out (0 before the first slide)."""
        return self._next - 1

    def mark(self) -> int:
        return self._next

    def rewind(self, mark: int) -> None:
        """Return to an earlier ``mark()``; never moves forward."""
        self._next = min(self._next, mark)


@dataclass
class RenderContext:
    """Everything a slide module may read while rendering one report."""
    customer: Customer
    request: ReportRequest
    period: ReportPeriod
    data: AggregatedData
    colors: BrandColors
    settings: ReportSettings
    assets: AssetCache
    platforms: frozenset = frozenset()
    pages: PageCounter = field(default_factory=PageCounter)

    @property
    def design(self) -> DesignSystem:
        return self.settings.design

    @property
    def primary(self) -> str:
        return self.colors.primary

    @property
    def secondary(self) -> str:
        return self.colors.secondary

    @property
    def month(self) -> str:
        return self.period.target.key

    @property
    def notes(self) -> str:
        return self.request.notes

    def has_platform(self, platform: Platform) -> bool:
        return platform in self.platforms

    def platform_color(self, platform: Platform) -> str:
        """Facebook sections use the primary colour, Instagram the secondary."""
        return self.secondary if platform == Platform.INSTAGRAM else self.primary

    def kpis(self, platform: Platform) -> list[MonthlyKPI]:
        rows = self.data.kpis_for(platform)
        return rows or [MonthlyKPI.empty(k) for k in self.period.keys]

    def current_kpi(self, platform: Platform) -> MonthlyKPI:
        return self.kpis(platform)[-1]

    def previous_kpi(self, platform: Platform) -> MonthlyKPI:
        return self.kpis(platform)[-2]

    def posts(self, platform: Platform) -> list[PostRecord]:
        return self.data.posts_for(platform)

    @property
    def ads(self) -> list[AdsMonthlySummary]:
        return self.data.ads or [AdsMonthlySummary.empty(k) for k in self.period.keys]

    @property
    def current_ads(self) -> AdsMonthlySummary:
        return self.ads[-1]


Renderer = Callable[[DocumentSink, RenderContext], DocumentSink]


@dataclass(frozen=True)
class SlideModule:
    """One entry of the slide catalog."""
    id: str
    name: str
    platform: Platform
    category: Category
    order: int
    render: Renderer
    default_enabled: bool = True
    description: str = ""

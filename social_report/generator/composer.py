"""Document composer - drives the slide modules to produce one report.

Resolves the customer, aggregates three months of KPIs, then runs every
selected slide module in page order against a single document. A module
that raises is rolled back (its partial slides removed, its page numbers
returned) and recorded on the result; the report carries on without it.

Usage::

    dataset = load_dataset("exports")
    composer = DocumentComposer(dataset.directory, dataset.store, dataset.ads_source)
    result = composer.compose(ReportRequest("42", "2024-03"))

    with open(result.filename, "wb") as f:
        f.write(result.content)
"""

import logging
import threading
from datetime import datetime
from typing import Callable

from ..errors import FatalComposerFailure, ModuleRenderFailure, ReportCancelled
from ..processor.aggregator import KPIAggregator
from ..processor.periods import ReportPeriod
from ..processor.sources import AdsDataSource, CustomerDirectory, MetricsStore
from ..schema.models import (
    Platform,
    ReportRequest,
    ReportResult,
    ReportSettings,
)
from ..slides import REGISTRY, build_slide_list
from ..slides.base import PageCounter, RenderContext, SlideModule
from .assets import AssetCache
from .document import DocumentSink, PPTXDocument

logger = logging.getLogger(__name__)


def report_filename(slug: str, month_key: str) -> str:
    return f"{slug}_{month_key}.pptx"


class DocumentComposer:
    """Builds report documents from collaborators.

    The composer itself keeps no per-report state, so one instance may
    serve concurrent ``compose`` calls.

    Args:
        directory: Customer lookup.
        store: Post and follower metrics.
        ads_source: Ad campaign totals (optional).
        settings: Agency branding and runtime knobs.
        document_factory: Creates the document sink for each report.
        asset_cache_factory: Creates the per-report image cache.
        registry: Slide module catalog.
        as_of: Passed to the aggregator as the post cut-off.
    """

    def __init__(self, directory: CustomerDirectory, store: MetricsStore,
                 ads_source: AdsDataSource | None = None,
                 settings: ReportSettings | None = None,
                 document_factory: Callable[[ReportSettings], DocumentSink] = PPTXDocument,
                 asset_cache_factory: Callable[..., AssetCache] = AssetCache,
                 registry=REGISTRY, as_of: datetime | None = None):
        self.directory = directory
        self.settings = settings or ReportSettings()
        self.aggregator = KPIAggregator(store, ads_source, as_of=as_of)
        self.document_factory = document_factory
        self.asset_cache_factory = asset_cache_factory
        self.registry = registry

    def enabled_platforms(self, request: ReportRequest, customer) -> frozenset:
        """Requested platforms the customer actually has."""
        return frozenset(p for p in request.enabled_platforms
                         if p in customer.platforms)

    def modules_for(self, request: ReportRequest,
                    platforms) -> list[SlideModule]:
        return build_slide_list(platforms, request.slide_overrides, self.registry)

    def compose(self, request: ReportRequest,
                cancel_event: threading.Event | None = None) -> ReportResult:
        """Render the report for ``request``.

        Raises:
            CustomerNotFound: unknown customer id.
            ValueError: malformed target month.
            ReportCancelled: ``cancel_event`` was set before completion.
            FatalComposerFailure: the document could not be serialised.
        """
        period = ReportPeriod.from_month(request.target_month)
        customer = self.directory.get_customer(request.customer_id)
        platforms = self.enabled_platforms(request, customer)
        month = period.target.key

        _check_cancelled(cancel_event, customer.customer_id, month)
        data = self.aggregator.aggregate(customer, period, platforms)

        assets = self.asset_cache_factory(timeout=self.settings.asset_timeout,
                                          min_bytes=self.settings.asset_min_bytes)
        try:
            context = RenderContext(
                customer=customer,
                request=request,
                period=period,
                data=data,
                colors=customer.brand_colors,
                settings=self.settings,
                assets=assets,
                platforms=platforms | {Platform.GENERAL},
                pages=PageCounter(),
            )
            document = self.document_factory(self.settings)
            rendered, failures = self._render_modules(
                document, context, self.modules_for(request, platforms), cancel_event)

            _check_cancelled(cancel_event, customer.customer_id, month)
            try:
                content = document.to_bytes()
            except Exception as exc:
                logger.error("Serialising report for customer %s %s failed: %s",
                             customer.customer_id, month, exc)
                raise FatalComposerFailure(
                    f"Could not serialise report: {exc}",
                    {"customer_id": customer.customer_id, "month": month},
                ) from exc
        finally:
            assets.close()

        logger.info("Report for customer %s %s: %d slides from %d modules, %d failed",
                    customer.customer_id, month, document.slide_count,
                    len(rendered), len(failures))
        return ReportResult(
            content=content,
            filename=report_filename(customer.report_slug, month),
            slide_ids=rendered,
            failures=failures,
        )

    def _render_modules(self, document: DocumentSink, context: RenderContext,
                        modules: list[SlideModule],
                        cancel_event: threading.Event | None):
        rendered: list[str] = []
        failures: list[ModuleRenderFailure] = []
        for module in modules:
            _check_cancelled(cancel_event, context.customer.customer_id, context.month)
            slide_mark = document.slide_count
            page_mark = context.pages.mark()
            try:
                document = module.render(document, context)
            except Exception as exc:
                logger.warning("Slide module %s failed for customer %s %s: %s",
                               module.id, context.customer.customer_id,
                               context.month, exc, exc_info=True)
                document.truncate(slide_mark)
                context.pages.rewind(page_mark)
                failures.append(ModuleRenderFailure(
                    module.id, exc,
                    {"customer_id": context.customer.customer_id,
                     "month": context.month},
                ))
                continue
            rendered.append(module.id)
        return rendered, failures


def _check_cancelled(cancel_event: threading.Event | None, customer_id: str,
                     month: str) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Report for customer %s %s cancelled", customer_id, month)
        raise ReportCancelled("Report generation cancelled",
                              {"customer_id": customer_id, "month": month})

"""Tests for the document composer: selection, isolation, cancellation."""

import dataclasses
import io
import threading
from unittest.mock import MagicMock

import pytest
from pptx import Presentation

from conftest import InMemoryAds, InMemoryDirectory, InMemoryStore
from social_report.errors import (
    CustomerNotFound,
    FatalComposerFailure,
    ModuleRenderFailure,
    ReportCancelled,
)
from social_report.generator.assets import AssetCache
from social_report.generator.composer import DocumentComposer, report_filename
from social_report.generator.document import RecordingDocument
from social_report.schema.models import PPTX_MIME_TYPE, Platform, ReportRequest
from social_report.slides import REGISTRY
from social_report.slides.helpers import slide_header

FB, IG, ADS = Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS

FB_ONLY_IDS = [
    "cover", "executive_summary", "fb_divider", "fb_kpis", "fb_top_posts",
    "fb_videos", "fb_reach_chart", "fb_followers", "summary", "contact",
]


class RecordingFactory:
    """document_factory that keeps the documents it hands out."""

    def __init__(self, cls=RecordingDocument):
        self.cls = cls
        self.documents = []

    def __call__(self, settings):
        doc = self.cls(settings)
        self.documents.append(doc)
        return doc

    @property
    def last(self):
        return self.documents[-1]


def printed_pages(doc):
    """Slide position -> printed page number for slides with a footer."""
    pages = {}
    for idx in range(doc.slide_count):
        for call in doc.calls(idx, "text"):
            if call["box"]["left"] >= 8.5 and call["box"]["top"] >= 4.9:
                pages[idx + 1] = int(call["text"])
    return pages


def _replace(registry, module_id, render):
    return tuple(dataclasses.replace(m, render=render) if m.id == module_id else m
                 for m in registry)


@pytest.fixture
def directory(customer):
    return InMemoryDirectory(customer)


@pytest.fixture
def sessions(image_session):
    return lambda **kwargs: AssetCache(session=image_session, **kwargs)


@pytest.fixture
def composer(directory, store, ads_source, sessions):
    return DocumentComposer(directory, store, ads_source, asset_cache_factory=sessions)


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

class TestCompose:
    def test_pptx_result(self, composer):
        result = composer.compose(ReportRequest("42", "2024-03", (FB,)))
        assert result.filename == "mueller-soehne_2024-03.pptx"
        assert result.mime_type == PPTX_MIME_TYPE
        assert result.slide_ids == FB_ONLY_IDS
        assert result.failures == []
        prs = Presentation(io.BytesIO(result.content))
        assert len(prs.slides) == len(FB_ONLY_IDS)

    def test_full_report_page_numbers(self, directory, store, ads_source, sessions):
        factory = RecordingFactory()
        composer = DocumentComposer(directory, store, ads_source,
                                    document_factory=factory, asset_cache_factory=sessions)
        composer.compose(ReportRequest("42", "2024-03"))
        doc = factory.last
        assert doc.slide_count == 19
        pages = printed_pages(doc)
        assert pages
        assert all(position == page for position, page in pages.items())

    def test_customer_platforms_limit_request(self, customer, store, ads_source, sessions):
        customer.platforms = (FB,)
        composer = DocumentComposer(InMemoryDirectory(customer), store, ads_source,
                                    asset_cache_factory=sessions)
        result = composer.compose(ReportRequest("42", "2024-03", (FB, IG, ADS)))
        assert result.slide_ids == FB_ONLY_IDS

    def test_overrides(self, composer):
        request = ReportRequest("42", "2024-03", (FB,),
                                slide_overrides={"glossary": True, "fb_divider": False})
        ids = composer.compose(request).slide_ids
        assert "glossary" in ids
        assert "fb_divider" not in ids

    def test_zero_data(self, directory, sessions):
        factory = RecordingFactory()
        composer = DocumentComposer(directory, InMemoryStore(), InMemoryAds(),
                                    document_factory=factory, asset_cache_factory=sessions)
        result = composer.compose(ReportRequest("42", "2024-03"))
        assert result.failures == []
        assert "ads_campaign_cards" in result.slide_ids
        assert factory.last.slide_count == 18    # no campaign cards slide
        assert "Keine Daten für diesen Zeitraum verfügbar" in factory.last.all_texts()

    def test_deterministic(self, directory, store, ads_source, sessions):
        factory = RecordingFactory()
        composer = DocumentComposer(directory, store, ads_source,
                                    document_factory=factory, asset_cache_factory=sessions)
        request = ReportRequest("42", "2024-03", notes="Danke!")
        first = composer.compose(request).content
        second = composer.compose(request).content
        assert first == second

    def test_filename_helper(self):
        assert report_filename("beta-gmbh", "2023-12") == "beta-gmbh_2023-12.pptx"


# ---------------------------------------------------------------------------
# Request errors
# ---------------------------------------------------------------------------

class TestRequestErrors:
    def test_unknown_customer(self, composer):
        with pytest.raises(CustomerNotFound):
            composer.compose(ReportRequest("999", "2024-03"))

    @pytest.mark.parametrize("month", ["2024-13", "März", "2024/03"])
    def test_bad_month(self, composer, month):
        with pytest.raises(ValueError):
            composer.compose(ReportRequest("42", month))

    def test_platform_not_requestable(self):
        with pytest.raises(ValueError):
            ReportRequest("42", "2024-03", (Platform.GENERAL,))


# ---------------------------------------------------------------------------
# Failure isolation
# ---------------------------------------------------------------------------

def _half_rendered(document, context):
    slide_header(document, context, "Kaputt", "halb fertig")
    raise RuntimeError("renderer exploded")


class TestFailureIsolation:
    def test_failed_module_rolled_back(self, directory, store, ads_source, sessions):
        factory = RecordingFactory()
        registry = _replace(REGISTRY, "fb_top_posts", _half_rendered)
        composer = DocumentComposer(directory, store, ads_source, registry=registry,
                                    document_factory=factory, asset_cache_factory=sessions)
        result = composer.compose(ReportRequest("42", "2024-03", (FB,)))

        assert "fb_top_posts" not in result.slide_ids
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert isinstance(failure, ModuleRenderFailure)
        assert failure.module_id == "fb_top_posts"
        assert failure.details == {"customer_id": "42", "month": "2024-03"}

        doc = factory.last
        assert doc.slide_count == len(FB_ONLY_IDS) - 1
        assert "Kaputt" not in doc.all_texts()
        pages = printed_pages(doc)
        assert all(position == page for position, page in pages.items())

    def test_failure_logged(self, directory, store, ads_source, sessions, caplog):
        registry = _replace(REGISTRY, "summary", _half_rendered)
        composer = DocumentComposer(directory, store, ads_source, registry=registry,
                                    asset_cache_factory=sessions)
        with caplog.at_level("WARNING", logger="social_report.generator.composer"):
            composer.compose(ReportRequest("42", "2024-03", (FB,)))
        assert "Slide module summary failed" in caplog.text

    def test_serialisation_failure_is_fatal(self, directory, store, ads_source):
        class Broken(RecordingDocument):
            def to_bytes(self):
                raise OSError("disk full")

        assets = MagicMock()
        assets.get.return_value = None
        composer = DocumentComposer(directory, store, ads_source,
                                    document_factory=Broken,
                                    asset_cache_factory=lambda **kw: assets)
        with pytest.raises(FatalComposerFailure) as exc:
            composer.compose(ReportRequest("42", "2024-03", (FB,)))
        assert exc.value.details["customer_id"] == "42"
        assets.close.assert_called_once()


# ---------------------------------------------------------------------------
# Cancellation
# ---------------------------------------------------------------------------

class TestCancellation:
    def test_cancelled_before_start(self, composer):
        event = threading.Event()
        event.set()
        with pytest.raises(ReportCancelled):
            composer.compose(ReportRequest("42", "2024-03"), cancel_event=event)

    def test_cancelled_between_modules(self, directory, store, ads_source):
        event = threading.Event()

        def cancel(document, context):
            event.set()
            return document

        assets = MagicMock()
        assets.get.return_value = None
        registry = _replace(REGISTRY, "fb_kpis", cancel)
        composer = DocumentComposer(directory, store, ads_source, registry=registry,
                                    document_factory=RecordingDocument,
                                    asset_cache_factory=lambda **kw: assets)
        with pytest.raises(ReportCancelled):
            composer.compose(ReportRequest("42", "2024-03"), cancel_event=event)
        assets.close.assert_called_once()


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------

class TestAssets:
    def test_each_url_fetched_once(self, directory, store, ads_source, image_session):
        composer = DocumentComposer(
            directory, store, ads_source,
            asset_cache_factory=lambda **kw: AssetCache(session=image_session, **kw))
        composer.compose(ReportRequest("42", "2024-03", (FB,)))
        urls = [c.args[0] for c in image_session.get.call_args_list]
        assert urls == ["https://cdn.example.com/a.jpg"]

    def test_failed_images_do_not_fail_report(self, directory, store, ads_source):
        session = MagicMock()
        session.get.return_value = MagicMock(ok=False, status_code=404,
                                             headers={}, content=b"")
        composer = DocumentComposer(
            directory, store, ads_source,
            asset_cache_factory=lambda **kw: AssetCache(session=session, **kw))
        result = composer.compose(ReportRequest("42", "2024-03", (FB,)))
        assert result.failures == []
        assert session.get.call_count == 1

    def test_cache_created_with_settings(self, directory, store, ads_source):
        factory = MagicMock()
        factory.return_value.get.return_value = None
        composer = DocumentComposer(directory, store, ads_source,
                                    asset_cache_factory=factory)
        composer.compose(ReportRequest("42", "2024-03", (FB,)))
        factory.assert_called_once_with(timeout=10.0, min_bytes=1000)
        factory.return_value.close.assert_called_once()

"""Tests for the slide module catalog and slide list selection."""

import pytest

from social_report.schema.models import Category, Platform
from social_report.slides import REGISTRY, build_slide_list, get_module
from social_report.slides.base import PageCounter, SlideModule

FB, IG, ADS = Platform.FACEBOOK, Platform.INSTAGRAM, Platform.ADS


def _ids(modules):
    return [m.id for m in modules]


class TestCatalog:
    def test_ids_unique(self):
        ids = _ids(REGISTRY)
        assert len(ids) == len(set(ids))

    def test_every_module_callable(self):
        for module in REGISTRY:
            assert callable(module.render), module.id

    def test_glossary_off_by_default(self):
        assert get_module("glossary").default_enabled is False

    def test_unknown_module(self):
        with pytest.raises(KeyError):
            get_module("nope")

    def test_cover_first_contact_last(self):
        ordered = build_slide_list([FB, IG, ADS])
        assert ordered[0].id == "cover"
        assert ordered[-1].id == "contact"


class TestBuildSlideList:
    def test_full_report_order(self):
        assert _ids(build_slide_list([FB, IG, ADS])) == [
            "cover", "executive_summary",
            "fb_divider", "fb_kpis", "fb_top_posts", "fb_videos",
            "fb_reach_chart", "fb_followers",
            "ig_divider", "ig_kpis", "ig_top_posts", "ig_reels", "ig_reach_chart",
            "ads_divider", "ads_campaigns", "ads_ppas", "ads_campaign_cards",
            "summary", "contact",
        ]

    def test_facebook_only(self):
        assert _ids(build_slide_list([FB])) == [
            "cover", "executive_summary", "fb_divider", "fb_kpis", "fb_top_posts",
            "fb_videos", "fb_reach_chart", "fb_followers", "summary", "contact",
        ]

    def test_no_platforms_keeps_general_modules(self):
        assert _ids(build_slide_list([])) == [
            "cover", "executive_summary", "summary", "contact"]

    def test_overrides(self):
        ids = _ids(build_slide_list([IG], {"glossary": True, "ig_divider": False}))
        assert "glossary" in ids
        assert "ig_divider" not in ids
        assert ids.index("glossary") == ids.index("summary") + 1

    def test_cover_cannot_be_disabled(self):
        ids = _ids(build_slide_list([FB], {"cover": False, "contact": False}))
        assert ids[0] == "cover"
        assert "contact" not in ids

    def test_override_cannot_enable_other_platform(self):
        assert "fb_kpis" not in _ids(build_slide_list([IG], {"fb_kpis": True}))

    def test_order_independent_of_registration(self):
        reversed_registry = tuple(reversed(REGISTRY))
        assert _ids(build_slide_list([FB, IG, ADS], registry=reversed_registry)) == \
            _ids(build_slide_list([FB, IG, ADS]))

    def test_equal_orders_keep_catalog_order(self):
        noop = lambda document, context: document  # noqa: E731
        registry = (
            SlideModule("b", "B", Platform.GENERAL, Category.CONTENT, 5, noop),
            SlideModule("a", "A", Platform.GENERAL, Category.CONTENT, 5, noop),
            SlideModule("first", "F", Platform.GENERAL, Category.COVER, 0, noop),
        )
        assert _ids(build_slide_list([], registry=registry)) == ["first", "b", "a"]


class TestPageCounter:
    def test_sequential(self):
        pages = PageCounter()
        assert [pages.next(), pages.next()] == [1, 2]
        assert pages.issued == 2

    def test_rewind(self):
        pages = PageCounter()
        pages.next()
        mark = pages.mark()
        pages.next()
        pages.next()
        pages.rewind(mark)
        assert pages.next() == 2

    def test_rewind_never_moves_forward(self):
        pages = PageCounter()
        pages.rewind(10)
        assert pages.next() == 1

"""Tests for Untappd URL helpers."""

from datetime import UTC, datetime, timedelta

import pytest

from untappd_links.links import (
    build_beer_url,
    create_search_url,
    is_api_record_expired,
    sanitize_untappd_url,
    search_link_meta,
)
from untappd_links.models import UntappdSource


class TestSanitizeUntappdUrl:
    """Test sanitize_untappd_url."""

    def test_upgrades_http(self):
        assert sanitize_untappd_url("http://untappd.com/b/beer/1") == "https://untappd.com/b/beer/1"

    def test_protocol_relative(self):
        assert sanitize_untappd_url("//untappd.com/b/beer/1") == "https://untappd.com/b/beer/1"

    def test_subdomain_allowed(self):
        assert sanitize_untappd_url("https://www.untappd.com/b/x/2") == "https://www.untappd.com/b/x/2"

    @pytest.mark.parametrize(
        "value",
        [
            "https://example.com",
            "https://eviluntappd.com/b/x/1",
            "ftp://untappd.com/b/x/1",
            "untappd.com/b/x/1",
            "",
            None,
        ],
    )
    def test_rejects_off_domain_and_garbage(self, value):
        assert sanitize_untappd_url(value) is None


class TestCreateSearchUrl:
    """Test create_search_url."""

    def test_encodes_trimmed_name(self):
        assert create_search_url("  Sahti Lager ") == "https://untappd.com/search?q=Sahti%20Lager"

    def test_encodes_reserved_characters(self):
        url = create_search_url("Pale & Ale/#1?")
        assert url == "https://untappd.com/search?q=Pale%20%26%20Ale%2F%231%3F"

    def test_keeps_uri_component_safe_characters(self):
        assert create_search_url("O'Hara's (Irish)!") == (
            "https://untappd.com/search?q=O'Hara's%20(Irish)!"
        )

    def test_encodes_utf8(self):
        assert create_search_url("Päärynä") == "https://untappd.com/search?q=P%C3%A4%C3%A4ryn%C3%A4"


class TestBuildBeerUrl:
    """Test build_beer_url."""

    def test_builds_from_slug_and_bid(self):
        url = build_beer_url({"beer": {"beer_slug": "sahti", "bid": 123}})
        assert url == "https://untappd.com/b/sahti/123"

    def test_prefers_direct_url(self):
        url = build_beer_url(
            {"beer": {"beer_url": "http://untappd.com/b/direct/9", "beer_slug": "x", "bid": 1}}
        )
        assert url == "https://untappd.com/b/direct/9"

    def test_off_domain_direct_url_falls_back_to_slug(self):
        url = build_beer_url(
            {"beer": {"beer_url": "https://evil.example/b/x/1", "beer_slug": "x", "bid": 5}}
        )
        assert url == "https://untappd.com/b/x/5"

    def test_item_level_bid(self):
        assert build_beer_url({"beer": {"beer_slug": "x"}, "bid": 7}) == "https://untappd.com/b/x/7"

    def test_numeric_string_bid(self):
        assert build_beer_url({"beer": {"beer_slug": "x", "bid": "42"}}) == "https://untappd.com/b/x/42"

    @pytest.mark.parametrize(
        "item",
        [
            {"beer": {"beer_slug": "x", "bid": 0}},
            {"beer": {"beer_slug": "x", "bid": -3}},
            {"beer": {"beer_slug": "x", "bid": 1.5}},
            {"beer": {"beer_slug": "x", "bid": "abc"}},
            {"beer": {"beer_slug": "x", "bid": True}},
            {"beer": {"beer_slug": "x", "bid": 10**400}},
            {"beer": {"beer_slug": "", "bid": 1}},
            {"beer": {"bid": 1}},
            "not a dict",
            None,
        ],
    )
    def test_unusable_items(self, item):
        assert build_beer_url(item) is None


class TestIsApiRecordExpired:
    """Test is_api_record_expired."""

    def test_fresh_record(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        resolved = (now - timedelta(hours=1)).isoformat()
        assert is_api_record_expired(resolved, now=now) is False

    def test_old_record(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        resolved = (now - timedelta(hours=26)).isoformat()
        assert is_api_record_expired(resolved, now=now) is True

    def test_exactly_at_max_age_is_not_expired(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        resolved = (now - timedelta(hours=24)).isoformat()
        assert is_api_record_expired(resolved, now=now) is False

    def test_zulu_suffix(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        assert is_api_record_expired("2024-06-01T11:00:00.000Z", now=now) is False

    def test_custom_max_age(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        resolved = (now - timedelta(hours=2)).isoformat()
        assert is_api_record_expired(resolved, now=now, max_age=timedelta(hours=1)) is True

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-45"])
    def test_unparseable_is_expired(self, value):
        assert is_api_record_expired(value) is True


class TestSearchLinkMeta:
    """Test search_link_meta."""

    def test_fallback_meta(self):
        meta = search_link_meta("Sahti Lager", "2024-01-01T00:00:00+00:00")
        assert meta.untappd_url == "https://untappd.com/search?q=Sahti%20Lager"
        assert meta.untappd_source is UntappdSource.SEARCH_LINK
        assert meta.untappd_confidence is None
        assert meta.untappd_resolved_at == "2024-01-01T00:00:00+00:00"

    def test_default_timestamp(self):
        meta = search_link_meta("Sahti")
        assert datetime.fromisoformat(meta.untappd_resolved_at).tzinfo is not None

from decimal import Decimal
from unittest import mock

import httpx
import pytest

from common.exceptions import RateFeedError
from modules.pricing import feed_service
from modules.pricing.feed_service import (
    FallbackRateFeed, HttpJsonRateFeed, RateFeed, build_rate_feed, refresh_rate_from_feed,
)
from modules.pricing.rate_source import get_current_rate


def _response(payload, status_code=200):
    request = httpx.Request("GET", "https://feed.example/silver")
    return httpx.Response(status_code, json=payload, request=request)


class StaticFeed(RateFeed):
    def __init__(self, result, name="static"):
        self.result = result
        self.name = name
        self.calls = 0

    def fetch_silver_rate(self):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.mark.parametrize("payload", [
    {"rate_per_gram": 92.5},
    {"data": {"silver": {"rate_per_gram": "92.5"}}},
    {"data": [{"code": "GOLD", "price": 6100}, {"code": "silver", "price": 92.5}]},
])
def test_http_feed_understands_known_payloads(payload):
    with mock.patch.object(feed_service.httpx, "get", return_value=_response(payload)) as get:
        rate = HttpJsonRateFeed("https://feed.example/silver").fetch_silver_rate()
    assert rate == Decimal("92.5")
    assert get.call_count == 1


@pytest.mark.parametrize("payload", [{"rate_per_gram": 0}, {"price": 92.5}, [1, 2, 3]])
def test_http_feed_rejects_missing_or_non_positive_rate(payload):
    with mock.patch.object(feed_service.httpx, "get", return_value=_response(payload)):
        with pytest.raises(RateFeedError):
            HttpJsonRateFeed("https://feed.example/silver").fetch_silver_rate()


def test_http_errors_propagate():
    with mock.patch.object(feed_service.httpx, "get", return_value=_response({}, status_code=502)):
        with pytest.raises(httpx.HTTPStatusError):
            HttpJsonRateFeed("https://feed.example/silver").fetch_silver_rate()


def test_fallback_used_once_when_primary_fails():
    primary = StaticFeed(httpx.ConnectError("down"), name="primary")
    fallback = StaticFeed(Decimal("91"), name="fallback")
    assert FallbackRateFeed(primary, fallback).fetch_silver_rate() == Decimal("91")
    assert primary.calls == 1
    assert fallback.calls == 1


def test_primary_success_skips_fallback():
    primary = StaticFeed(Decimal("90"))
    fallback = StaticFeed(Decimal("91"))
    assert FallbackRateFeed(primary, fallback).fetch_silver_rate() == Decimal("90")
    assert fallback.calls == 0


def test_both_failing_raises_rate_feed_error():
    last = httpx.ReadTimeout("slow")
    feed = FallbackRateFeed(StaticFeed(RateFeedError("bad")), StaticFeed(last))
    with pytest.raises(RateFeedError) as excinfo:
        feed.fetch_silver_rate()
    assert excinfo.value.__cause__ is last


def test_build_rate_feed_from_settings():
    with mock.patch.object(feed_service.settings, "SILVER_FEED_URL", ""), \
            mock.patch.object(feed_service.settings, "SILVER_FEED_FALLBACK_URL", ""):
        assert build_rate_feed() is None
    with mock.patch.object(feed_service.settings, "SILVER_FEED_URL", "https://a"), \
            mock.patch.object(feed_service.settings, "SILVER_FEED_FALLBACK_URL", ""):
        assert isinstance(build_rate_feed(), HttpJsonRateFeed)
    with mock.patch.object(feed_service.settings, "SILVER_FEED_URL", "https://a"), \
            mock.patch.object(feed_service.settings, "SILVER_FEED_FALLBACK_URL", "https://b"):
        assert isinstance(build_rate_feed(), FallbackRateFeed)


def test_refresh_appends_a_sample(db):
    sample = refresh_rate_from_feed(db, StaticFeed(Decimal("93.25")))
    db.commit()
    assert sample.created_by == "system:feed"
    assert get_current_rate(db) == Decimal("93.25")


def test_refresh_wraps_transport_errors(db):
    cause = httpx.ConnectError("down")
    with pytest.raises(RateFeedError) as excinfo:
        refresh_rate_from_feed(db, StaticFeed(cause))
    assert excinfo.value.__cause__ is cause
    assert get_current_rate(db) == 0

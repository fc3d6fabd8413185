"""
Pricing Module - External Silver Rate Feed
===========================================
Fetches the live silver rate (₹ per gram) from configured JSON endpoints.

Strategies share one interface (`fetch_silver_rate`). The fallback chain is
assembled once and asked once per refresh; it does not retry.

Accepted payloads:
    {"rate_per_gram": 92.5}
    {"data": {"silver": {"rate_per_gram": 92.5}}}
    {"data": [{"code": "SILVER", "price": 92.5}, ...]}
"""

import logging
from decimal import Decimal
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from common.exceptions import RateFeedError
from common.helpers import safe_decimal
from config import settings

logger = logging.getLogger("silverline.pricing.feed")

FEED_USER_AGENT = "SilverLine-RateFeed/1.0"


class RateFeed:
    """Interface: return a positive silver rate per gram or raise."""
    name = "feed"

    def fetch_silver_rate(self) -> Decimal:
        raise NotImplementedError


class HttpJsonRateFeed(RateFeed):

    def __init__(self, url: str, timeout: float = settings.SILVER_FEED_TIMEOUT, name: str = None):
        self.url = url
        self.timeout = timeout
        self.name = name or url

    def fetch_silver_rate(self) -> Decimal:
        """
        Raises:
            RateFeedError: If the response has no positive silver rate.
            httpx.HTTPError: On network/HTTP errors.
        """
        resp = httpx.get(self.url, headers={"User-Agent": FEED_USER_AGENT}, timeout=self.timeout)
        resp.raise_for_status()
        rate = _extract_rate(resp.json())
        if rate is None or rate <= 0:
            raise RateFeedError(f"Invalid silver rate from {self.name}: {rate}")
        logger.info(f"Fetched silver rate from {self.name}: ₹{rate}/g")
        return rate


class FallbackRateFeed(RateFeed):
    """Primary first, fallback once if the primary fails."""

    def __init__(self, primary: RateFeed, fallback: RateFeed):
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name} -> {fallback.name}"

    def fetch_silver_rate(self) -> Decimal:
        try:
            return self.primary.fetch_silver_rate()
        except (httpx.HTTPError, RateFeedError, ValueError) as e:
            logger.warning(f"Primary rate feed {self.primary.name} failed: {e}; trying {self.fallback.name}")
        try:
            return self.fallback.fetch_silver_rate()
        except (httpx.HTTPError, RateFeedError, ValueError) as e:
            raise RateFeedError(f"All rate feeds failed (last: {self.fallback.name}: {e})") from e


def _extract_rate(payload) -> Optional[Decimal]:
    if not isinstance(payload, dict):
        return None
    if "rate_per_gram" in payload:
        return safe_decimal(payload["rate_per_gram"], default=None)
    data = payload.get("data")
    if isinstance(data, dict):
        silver = data.get("silver") or data.get("SILVER")
        if isinstance(silver, dict):
            return safe_decimal(silver.get("rate_per_gram", silver.get("price")), default=None)
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and str(item.get("code", "")).upper() == "SILVER":
                return safe_decimal(item.get("rate_per_gram", item.get("price")), default=None)
    return None


def build_rate_feed() -> Optional[RateFeed]:
    """Feed chain from settings; None when no feed URL is configured."""
    urls = [u for u in (settings.SILVER_FEED_URL, settings.SILVER_FEED_FALLBACK_URL) if u]
    if not urls:
        return None
    feeds = [HttpJsonRateFeed(u) for u in urls]
    if len(feeds) == 1:
        return feeds[0]
    return FallbackRateFeed(feeds[0], feeds[1])


def refresh_rate_from_feed(db: Session, feed: RateFeed):
    """Fetch once and append as a new rate sample. Caller must commit."""
    from modules.pricing.rate_source import record_rate

    try:
        rate = feed.fetch_silver_rate()
    except (httpx.HTTPError, ValueError) as e:
        raise RateFeedError(f"Rate feed {feed.name} unavailable: {e}") from e
    return record_rate(db, rate, created_by="system:feed")

# src/kzrate/adapters/crawlers/base.py
"""
Base Crawler with Caching Mechanism

This module provides a base class for web crawlers with built-in caching
so that a burst of manual /trigger runs does not hammer the source site.

Files that USE this module:
- kzrate.adapters.crawlers.kurskz_crawler (KursKzCrawler extends BaseCrawler)

Files that this module USES:
- kzrate.domain.models (RawQuote)
- kzrate.domain.errors (FetchFailedError)
"""

from __future__ import annotations

import logging
import math
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

from kzrate.domain.errors import FetchFailedError
from kzrate.domain.models import RawQuote

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class BaseCrawler(ABC):
    """
    Base class for quote crawlers with TTL-based caching.

    A cache TTL of zero minutes disables caching.
    """

    def __init__(
        self,
        url: str,
        cache_minutes: int = 0,
        timeout: int = 10,
    ):
        """
        Initialize base crawler.

        Args:
            url: URL to crawl
            cache_minutes: Cache TTL in minutes (minimum time between requests)
            timeout: HTTP request timeout in seconds
        """
        self.url = url
        self.timeout = timeout
        self.ttl = timedelta(minutes=cache_minutes)
        self._cache_data: Optional[list[RawQuote]] = None
        self._cache_ts: Optional[datetime] = None
        self._lock = threading.Lock()

    def _cache_valid(self) -> bool:
        """
        Check if cached data is still valid based on TTL.

        Returns:
            True if cache exists and is within TTL, False otherwise
        """
        if self._cache_data is None or self._cache_ts is None:
            return False
        return datetime.now(timezone.utc) - self._cache_ts < self.ttl

    def _fetch_html(self) -> str:
        """
        Fetch HTML content from the URL.

        Returns:
            HTML content as string

        Raises:
            FetchFailedError: If request fails or times out
        """
        try:
            log.info("Fetching HTML from %s", self.url)
            resp = requests.get(self.url, timeout=self.timeout, headers={"User-Agent": USER_AGENT})
            resp.raise_for_status()
            log.debug("Received HTML response, size: %d bytes", len(resp.text))
            return resp.text
        except requests.exceptions.Timeout as e:
            log.error("Crawler timeout after %d seconds for %s", self.timeout, self.url)
            raise FetchFailedError(f"Crawler timeout after {self.timeout}s for {self.url}") from e
        except requests.exceptions.RequestException as e:
            log.error("Crawler request failed for %s: %s", self.url, e)
            raise FetchFailedError(f"Crawler request failed for {self.url}: {e}") from e

    @abstractmethod
    def _parse_html(self, html: str) -> list[RawQuote]:
        """
        Parse HTML content and extract per-source quotes.

        Args:
            html: HTML content to parse

        Returns:
            Raw quotes, one per exchange point

        Raises:
            ValueError: If the page does not contain the expected data
        """
        raise NotImplementedError

    def _parse_price(self, value: object) -> Optional[float]:
        """
        Parse a price from a JSON number or a string like "485,50".

        Args:
            value: Raw price value

        Returns:
            Price as float, or None if it is missing, not a number or not finite
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            price = float(value)
        else:
            text = str(value).replace(" ", "").replace("\u00a0", "").replace(",", ".").strip()
            if not text:
                return None
            try:
                price = float(text)
            except ValueError:
                return None
        return price if math.isfinite(price) else None

    def fetch(self) -> list[RawQuote]:
        """
        Fetch and parse quotes from the website.

        Uses caching to prevent too frequent requests. If cache is valid,
        returns cached data. Otherwise, fetches fresh data and updates cache.
        Concurrent callers are serialized, so a second caller waiting on an
        in-flight fetch gets its cached result.

        Returns:
            Raw quotes

        Raises:
            FetchFailedError: If fetch or parsing fails
        """
        with self._lock:
            if self._cache_valid():
                log.debug("Using cached crawler data for %s", self.url)
                return self._cache_data  # type: ignore[return-value]

            html = self._fetch_html()
            try:
                result = self._parse_html(html)
            except (ValueError, TypeError, KeyError) as e:
                log.error("Failed to parse data from %s: %s", self.url, e, exc_info=True)
                raise FetchFailedError(f"Failed to parse data from {self.url}: {e}") from e

            self._cache_data = result
            self._cache_ts = datetime.now(timezone.utc)
            log.info(
                "Crawler data updated for %s: %d sources (ttl=%s minutes)",
                self.url, len(result), self.ttl.total_seconds() / 60,
            )
            return result

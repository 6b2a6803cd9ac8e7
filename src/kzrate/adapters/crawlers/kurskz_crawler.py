# src/kzrate/adapters/crawlers/kurskz_crawler.py
"""
kurs.kz Crawler

Crawler for the list of exchange points on kurs.kz. The page embeds every
exchange point as a JavaScript array::

    var punkts = [{"name": "...", "data": {"USD": [buy, sell], "RUB": [buy, sell]}}, ...];

Files that USE this module:
- kzrate.app (KursKzCrawler is the quote source of the monitoring service)

Files that this module USES:
- kzrate.adapters.crawlers.base (BaseCrawler base class)
- kzrate.domain.models (RawQuote, ExchangeQuote)
"""

from __future__ import annotations

import json
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from kzrate.adapters.crawlers.base import BaseCrawler
from kzrate.domain.models import ExchangeQuote, RawQuote

log = logging.getLogger(__name__)

PUNKTS_PATTERN = re.compile(r"var\s+punkts\s*=\s*(\[.*?\]);", re.DOTALL)


class KursKzCrawler(BaseCrawler):
    """
    Crawler for kurs.kz.

    Extracts USD and RUB buy/sell quotes for every listed exchange point.
    """

    def fetch_quotes(self) -> list[RawQuote]:
        """Quote source entry point used by the monitoring service."""
        return self.fetch()

    def _find_punkts_json(self, html: str) -> str:
        """
        Locate the ``punkts`` array literal.

        Script tags are searched first; some layouts inline it elsewhere, so
        the whole page is the fallback.
        """
        soup = BeautifulSoup(html, "html.parser")
        for script in soup.find_all("script"):
            text = script.string or script.get_text()
            if not text or "punkts" not in text:
                continue
            match = PUNKTS_PATTERN.search(text)
            if match:
                return match.group(1)

        match = PUNKTS_PATTERN.search(html)
        if match:
            return match.group(1)
        raise ValueError("Could not find 'var punkts' in HTML")

    def _parse_pair(self, values: object) -> Optional[ExchangeQuote]:
        """Turn a ``[buy, sell]`` array into a quote; None if malformed."""
        if not isinstance(values, list) or len(values) < 2:
            return None
        buy = self._parse_price(values[0])
        sell = self._parse_price(values[1])
        if buy is None or sell is None:
            return None
        return ExchangeQuote(buy=buy, sell=sell)

    def _parse_html(self, html: str) -> list[RawQuote]:
        """
        Parse kurs.kz HTML into raw quotes.

        Args:
            html: HTML content from kurs.kz

        Returns:
            One RawQuote per exchange point that lists USD or RUB

        Raises:
            ValueError: If the punkts array is missing or not a JSON array
        """
        punkts = json.loads(self._find_punkts_json(html))
        if not isinstance(punkts, list):
            raise ValueError("'punkts' is not a JSON array")
        log.debug("Parsed %d exchange points", len(punkts))

        quotes: list[RawQuote] = []
        for punkt in punkts:
            if not isinstance(punkt, dict):
                continue
            data = punkt.get("data")
            if not isinstance(data, dict):
                continue
            name = punkt.get("name") or "Unknown"

            usd = self._parse_pair(data.get("USD"))
            rub = self._parse_pair(data.get("RUB"))
            if usd is None and rub is None:
                log.debug("Exchange point '%s' lists neither USD nor RUB", name)
                continue
            quotes.append(RawQuote(source_name=str(name), usd=usd, rub=rub))

        if not quotes:
            log.warning("Could not extract any USD/RUB quotes from kurs.kz HTML")
        return quotes

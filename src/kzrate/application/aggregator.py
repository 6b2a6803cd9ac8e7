# src/kzrate/application/aggregator.py
"""
Rate Aggregator - Canonical Rate from Many Exchangers

kurs.kz lists every exchange point in the city, including low-volume kiosks
with outlier prices. The canonical rate for each pair averages only the best
``top_count`` offers from the user's point of view:

- canonical sell (user buys the currency): mean of the lowest exchanger sells
- canonical buy (user sells the currency): mean of the highest exchanger buys

Files that USE this module:
- kzrate.application.monitoring_service (aggregate_quotes in each cycle)
- tests.test_aggregator (unit tests)

Files that this module USES:
- kzrate.domain.models (RawQuote, ExchangeQuote, CanonicalRate, CurrencyPair)
- kzrate.domain.errors (NoQuotesFoundError)
"""
from __future__ import annotations

import logging
import math
from statistics import fmean
from typing import Optional, Sequence

from kzrate.domain.errors import NoQuotesFoundError
from kzrate.domain.models import CanonicalRate, CurrencyPair, ExchangeQuote, RawQuote

log = logging.getLogger(__name__)

TOP_QUOTES_COUNT = 5


def _pair_quote(raw: RawQuote, pair: CurrencyPair) -> Optional[ExchangeQuote]:
    if pair is CurrencyPair.USD_KZT:
        return raw.usd
    return raw.rub


def _usable(price: float) -> bool:
    return math.isfinite(price) and price > 0


def _valid_quotes(quotes: Sequence[RawQuote], pair: CurrencyPair) -> list[ExchangeQuote]:
    """
    Collect usable quotes for one pair.

    Sources without the pair are skipped and logged; quotes with a zero,
    negative or non-finite leg are placeholders and are dropped.
    """
    valid: list[ExchangeQuote] = []
    for raw in quotes:
        quote = _pair_quote(raw, pair)
        if quote is None:
            log.debug("Source '%s' has no %s quote, skipping", raw.source_name, pair.display_name)
            continue
        if not (_usable(quote.buy) and _usable(quote.sell)):
            log.debug(
                "Source '%s' has invalid %s quote (buy=%s, sell=%s), skipping",
                raw.source_name, pair.display_name, quote.buy, quote.sell,
            )
            continue
        valid.append(quote)
    return valid


def aggregate_pair(
    quotes: Sequence[RawQuote],
    pair: CurrencyPair,
    top_count: int = TOP_QUOTES_COUNT,
) -> ExchangeQuote:
    """
    Compute the canonical quote for one currency pair.

    Args:
        quotes: Raw quotes from all sources
        pair: Pair to aggregate
        top_count: How many best offers to average

    Returns:
        ExchangeQuote with trimmed-mean buy and sell legs

    Raises:
        NoQuotesFoundError: If no source has a valid quote for the pair
    """
    valid = _valid_quotes(quotes, pair)
    if not valid:
        log.error("No valid %s quotes among %d sources", pair.display_name, len(quotes))
        raise NoQuotesFoundError(pair)

    best_sells = sorted(q.sell for q in valid)[:top_count]
    best_buys = sorted((q.buy for q in valid), reverse=True)[:top_count]

    result = ExchangeQuote(buy=fmean(best_buys), sell=fmean(best_sells))
    log.info(
        "%s from %d sources: buy=%.2f (top %d), sell=%.2f (top %d)",
        pair.display_name, len(valid), result.buy, len(best_buys), result.sell, len(best_sells),
    )
    return result


def aggregate_quotes(
    quotes: Sequence[RawQuote],
    top_count: int = TOP_QUOTES_COUNT,
) -> CanonicalRate:
    """
    Turn raw per-source quotes into one canonical rate for both pairs.

    Args:
        quotes: Raw quotes from the quote source
        top_count: How many best offers to average per leg (default: 5)

    Returns:
        CanonicalRate for USD→KZT and RUB→KZT

    Raises:
        NoQuotesFoundError: If either pair has no valid quote
    """
    return CanonicalRate(
        usd_to_kzt=aggregate_pair(quotes, CurrencyPair.USD_KZT, top_count),
        rub_to_kzt=aggregate_pair(quotes, CurrencyPair.RUB_KZT, top_count),
    )

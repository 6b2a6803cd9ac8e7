# tests/test_aggregator.py
"""
Aggregator Tests - Unit Tests for Canonical Rate Computation

Covers the trimmed mean over the best offers, tolerance of sources that miss
a currency, and the error raised when a pair has no usable quotes.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- kzrate.application.aggregator (aggregate_pair, aggregate_quotes)
- kzrate.domain.models (RawQuote, ExchangeQuote, CurrencyPair)
- pytest (testing framework)
"""
import pytest

from kzrate.application.aggregator import aggregate_pair, aggregate_quotes
from kzrate.domain.errors import NoQuotesFoundError
from kzrate.domain.models import CurrencyPair, ExchangeQuote, RawQuote


def _usd_only(name, buy, sell):
    return RawQuote(source_name=name, usd=ExchangeQuote(buy=buy, sell=sell))


def _both(name, usd, rub):
    return RawQuote(
        source_name=name,
        usd=ExchangeQuote(buy=usd[0], sell=usd[1]),
        rub=ExchangeQuote(buy=rub[0], sell=rub[1]),
    )


class TestAggregatePair:
    def test_averages_five_lowest_sells_and_five_highest_buys(self):
        quotes = [
            _usd_only("a", 480.0, 486.0),
            _usd_only("b", 481.0, 487.0),
            _usd_only("c", 482.0, 488.0),
            _usd_only("d", 483.0, 489.0),
            _usd_only("e", 484.0, 490.0),
            _usd_only("f", 470.0, 495.0),
            _usd_only("g", 475.0, 500.0),
        ]

        result = aggregate_pair(quotes, CurrencyPair.USD_KZT)

        assert result.sell == pytest.approx((486 + 487 + 488 + 489 + 490) / 5)
        assert result.buy == pytest.approx((484 + 483 + 482 + 481 + 480) / 5)

    def test_fewer_sources_than_top_count_uses_all(self):
        quotes = [_usd_only("a", 480.0, 486.0), _usd_only("b", 482.0, 490.0)]

        result = aggregate_pair(quotes, CurrencyPair.USD_KZT, top_count=5)

        assert result.sell == pytest.approx(488.0)
        assert result.buy == pytest.approx(481.0)

    def test_single_source(self):
        result = aggregate_pair([_usd_only("a", 480.0, 486.0)], CurrencyPair.USD_KZT)
        assert result == ExchangeQuote(buy=480.0, sell=486.0)

    def test_custom_top_count(self):
        quotes = [
            _usd_only("a", 480.0, 486.0),
            _usd_only("b", 484.0, 488.0),
            _usd_only("c", 470.0, 500.0),
        ]

        result = aggregate_pair(quotes, CurrencyPair.USD_KZT, top_count=1)

        assert result.sell == 486.0
        assert result.buy == 484.0

    def test_skips_non_positive_quotes(self):
        quotes = [
            _usd_only("zero", 0.0, 0.0),
            _usd_only("negative", -1.0, 490.0),
            _usd_only("ok", 480.0, 486.0),
        ]

        result = aggregate_pair(quotes, CurrencyPair.USD_KZT)

        assert result == ExchangeQuote(buy=480.0, sell=486.0)

    def test_no_valid_quotes_raises_with_pair(self):
        quotes = [RawQuote(source_name="rub-only", rub=ExchangeQuote(buy=5.1, sell=5.3))]

        with pytest.raises(NoQuotesFoundError) as exc_info:
            aggregate_pair(quotes, CurrencyPair.USD_KZT)

        assert exc_info.value.pair is CurrencyPair.USD_KZT
        assert "USD → KZT" in str(exc_info.value)

    def test_empty_input_raises(self):
        with pytest.raises(NoQuotesFoundError):
            aggregate_pair([], CurrencyPair.RUB_KZT)


class TestAggregateQuotes:
    def test_builds_both_pairs(self):
        quotes = [
            _both("a", (480.0, 486.0), (5.10, 5.30)),
            _both("b", (482.0, 488.0), (5.15, 5.35)),
        ]

        rate = aggregate_quotes(quotes)

        assert rate.usd_to_kzt.sell == pytest.approx(487.0)
        assert rate.usd_to_kzt.buy == pytest.approx(481.0)
        assert rate.rub_to_kzt.sell == pytest.approx(5.325)
        assert rate.rub_to_kzt.buy == pytest.approx(5.125)

    def test_sources_missing_a_currency_are_tolerated(self):
        quotes = [
            _usd_only("usd-only", 480.0, 486.0),
            RawQuote(source_name="rub-only", rub=ExchangeQuote(buy=5.1, sell=5.3)),
        ]

        rate = aggregate_quotes(quotes)

        assert rate.usd_to_kzt == ExchangeQuote(buy=480.0, sell=486.0)
        assert rate.rub_to_kzt == ExchangeQuote(buy=5.1, sell=5.3)

    def test_missing_rub_everywhere_fails(self):
        with pytest.raises(NoQuotesFoundError) as exc_info:
            aggregate_quotes([_usd_only("a", 480.0, 486.0)])
        assert exc_info.value.pair is CurrencyPair.RUB_KZT

    def test_non_finite_quotes_are_skipped(self):
        quotes = [
            _usd_only("nan", float("nan"), float("nan")),
            _usd_only("inf-sell", 480.0, float("inf")),
            _usd_only("nan-buy", float("nan"), 487.0),
            _usd_only("ok", 482.0, 488.0),
        ]

        result = aggregate_pair(quotes, CurrencyPair.USD_KZT)

        assert result == ExchangeQuote(buy=482.0, sell=488.0)

    def test_only_non_finite_quotes_raise(self):
        with pytest.raises(NoQuotesFoundError):
            aggregate_pair([_usd_only("nan", float("nan"), float("nan"))], CurrencyPair.USD_KZT)


class TestTrimmedMeanMonotonicity:
    def test_adding_higher_sells_never_lowers_canonical_sell(self):
        quotes = [_usd_only("a", 480.0, 486.0), _usd_only("b", 481.0, 487.0)]
        previous = aggregate_pair(quotes, CurrencyPair.USD_KZT).sell

        for i, sell in enumerate([488.0, 489.0, 490.0, 495.0, 500.0, 510.0]):
            quotes.append(_usd_only(f"extra-{i}", 480.0, sell))
            current = aggregate_pair(quotes, CurrencyPair.USD_KZT).sell
            assert current >= previous
            if len(quotes) > 5:
                assert current == previous
            previous = current

        assert previous == pytest.approx((486 + 487 + 488 + 489 + 490) / 5)

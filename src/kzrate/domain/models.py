# src/kzrate/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core business concepts:
- Raw and canonical exchange quotes
- History records
- Look-back windows and threshold configuration
- Alerts produced by threshold detection

Files that USE this module:
- kzrate.application.* (all services use domain models)
- kzrate.adapters.* (adapters create and render domain models)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class ExchangeQuote:
    """
    Buy/sell pair for one currency.

    Leg names follow the exchanger's side of the deal: ``sell`` is what the
    exchanger sells the currency for (what the user pays when buying it),
    ``buy`` is what the exchanger pays when the user sells.
    """
    buy: float
    sell: float


@dataclass(frozen=True)
class RawQuote:
    """One exchanger row from the aggregator page. Either pair may be missing."""
    source_name: str
    usd: Optional[ExchangeQuote] = None
    rub: Optional[ExchangeQuote] = None


class CurrencyPair(Enum):
    """Tracked currency pairs with display name and flag."""

    USD_KZT = ("USD → KZT", "🇺🇸")
    RUB_KZT = ("RUB → KZT", "🇷🇺")

    def __init__(self, display_name: str, emoji: str):
        self.display_name = display_name
        self.emoji = emoji


@dataclass(frozen=True)
class CanonicalRate:
    """The system's single official rate for both pairs at one point in time."""
    usd_to_kzt: ExchangeQuote
    rub_to_kzt: ExchangeQuote

    def quote_for(self, pair: CurrencyPair) -> ExchangeQuote:
        if pair is CurrencyPair.USD_KZT:
            return self.usd_to_kzt
        return self.rub_to_kzt


@dataclass(frozen=True)
class HistoryRecord:
    """
    Stored observation of a canonical rate.

    Attributes:
        timestamp: UTC time the rate was observed
        rate: Canonical rate at that time
    """
    timestamp: datetime
    rate: CanonicalRate


class LookbackWindow(Enum):
    """How far back to look for a baseline, with a Russian display label."""

    HOUR = (timedelta(hours=1), "час")
    DAY = (timedelta(hours=24), "сутки")
    WEEK = (timedelta(hours=168), "неделю")
    MONTH = (timedelta(hours=720), "месяц")

    def __init__(self, duration: timedelta, label: str):
        self.duration = duration
        self.label = label


class AlertLevel(Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class Direction(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ThresholdConfig:
    """
    Warning and critical change thresholds (in percent) for one window.

    Raises:
        ValueError: If thresholds are not positive or warning >= critical
    """
    window: LookbackWindow
    warning_percent: float
    critical_percent: float

    def __post_init__(self) -> None:
        if self.warning_percent <= 0:
            raise ValueError(f"warning_percent must be positive for {self.window.name}")
        if self.warning_percent >= self.critical_percent:
            raise ValueError(
                f"warning_percent ({self.warning_percent}) must be below "
                f"critical_percent ({self.critical_percent}) for {self.window.name}"
            )


# Thresholds per window, tuned to typical KZT volatility:
# short windows react to small moves, long windows only to trends.
DEFAULT_THRESHOLDS: tuple[ThresholdConfig, ...] = (
    ThresholdConfig(LookbackWindow.HOUR, warning_percent=0.5, critical_percent=1.0),
    ThresholdConfig(LookbackWindow.DAY, warning_percent=1.0, critical_percent=2.0),
    ThresholdConfig(LookbackWindow.WEEK, warning_percent=2.0, critical_percent=4.0),
    ThresholdConfig(LookbackWindow.MONTH, warning_percent=3.0, critical_percent=5.0),
)


@dataclass(frozen=True)
class Alert:
    """
    A threshold breach for one (window, pair) combination.

    Attributes:
        level: WARNING or CRITICAL
        window: Look-back window the baseline came from
        pair: Currency pair that moved
        direction: UP or DOWN
        change_percent: Signed percentage change of the sell leg
        old_rate: Baseline sell rate
        new_rate: Current sell rate
    """
    level: AlertLevel
    window: LookbackWindow
    pair: CurrencyPair
    direction: Direction
    change_percent: float
    old_rate: float
    new_rate: float


@dataclass(frozen=True)
class CycleReport:
    """
    Outcome of one successful monitoring cycle.

    Attributes:
        rate: Canonical rate computed in this cycle
        alerts: Alerts raised (possibly empty)
        persisted: Whether the rate was written to history
        notified: Whether a message was sent
        pruned: Number of records pruned, or None if pruning failed
    """
    rate: CanonicalRate
    alerts: list[Alert] = field(default_factory=list)
    persisted: bool = False
    notified: bool = False
    pruned: Optional[int] = None

"""
Domain Layer - Pure Business Objects

This package contains domain models and business rules.
No dependencies on infrastructure or external systems.
"""

from kzrate.domain.models import (
    DEFAULT_THRESHOLDS,
    Alert,
    AlertLevel,
    CanonicalRate,
    CurrencyPair,
    CycleReport,
    Direction,
    ExchangeQuote,
    HistoryRecord,
    LookbackWindow,
    RawQuote,
    ThresholdConfig,
)
from kzrate.domain.errors import (
    DomainError,
    FetchFailedError,
    NoQuotesFoundError,
    NotifyFailedError,
    StorageUnavailableError,
)

__all__ = [
    "ExchangeQuote",
    "RawQuote",
    "CanonicalRate",
    "HistoryRecord",
    "CurrencyPair",
    "LookbackWindow",
    "AlertLevel",
    "Direction",
    "ThresholdConfig",
    "DEFAULT_THRESHOLDS",
    "Alert",
    "CycleReport",
    "DomainError",
    "FetchFailedError",
    "NoQuotesFoundError",
    "StorageUnavailableError",
    "NotifyFailedError",
]

# src/kzrate/domain/errors.py
"""
Domain Errors - Business Logic Exceptions

This module defines the domain-specific exceptions raised by the monitoring
pipeline. Fetch and notification errors end a cycle; storage errors are
recovered by the callers that can live without history.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kzrate.domain.models import CurrencyPair


class DomainError(Exception):
    """Base exception for domain errors."""
    pass


class FetchFailedError(DomainError):
    """Raised when the upstream quote source is unreachable or unparseable."""
    pass


class NoQuotesFoundError(DomainError):
    """Raised when aggregation found no usable quote for a currency pair."""

    def __init__(self, pair: "CurrencyPair"):
        self.pair = pair
        super().__init__(f"No valid quotes found for {pair.display_name}")


class StorageUnavailableError(DomainError):
    """Raised when a history store operation fails."""
    pass


class NotifyFailedError(DomainError):
    """Raised when an outbound notification could not be delivered."""
    pass

"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Rate limiting
- Logging configuration
- Injectable clock
"""

from kzrate.shared.clock import Clock, utc_now
from kzrate.shared.rate_limiter import RATE_LIMITS, RateLimiter, rate_limiter
from kzrate.shared.validators import (
    parse_positive_int,
    validate_bot_token,
    validate_chat_id,
    validate_username,
)

__all__ = [
    "Clock",
    "utc_now",
    "RateLimiter",
    "rate_limiter",
    "RATE_LIMITS",
    "validate_bot_token",
    "validate_chat_id",
    "validate_username",
    "parse_positive_int",
]

# src/kzrate/shared/rate_limiter.py
"""
Rate Limiter - Abuse Prevention for Bot Commands

Per-chat sliding-window rate limiting with a temporary block once the limit
is exceeded. /trigger scrapes kurs.kz and sends a message, so it gets the
tightest limit.

Files that USE this module:
- kzrate.adapters.telegram.handlers (rate_limiter and RATE_LIMITS for commands)

Files that this module USES:
- None (pure utility implementation)
"""
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Dict, Optional


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int
    time_window: int  # in seconds
    block_duration: int = 300


class RateLimiter:
    """Simple in-memory rate limiter."""

    def __init__(self, time_source: Callable[[], float] = time.time):
        self._time = time_source
        self._requests: Dict[str, deque] = defaultdict(deque)
        self._blocked: Dict[str, float] = {}

    def _prune(self, identifier: str, config: RateLimitConfig, now: float) -> deque:
        cutoff = now - config.time_window
        requests = self._requests[identifier]
        while requests and requests[0] < cutoff:
            requests.popleft()
        return requests

    def is_allowed(self, identifier: str, config: RateLimitConfig) -> bool:
        """
        Check if a request is allowed for the given identifier and record it.

        Args:
            identifier: Unique identifier (e.g., "trigger:chat:123")
            config: Rate limit configuration

        Returns:
            True if request is allowed, False if rate limited
        """
        now = self._time()

        if identifier in self._blocked:
            if now < self._blocked[identifier]:
                return False
            del self._blocked[identifier]

        requests = self._prune(identifier, config, now)
        if len(requests) >= config.max_requests:
            self._blocked[identifier] = now + config.block_duration
            return False

        requests.append(now)
        return True

    def get_reset_time(self, identifier: str, config: RateLimitConfig) -> Optional[float]:
        """
        Get when the identifier may issue requests again.

        Returns:
            Unix timestamp when the limit resets, or None if nothing is recorded
        """
        if identifier in self._blocked:
            return self._blocked[identifier]

        requests = self._requests[identifier]
        if not requests:
            return None
        return requests[0] + config.time_window


rate_limiter = RateLimiter()

RATE_LIMITS = {
    "trigger": RateLimitConfig(max_requests=3, time_window=60),
    "read_command": RateLimitConfig(max_requests=10, time_window=60),
}

# tests/test_shared.py
"""
Shared Utilities Tests - Rate Limiter and Validators

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- kzrate.shared.rate_limiter (RateLimiter, RateLimitConfig)
- kzrate.shared.validators (validation helpers)
- pytest (testing framework)
"""
from kzrate.shared.rate_limiter import RateLimitConfig, RateLimiter
from kzrate.shared.validators import (
    parse_positive_int,
    validate_bot_token,
    validate_chat_id,
    validate_username,
)


class FakeTime:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestRateLimiter:
    def test_allows_up_to_limit_then_blocks(self):
        limiter = RateLimiter(time_source=FakeTime())
        config = RateLimitConfig(max_requests=2, time_window=60, block_duration=300)

        assert limiter.is_allowed("a", config)
        assert limiter.is_allowed("a", config)
        assert not limiter.is_allowed("a", config)

    def test_identifiers_are_independent(self):
        limiter = RateLimiter(time_source=FakeTime())
        config = RateLimitConfig(max_requests=1, time_window=60)

        assert limiter.is_allowed("a", config)
        assert limiter.is_allowed("b", config)

    def test_block_expires(self):
        clock = FakeTime()
        limiter = RateLimiter(time_source=clock)
        config = RateLimitConfig(max_requests=1, time_window=60, block_duration=300)

        limiter.is_allowed("a", config)
        assert not limiter.is_allowed("a", config)
        assert limiter.get_reset_time("a", config) == 1300.0

        clock.now += 301
        assert limiter.is_allowed("a", config)

    def test_window_slides(self):
        clock = FakeTime()
        limiter = RateLimiter(time_source=clock)
        config = RateLimitConfig(max_requests=1, time_window=60, block_duration=0)

        assert limiter.is_allowed("a", config)
        clock.now += 61
        assert limiter.is_allowed("a", config)

    def test_reset_time_unknown_identifier(self):
        limiter = RateLimiter(time_source=FakeTime())
        assert limiter.get_reset_time("nobody", RateLimitConfig(1, 60)) is None


class TestValidators:
    def test_chat_id(self):
        assert validate_chat_id("-1001234567890")
        assert validate_chat_id("123456789")
        assert validate_chat_id("@kz_rates")
        assert not validate_chat_id("")
        assert not validate_chat_id("@bad name")
        assert not validate_chat_id("12a")

    def test_bot_token(self):
        assert validate_bot_token("123456789:" + "a" * 35)
        assert not validate_bot_token("123:short")
        assert not validate_bot_token("")

    def test_username(self):
        assert validate_username("@rate_admin")
        assert validate_username("rate_admin")
        assert not validate_username("abc")

    def test_parse_positive_int(self):
        assert parse_positive_int("5") == 5
        assert parse_positive_int(" 7 ") == 7
        assert parse_positive_int("80", max_val=50) == 50
        assert parse_positive_int("0") is None
        assert parse_positive_int("-3") is None
        assert parse_positive_int("ten") is None
        assert parse_positive_int("") is None

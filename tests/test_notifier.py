# tests/test_notifier.py
"""
Notifier Tests - Unit Tests for Telegram Message Delivery

Tests sending, the single retry after a 429 (RetryAfter) and wrapping of
Telegram errors. The Bot is an AsyncMock; asyncio.sleep is patched out.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- kzrate.adapters.telegram.notifier (TelegramNotifier)
- telegram.error (RetryAfter, TelegramError for mocking)
- unittest.mock (AsyncMock, patch)
- pytest (testing framework)
"""
import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from telegram.error import Forbidden, RetryAfter, TelegramError

from kzrate.adapters.telegram.notifier import TelegramNotifier, _retry_delay
from kzrate.domain.errors import NotifyFailedError


class TestSend:
    def test_sends_html_message(self):
        bot = AsyncMock()
        notifier = TelegramNotifier(bot)

        asyncio.run(notifier.send("-100123", "<b>hi</b>"))

        bot.send_message.assert_awaited_once_with(chat_id="-100123", text="<b>hi</b>", parse_mode="HTML")

    @patch("kzrate.adapters.telegram.notifier.asyncio.sleep", new_callable=AsyncMock)
    def test_retries_once_after_retry_after(self, mock_sleep):
        bot = AsyncMock()
        bot.send_message.side_effect = [RetryAfter(2), None]
        notifier = TelegramNotifier(bot)

        asyncio.run(notifier.send("42", "text"))

        assert bot.send_message.await_count == 2
        mock_sleep.assert_awaited_once_with(3.0)

    @patch("kzrate.adapters.telegram.notifier.asyncio.sleep", new_callable=AsyncMock)
    def test_second_retry_after_fails(self, mock_sleep):
        bot = AsyncMock()
        bot.send_message.side_effect = [RetryAfter(1), RetryAfter(1)]
        notifier = TelegramNotifier(bot)

        with pytest.raises(NotifyFailedError):
            asyncio.run(notifier.send("42", "text"))

        assert bot.send_message.await_count == 2

    def test_telegram_error_is_wrapped(self):
        bot = AsyncMock()
        bot.send_message.side_effect = Forbidden("bot was blocked by the user")
        notifier = TelegramNotifier(bot)

        with pytest.raises(NotifyFailedError, match="blocked"):
            asyncio.run(notifier.send("42", "text"))

    def test_generic_telegram_error_is_wrapped(self):
        bot = AsyncMock()
        bot.send_message.side_effect = TelegramError("Bad Request: chat not found")

        with pytest.raises(NotifyFailedError, match="chat not found"):
            asyncio.run(TelegramNotifier(bot).send("42", "text"))


class TestRetryDelay:
    def test_seconds(self):
        assert _retry_delay(5) == 5.0

    def test_timedelta(self):
        assert _retry_delay(timedelta(seconds=7)) == 7.0

# src/kzrate/adapters/telegram/notifier.py
"""
Telegram Notifier - Message Delivery

Sends formatted messages through the Telegram Bot API. A 429 response
(RetryAfter) is retried once after the advised delay; any other Telegram
failure is reported as NotifyFailedError.

Files that USE this module:
- kzrate.app (TelegramNotifier wraps application.bot)

Files that this module USES:
- kzrate.domain.errors (NotifyFailedError)
"""
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Union

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import RetryAfter, TelegramError

from kzrate.domain.errors import NotifyFailedError

logger = logging.getLogger(__name__)


def _retry_delay(retry_after: Union[int, float, timedelta]) -> float:
    """Seconds to wait; newer python-telegram-bot versions report a timedelta."""
    if isinstance(retry_after, timedelta):
        return retry_after.total_seconds()
    return float(retry_after)


class TelegramNotifier:
    """Notifier implementation backed by a python-telegram-bot Bot."""

    def __init__(self, bot: Bot, parse_mode: str = ParseMode.HTML):
        self.bot = bot
        self.parse_mode = parse_mode

    async def _send_once(self, destination: str, text: str) -> None:
        await self.bot.send_message(chat_id=destination, text=text, parse_mode=self.parse_mode)

    async def send(self, destination: str, text: str) -> None:
        """
        Send a message to a chat.

        Args:
            destination: Chat id or @channel username
            text: Message text in the configured parse mode

        Raises:
            NotifyFailedError: If Telegram rejects the message
        """
        try:
            try:
                await self._send_once(destination, text)
            except RetryAfter as e:
                delay = _retry_delay(e.retry_after)
                logger.warning("Telegram rate limit (429): retry after %s seconds", delay)
                await asyncio.sleep(delay + 1)
                await self._send_once(destination, text)
        except TelegramError as e:
            logger.error("Failed to send message to %s: %s", destination, e)
            raise NotifyFailedError(f"Failed to send message to {destination}: {e}") from e

        logger.info("Message sent to %s", destination)

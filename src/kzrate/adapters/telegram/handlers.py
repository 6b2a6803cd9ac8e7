# src/kzrate/adapters/telegram/handlers.py
"""
Telegram Handlers - Command Processing and User Interaction

This module contains all Telegram bot command handlers. It handles the public
commands (/start, /help, /trigger, /latest, /history) and the admin command
(/clear), and implements rate limiting, input validation and error replies.

Services are looked up in ``context.bot_data`` so that handlers stay free of
module-level state and can be driven from tests with a stub context.

Files that USE this module:
- kzrate.app (build_handlers function creates handler instances)
- kzrate.adapters.telegram.jobs (bot_data keys)

Files that this module USES:
- kzrate.application.monitoring_service (MonitoringService for /trigger)
- kzrate.application.history_service (HistoryService for /latest, /history, /clear)
- kzrate.adapters.formatting.formatter (message formatting)
- kzrate.shared.rate_limiter (rate limiting functionality)
- kzrate.shared.validators (parse_positive_int for /history argument)
"""
from __future__ import annotations

import asyncio
import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import CommandHandler, ContextTypes

from kzrate.adapters.formatting.formatter import (
    format_help_message,
    format_history,
    format_latest_record,
    format_start_message,
)
from kzrate.application.history_service import HistoryService
from kzrate.application.monitoring_service import MonitoringService
from kzrate.domain.errors import DomainError
from kzrate.shared.rate_limiter import RATE_LIMITS, rate_limiter
from kzrate.shared.validators import parse_positive_int

logger = logging.getLogger(__name__)

MONITORING_SERVICE_KEY = "monitoring_service"
HISTORY_SERVICE_KEY = "history_service"
CHAT_ID_KEY = "chat_id"
ADMIN_USERNAME_KEY = "admin_username"
INTERVAL_MINUTES_KEY = "interval_minutes"

DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 50

RATE_LIMITED_TEXT = "⏰ Слишком много запросов. Попробуйте позже."
ADMIN_ONLY_TEXT = "⚠️ Эта команда доступна только администратору."


def _check_rate_limit(update: Update, limit_type: str) -> bool:
    """
    Check if the chat is within configured rate limits.

    Buckets are namespaced per limit type so that /trigger does not share a
    budget with the read-only commands.

    Args:
        update: Telegram update object
        limit_type: Key in RATE_LIMITS (e.g., "trigger", "read_command")

    Returns:
        True if allowed, False if rate limit exceeded
    """
    config = RATE_LIMITS.get(limit_type)
    if not config:
        return True

    chat_id = update.effective_chat.id if update.effective_chat else update.effective_user.id
    identifier = f"{limit_type}:chat:{chat_id}"

    if not rate_limiter.is_allowed(identifier, config):
        logger.warning(
            "Rate limit exceeded for %s (reset_time=%s)",
            identifier,
            rate_limiter.get_reset_time(identifier, config),
        )
        return False
    return True


def _is_admin(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """
    Check if the user sending the update is the configured admin.

    Returns:
        True if the username matches ADMIN_USERNAME; False when no admin is configured
    """
    admin = (context.bot_data.get(ADMIN_USERNAME_KEY) or "").lstrip("@").lower()
    if not admin:
        return False
    user = update.effective_user
    uname = ((user.username if user else None) or "").lstrip("@").lower()
    return uname == admin


async def _run_blocking(func, *args):
    """Run a blocking store call on the default executor, off the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


async def _reply(update: Update, text: str) -> None:
    await update.message.reply_text(text, parse_mode=ParseMode.HTML)


# --- /start and /help: static texts ---
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - greeting with the list of commands."""
    logger.info("Handling /start command for chat %s", update.effective_chat.id)
    await _reply(update, format_start_message())


async def help_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - command reference."""
    logger.info("Handling /help command for chat %s", update.effective_chat.id)
    interval = context.bot_data.get(INTERVAL_MINUTES_KEY, 60)
    await _reply(update, format_help_message(interval))


# --- /trigger: manual monitoring cycle ---
async def trigger(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /trigger command - fetch and send current rates to this chat.

    The manual run always notifies and does not write history, so it cannot
    skew the baselines used by the scheduled checks.
    """
    chat_id = str(update.effective_chat.id)
    logger.info("Handling /trigger command for chat %s", chat_id)

    if not _check_rate_limit(update, "trigger"):
        await update.message.reply_text(RATE_LIMITED_TEXT)
        return

    service: MonitoringService = context.bot_data[MONITORING_SERVICE_KEY]
    try:
        report = await service.run_cycle(chat_id, force_notify=True, persist=False)
    except DomainError as e:
        logger.error("Failed to trigger currency update for chat %s: %s", chat_id, e)
        await update.message.reply_text(f"❌ Не удалось обновить курсы: {e}")
        return
    except Exception as e:
        logger.exception("Unexpected error while handling /trigger")
        await update.message.reply_text(f"❌ Не удалось обновить курсы: {e}")
        return

    logger.info("Manual currency update sent to chat %s (alerts=%d)", chat_id, len(report.alerts))


# --- /latest and /history: stored records ---
async def latest(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /latest command - show the most recent stored rate."""
    if not _check_rate_limit(update, "read_command"):
        await update.message.reply_text(RATE_LIMITED_TEXT)
        return

    service: HistoryService = context.bot_data[HISTORY_SERVICE_KEY]
    try:
        record = await _run_blocking(service.latest)
    except DomainError as e:
        logger.error("Failed to load latest rate: %s", e)
        await update.message.reply_text(f"❌ Не удалось получить последний курс: {e}")
        return

    await _reply(update, format_latest_record(record))


async def history(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /history [N] command - show the newest N stored records.

    N defaults to 10 and is capped at 50.
    """
    if not _check_rate_limit(update, "read_command"):
        await update.message.reply_text(RATE_LIMITED_TEXT)
        return

    limit = DEFAULT_HISTORY_LIMIT
    if context.args:
        parsed = parse_positive_int(context.args[0], max_val=MAX_HISTORY_LIMIT)
        if parsed is None:
            await update.message.reply_text(
                f"⚠️ Укажите количество записей от 1 до {MAX_HISTORY_LIMIT}, например: /history 5"
            )
            return
        limit = parsed

    service: HistoryService = context.bot_data[HISTORY_SERVICE_KEY]
    try:
        records = await _run_blocking(service.history, limit)
    except DomainError as e:
        logger.error("Failed to load currency history: %s", e)
        await update.message.reply_text(f"❌ Не удалось получить историю: {e}")
        return

    await _reply(update, format_history(records, limit))


# --- /clear: delete all history (admin only) ---
async def clear(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /clear command - delete every stored record (admin only)."""
    if not _is_admin(update, context):
        await update.message.reply_text(ADMIN_ONLY_TEXT)
        return

    service: HistoryService = context.bot_data[HISTORY_SERVICE_KEY]
    try:
        deleted = await _run_blocking(service.delete_all)
    except DomainError as e:
        logger.error("Failed to clear currency history: %s", e)
        await update.message.reply_text(f"❌ Не удалось очистить историю: {e}")
        return

    logger.info("History cleared by admin (%d records)", deleted)
    await update.message.reply_text(f"🗑 История очищена. Удалено записей: {deleted}")


def build_handlers():
    """
    Build and return list of Telegram bot handlers.

    Returns:
        List of handler instances for registration with bot
    """
    return [
        CommandHandler("start", start),
        CommandHandler("help", help_cmd),
        CommandHandler("trigger", trigger),
        CommandHandler("latest", latest),
        CommandHandler("history", history),
        CommandHandler("clear", clear),  # Admin only
    ]

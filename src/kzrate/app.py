# src/kzrate/app.py
"""
Application Entry Point - Bot Initialization and Startup

This module serves as the composition root for the KZRate Telegram bot.
It wires all dependencies and starts the bot application.

Files that USE this module:
- kzrate console script / python -m kzrate (module entry point)

Files that this module USES:
- kzrate.shared.logging_conf (setup_logging for logging configuration)
- kzrate.config (get_settings for configuration management)
- kzrate.adapters.crawlers (KursKzCrawler quote source)
- kzrate.adapters.persistence (SqliteHistoryStore)
- kzrate.adapters.telegram (notifier, handlers and scheduled job)
- kzrate.application (MonitoringService, HistoryService, ThresholdDetector)
"""
from __future__ import annotations

import logging
from datetime import timedelta

from telegram.error import Conflict, NetworkError, TimedOut
from telegram.ext import Application

from kzrate.adapters.crawlers import KursKzCrawler
from kzrate.adapters.persistence import SqliteHistoryStore
from kzrate.adapters.telegram.handlers import (
    ADMIN_USERNAME_KEY,
    CHAT_ID_KEY,
    HISTORY_SERVICE_KEY,
    INTERVAL_MINUTES_KEY,
    MONITORING_SERVICE_KEY,
    build_handlers,
)
from kzrate.adapters.telegram.jobs import monitoring_job
from kzrate.adapters.telegram.notifier import TelegramNotifier
from kzrate.application import HistoryService, MonitoringService, ThresholdDetector
from kzrate.config import get_settings
from kzrate.shared.logging_conf import setup_logging


def main() -> None:
    """
    Initialize and start the Telegram bot application.

    This function:
    1. Sets up logging and loads configuration
    2. Opens the history database and builds the services
    3. Registers command handlers
    4. Schedules the repeating monitoring job
    5. Starts the bot polling loop
    """
    settings = get_settings()

    setup_logging(
        level=logging.INFO,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger = logging.getLogger(__name__)

    store = SqliteHistoryStore(settings.database_path)
    crawler = KursKzCrawler(
        url=settings.kurs_url,
        cache_minutes=settings.kurs_cache_minutes,
        timeout=settings.http_timeout_seconds,
    )

    app = Application.builder().token(settings.bot_token).build()

    notifier = TelegramNotifier(app.bot)
    detector = ThresholdDetector(store, settings.threshold_table())
    monitoring = MonitoringService(
        source=crawler,
        store=store,
        detector=detector,
        notifier=notifier,
        retention_days=settings.retention_days,
        top_count=settings.top_quotes_count,
    )

    app.bot_data[MONITORING_SERVICE_KEY] = monitoring
    app.bot_data[HISTORY_SERVICE_KEY] = HistoryService(store)
    app.bot_data[CHAT_ID_KEY] = settings.chat_id
    app.bot_data[ADMIN_USERNAME_KEY] = settings.admin_username
    app.bot_data[INTERVAL_MINUTES_KEY] = settings.scheduler_interval_minutes

    for h in build_handlers():
        app.add_handler(h)

    app.job_queue.run_repeating(
        callback=monitoring_job,
        interval=timedelta(minutes=settings.scheduler_interval_minutes),
        first=0,  # start immediately at boot
        name="currency_monitor",
    )

    logger.info(
        "Starting bot polling… check interval=%d minutes, chat=%s, database=%s",
        settings.scheduler_interval_minutes,
        settings.chat_id,
        settings.database_path,
    )

    try:
        app.run_polling(drop_pending_updates=False)
    except Conflict as e:
        logger.error(
            "Telegram Conflict error: %s. Another bot instance is already polling for updates; "
            "stop it before starting this one.",
            e,
        )
        raise
    except (TimedOut, NetworkError) as e:
        logger.error(
            "Network error during bot operation (timeout connecting to Telegram API): %s (type: %s)",
            e,
            type(e).__name__,
            exc_info=True,
        )
        raise
    finally:
        store.close()
        logger.info("History database closed")


if __name__ == "__main__":
    main()

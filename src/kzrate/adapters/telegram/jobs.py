# src/kzrate/adapters/telegram/jobs.py
"""
Telegram Jobs - Scheduled Monitoring

The repeating job that runs one monitoring cycle against the configured chat.
Failures are logged and the job simply runs again on the next tick.

Files that USE this module:
- kzrate.app (monitoring_job is registered with the job queue)

Files that this module USES:
- kzrate.application.monitoring_service (MonitoringService via bot_data)
- kzrate.adapters.telegram.handlers (bot_data keys)
- kzrate.domain.errors (DomainError)
"""
from __future__ import annotations

import asyncio
import logging

from telegram.ext import ContextTypes

from kzrate.adapters.telegram.handlers import CHAT_ID_KEY, MONITORING_SERVICE_KEY
from kzrate.application.monitoring_service import MonitoringService
from kzrate.domain.errors import DomainError

logger = logging.getLogger(__name__)

_monitoring_job_lock = asyncio.Lock()


async def monitoring_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Scheduled job: fetch, persist, detect and notify.

    Includes re-entrancy protection: if the previous scheduled run is still
    active, this tick is skipped.
    """
    if _monitoring_job_lock.locked():
        logger.warning("monitoring_job: Skipping concurrent execution (previous job still running)")
        return

    async with _monitoring_job_lock:
        service: MonitoringService = context.bot_data[MONITORING_SERVICE_KEY]
        chat_id: str = context.bot_data[CHAT_ID_KEY]

        try:
            report = await service.run_cycle(chat_id)
        except DomainError as e:
            logger.error("Scheduled currency check failed: %s", e)
            return
        except Exception:
            logger.exception("Unexpected error in scheduled currency check")
            return

        logger.info(
            "Scheduled currency check done: alerts=%d, notified=%s, pruned=%s",
            len(report.alerts), report.notified, report.pruned,
        )

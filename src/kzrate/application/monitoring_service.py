# src/kzrate/application/monitoring_service.py
"""
Monitoring Service - One Fetch → Persist → Detect → Notify → Prune Cycle

This module runs the monitoring pipeline. Only the quote fetch/aggregation and
the notification can fail a cycle; history writes, threshold detection and
pruning are best-effort so a broken database never stops the rate from being
announced.

Files that USE this module:
- kzrate.adapters.telegram.jobs (scheduled cycle)
- kzrate.adapters.telegram.handlers (/trigger manual cycle)
- kzrate.app (constructs MonitoringService)
- tests.test_monitoring_service (unit tests)

Files that this module USES:
- kzrate.application.aggregator (aggregate_quotes)
- kzrate.application.threshold_detector (ThresholdDetector)
- kzrate.application.ports (QuoteSource, HistoryStore, Notifier)
- kzrate.adapters.formatting.formatter (format_rates_message)
- kzrate.shared.clock (utc_now)
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from kzrate.adapters.formatting.formatter import format_rates_message
from kzrate.application.aggregator import TOP_QUOTES_COUNT, aggregate_quotes
from kzrate.application.ports import HistoryStore, Notifier, QuoteSource
from kzrate.application.threshold_detector import ThresholdDetector
from kzrate.domain.models import Alert, CanonicalRate, CycleReport
from kzrate.shared.clock import Clock, utc_now

log = logging.getLogger(__name__)

RETENTION_DAYS = 30


class MonitoringService:
    """Runs monitoring cycles against injected collaborators."""

    def __init__(
        self,
        source: QuoteSource,
        store: HistoryStore,
        detector: ThresholdDetector,
        notifier: Notifier,
        clock: Clock = utc_now,
        retention_days: int = RETENTION_DAYS,
        top_count: int = TOP_QUOTES_COUNT,
    ):
        """
        Initialize monitoring service.

        Args:
            source: Raw quote source (kurs.kz crawler)
            store: History store for persistence and pruning
            detector: Threshold detector reading the same store
            notifier: Outbound message transport
            clock: Source of "now" for record timestamps
            retention_days: Records older than this are pruned after each cycle
            top_count: Number of best offers averaged per leg
        """
        self.source = source
        self.store = store
        self.detector = detector
        self.notifier = notifier
        self.clock = clock
        self.retention_days = retention_days
        self.top_count = top_count

    async def _run_blocking(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def run_cycle(
        self,
        destination: str,
        force_notify: bool = False,
        persist: bool = True,
    ) -> CycleReport:
        """
        Run one monitoring cycle.

        Steps, strictly in order:
        1. Fetch raw quotes and aggregate (errors propagate)
        2. Persist the rate if ``persist`` (errors logged)
        3. Detect threshold breaches (errors logged, treated as no alerts)
        4. Notify if there are alerts or ``force_notify`` (errors propagate)
        5. Prune old records, always attempted (errors logged)

        Args:
            destination: Chat to notify
            force_notify: Send the rates even when nothing breached
            persist: Store this observation in history

        Returns:
            CycleReport describing what happened

        Raises:
            FetchFailedError: If quotes could not be fetched
            NoQuotesFoundError: If a pair had no usable quotes
            NotifyFailedError: If the message could not be sent
        """
        log.info(
            "Monitoring cycle started (destination=%s, force_notify=%s, persist=%s)",
            destination, force_notify, persist,
        )

        quotes = await self._run_blocking(self.source.fetch_quotes)
        rate = aggregate_quotes(quotes, top_count=self.top_count)
        timestamp = self.clock()

        persisted = False
        if persist:
            persisted = await self._persist(rate, timestamp)
        else:
            log.info("Skipping history save (manual trigger)")

        alerts = await self._detect(rate)

        notified = False
        pruned: Optional[int] = None
        try:
            if alerts or force_notify:
                if alerts:
                    log.info("Found %d alerts, sending message to %s", len(alerts), destination)
                else:
                    log.info("Force notification enabled, sending message without alerts")
                message = format_rates_message(rate, alerts)
                log.debug("Message content:\n%s", message)
                await self.notifier.send(destination, message)
                notified = True
                log.info("Message sent successfully")
            else:
                log.info("No thresholds exceeded, skipping notification")
        finally:
            pruned = await self._prune()

        log.info(
            "Monitoring cycle finished: alerts=%d, persisted=%s, notified=%s",
            len(alerts), persisted, notified,
        )
        return CycleReport(
            rate=rate,
            alerts=alerts,
            persisted=persisted,
            notified=notified,
            pruned=pruned,
        )

    async def _persist(self, rate: CanonicalRate, timestamp) -> bool:
        try:
            await self._run_blocking(self.store.insert, rate, timestamp)
            log.info("History saved successfully")
            return True
        except Exception as e:
            log.error("Failed to save history: %s", e, exc_info=True)
            return False

    async def _detect(self, rate: CanonicalRate) -> list[Alert]:
        try:
            return await self._run_blocking(self.detector.detect, rate)
        except Exception as e:
            log.error("Failed to check thresholds: %s", e, exc_info=True)
            return []

    async def _prune(self) -> Optional[int]:
        try:
            removed = await self._run_blocking(self.store.delete_older_than, self.retention_days)
        except Exception as e:
            log.error("Failed to clean old records: %s", e, exc_info=True)
            return None
        if removed > 0:
            log.info("Cleaned %d old records from history", removed)
        return removed

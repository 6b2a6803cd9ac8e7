# src/kzrate/application/threshold_detector.py
"""
Threshold Detector - Multi-window Rate Change Alerts

For every configured look-back window the detector takes the freshest stored
record that is at least that old as the baseline, and compares the current
sell rate of each pair against it. A critical breach supersedes a warning for
the same (window, pair).

Files that USE this module:
- kzrate.application.monitoring_service (detect() in each cycle)
- kzrate.app (constructs the detector with the configured threshold table)
- tests.test_threshold_detector (unit tests)

Files that this module USES:
- kzrate.application.ports (HistoryStore protocol)
- kzrate.domain.models (Alert, ThresholdConfig and enums)
- kzrate.domain.errors (StorageUnavailableError)
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from kzrate.application.ports import HistoryStore
from kzrate.domain.errors import StorageUnavailableError
from kzrate.domain.models import (
    DEFAULT_THRESHOLDS,
    Alert,
    AlertLevel,
    CanonicalRate,
    CurrencyPair,
    Direction,
    ThresholdConfig,
)

log = logging.getLogger(__name__)


def change_percent(current: float, baseline: float) -> float:
    """Signed percentage change from baseline to current."""
    return (current - baseline) / baseline * 100.0


class ThresholdDetector:
    """Compares the current rate against historical baselines."""

    def __init__(
        self,
        store: HistoryStore,
        thresholds: Sequence[ThresholdConfig] = DEFAULT_THRESHOLDS,
    ):
        """
        Initialize detector.

        Args:
            store: History store used for baseline lookups
            thresholds: Threshold table, evaluated in order
        """
        self.store = store
        self.thresholds = tuple(thresholds)

    def detect(self, rate: CanonicalRate) -> list[Alert]:
        """
        Check every window and pair for threshold breaches.

        A storage failure for one window is logged and that window skipped.

        Args:
            rate: Current canonical rate

        Returns:
            Alerts in window order, USD before RUB within a window
        """
        log.info("Checking currency thresholds...")
        alerts: list[Alert] = []

        for config in self.thresholds:
            window = config.window
            try:
                baseline = self.store.nearest_before(window.duration)
            except StorageUnavailableError as e:
                log.error("Failed to get baseline for %s window: %s", window.name, e)
                continue

            if baseline is None:
                log.debug("No baseline for %s window yet, skipping", window.name)
                continue

            for pair in CurrencyPair:
                alert = self._check_pair(
                    pair=pair,
                    current=rate.quote_for(pair).sell,
                    baseline=baseline.rate.quote_for(pair).sell,
                    config=config,
                )
                if alert:
                    alerts.append(alert)

        if alerts:
            log.info("Found %d threshold alerts", len(alerts))
        else:
            log.info("No thresholds exceeded")
        return alerts

    def _check_pair(
        self,
        pair: CurrencyPair,
        current: float,
        baseline: float,
        config: ThresholdConfig,
    ) -> Optional[Alert]:
        if baseline <= 0:
            log.warning(
                "Invalid %s baseline %.4f for %s window, skipping",
                pair.display_name, baseline, config.window.name,
            )
            return None

        change = change_percent(current, baseline)
        magnitude = abs(change)

        if magnitude >= config.critical_percent:
            level = AlertLevel.CRITICAL
            limit = config.critical_percent
        elif magnitude >= config.warning_percent:
            level = AlertLevel.WARNING
            limit = config.warning_percent
        else:
            return None

        log.info(
            "%s: %s changed by %.2f%% over %s (threshold: %.2f%%)",
            level.name, pair.display_name, change, config.window.name, limit,
        )
        return Alert(
            level=level,
            window=config.window,
            pair=pair,
            direction=Direction.UP if change > 0 else Direction.DOWN,
            change_percent=change,
            old_rate=baseline,
            new_rate=current,
        )

"""
Application Layer - Use Cases and Services

This package contains application services that orchestrate domain logic.
Collaborators are reached through the protocols in ``ports``.
"""

from kzrate.application.aggregator import aggregate_pair, aggregate_quotes
from kzrate.application.history_service import HistoryService
from kzrate.application.monitoring_service import MonitoringService
from kzrate.application.threshold_detector import ThresholdDetector

__all__ = [
    "aggregate_pair",
    "aggregate_quotes",
    "ThresholdDetector",
    "MonitoringService",
    "HistoryService",
]

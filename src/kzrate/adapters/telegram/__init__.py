"""
Telegram Adapters - Bot Interface

This package contains the Telegram side of the bot:
- Command handlers
- Scheduled monitoring job
- Notifier used by the monitoring service
"""

from kzrate.adapters.telegram.handlers import build_handlers
from kzrate.adapters.telegram.jobs import monitoring_job
from kzrate.adapters.telegram.notifier import TelegramNotifier

__all__ = ["build_handlers", "monitoring_job", "TelegramNotifier"]

"""
Formatting Adapters - Message Presentation

This package contains formatters that turn domain objects into Telegram HTML.
"""

from kzrate.adapters.formatting.formatter import (
    format_alert,
    format_help_message,
    format_history,
    format_latest_record,
    format_rates_message,
    format_start_message,
)

__all__ = [
    "format_alert",
    "format_help_message",
    "format_history",
    "format_latest_record",
    "format_rates_message",
    "format_start_message",
]

# src/kzrate/adapters/formatting/formatter.py
"""
Message Formatter - Text Formatting and Presentation

This module handles all text formatting for Telegram messages: the rates
message with optional threshold alerts, stored history records, and the
static /start and /help texts. Messages use Telegram HTML markup.

Files that USE this module:
- kzrate.application.monitoring_service (format_rates_message for notifications)
- kzrate.adapters.telegram.handlers (history and help formatting)
- tests.test_formatter (unit tests)

Files that this module USES:
- kzrate.domain.models (CanonicalRate, Alert, HistoryRecord and enums)
"""
from __future__ import annotations

from typing import Optional, Sequence

from kzrate.domain.models import (
    Alert,
    AlertLevel,
    CanonicalRate,
    CurrencyPair,
    Direction,
    HistoryRecord,
)

SEPARATOR = "━━━━━━━━"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M UTC"


def _money(value: float) -> str:
    return f"{value:.2f}"


def _pair_lines(rate: CanonicalRate) -> list[str]:
    """
    Render both pairs.

    "Покупка" is what the user pays to buy the currency (the exchanger's sell
    leg); "Продажа" is what the user gets when selling it (the buy leg).
    """
    lines: list[str] = []
    for pair in CurrencyPair:
        quote = rate.quote_for(pair)
        if lines:
            lines.append("")
        lines.append(f"{pair.emoji} <b>{pair.display_name}</b>")
        lines.append(f"💵 Покупка: <code>{_money(quote.sell)}</code> ₸")
        lines.append(f"💸 Продажа: <code>{_money(quote.buy)}</code> ₸")
    return lines


def format_alert(alert: Alert) -> str:
    """
    Format a single alert as two lines.

    Example:
        📈 🇺🇸 <b>USD → KZT</b> вырос на <code>1.20%</code> за час
           <code>500.00</code> ₸ → <code>506.00</code> ₸
    """
    if alert.direction is Direction.UP:
        emoji, verb = "📈", "вырос"
    else:
        emoji, verb = "📉", "упал"

    return (
        f"{emoji} {alert.pair.emoji} <b>{alert.pair.display_name}</b> "
        f"{verb} на <code>{abs(alert.change_percent):.2f}%</code> за {alert.window.label}\n"
        f"   <code>{_money(alert.old_rate)}</code> ₸ → <code>{_money(alert.new_rate)}</code> ₸"
    )


def _alert_section(title: str, alerts: list[Alert]) -> list[str]:
    if not alerts:
        return []
    lines = ["", SEPARATOR, title]
    for alert in alerts:
        lines.append("")
        lines.append(format_alert(alert))
    return lines


def format_rates_message(rate: CanonicalRate, alerts: Sequence[Alert] = ()) -> str:
    """
    Format current rates with optional threshold alerts.

    Warnings come first, then critical changes; a section with no alerts is
    left out entirely.

    Args:
        rate: Canonical rate to show
        alerts: Alerts produced by threshold detection (may be empty)

    Returns:
        Telegram HTML message
    """
    lines = ["💱 <b>Курсы валют на kurs.kz</b>", ""]
    lines.extend(_pair_lines(rate))

    warnings = [a for a in alerts if a.level is AlertLevel.WARNING]
    critical = [a for a in alerts if a.level is AlertLevel.CRITICAL]
    lines.extend(_alert_section("⚠️ <b>ПРЕДУПРЕЖДЕНИЯ</b>", warnings))
    lines.extend(_alert_section("🚨 <b>КРИТИЧЕСКИЕ ИЗМЕНЕНИЯ</b>", critical))

    return "\n".join(lines)


def format_latest_record(record: Optional[HistoryRecord]) -> str:
    """Format the most recent stored record for /latest."""
    if record is None:
        return "📭 История курсов пуста."

    lines = [
        "🕐 <b>Последний сохранённый курс</b>",
        f"<i>{record.timestamp.strftime(TIMESTAMP_FORMAT)}</i>",
        "",
    ]
    lines.extend(_pair_lines(record.rate))
    return "\n".join(lines)


def format_history(records: Sequence[HistoryRecord], limit: int) -> str:
    """
    Format stored records for /history as one compact line per record.

    Args:
        records: Records newest first (already truncated)
        limit: Requested number of records, shown in the header

    Returns:
        Telegram HTML message
    """
    if not records:
        return "📭 История курсов пуста."

    lines = [f"📜 <b>История курсов</b> (последние {min(limit, len(records))})", ""]
    for record in records:
        usd = record.rate.usd_to_kzt
        rub = record.rate.rub_to_kzt
        lines.append(
            f"<code>{record.timestamp.strftime(TIMESTAMP_FORMAT)}</code>  "
            f"🇺🇸 {_money(usd.sell)}/{_money(usd.buy)}  "
            f"🇷🇺 {_money(rub.sell)}/{_money(rub.buy)}"
        )
    return "\n".join(lines)


def format_start_message() -> str:
    return (
        "👋 Привет! Я бот для отслеживания курсов валют.\n"
        "\n"
        "Доступные команды:\n"
        "/trigger - Обновить курсы валют\n"
        "/latest - Последний сохранённый курс\n"
        "/history - История курсов\n"
        "/help - Показать справку"
    )


def format_help_message(interval_minutes: int = 60) -> str:
    """Help text; mentions how often the scheduled update runs."""
    if interval_minutes % 60 == 0:
        hours = interval_minutes // 60
        every = "каждый час" if hours == 1 else f"каждые {hours} ч."
    else:
        every = f"каждые {interval_minutes} мин."

    return (
        "📖 Справка по командам бота:\n"
        "\n"
        "/trigger - Принудительно обновить и получить актуальные курсы USD→KZT и RUB→KZT\n"
        "/latest - Показать последний сохранённый курс\n"
        "/history [N] - Показать N последних записей истории (по умолчанию 10, максимум 50)\n"
        "/clear - Удалить всю историю (только для администратора)\n"
        "/start - Показать приветственное сообщение\n"
        "/help - Показать эту справку\n"
        "\n"
        f"ℹ️ Бот автоматически проверяет курсы валют {every} и сообщает о резких изменениях."
    )

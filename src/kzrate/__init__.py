# src/kzrate/__init__.py
"""
KZRate - Telegram Exchange Rate Monitor for Kazakhstan

A Telegram bot that tracks USD→KZT and RUB→KZT exchange rates from kurs.kz,
keeps a time series of canonical rates and alerts when the rate moves more
than a configured percentage over the last hour, day, week or month.
"""

__version__ = "1.0.0"

"""
Adapters - Infrastructure Layer

Concrete implementations of the application ports: the kurs.kz crawler,
SQLite history, Telegram delivery and message formatting.
"""

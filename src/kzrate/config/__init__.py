"""
Configuration Module

Provides centralized configuration management using Pydantic Settings.
Supports environment variables and a ``.env`` file.
"""

from kzrate.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

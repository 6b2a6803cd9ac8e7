# src/kzrate/shared/validators.py
"""
Input Validation Utilities

Validates the Telegram bot token, chat IDs and usernames used in settings
and command arguments.

Files that USE this module:
- kzrate.config.settings (Settings field validators)
- kzrate.adapters.telegram.handlers (parses /history arguments)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Optional


def validate_chat_id(chat_id: str) -> bool:
    """
    Validate Telegram chat ID format.

    Accepted forms:
    - @channelname (public channels)
    - -1001234567890 (supergroups/private channels)
    - -123456789 (basic groups)
    - 123456789 (users)

    Args:
        chat_id: Chat ID to validate

    Returns:
        True if valid, False otherwise
    """
    if not chat_id:
        return False

    if chat_id.startswith("@"):
        return bool(re.match(r"^@[a-zA-Z0-9_]+$", chat_id))
    return bool(re.match(r"^-?\d+$", chat_id))


def validate_bot_token(token: str) -> bool:
    """
    Validate Telegram bot token format (``123456789:ABCdef...``).

    Args:
        token: Bot token to validate

    Returns:
        True if valid, False otherwise
    """
    if not token:
        return False

    pattern = r"^\d{8,10}:[A-Za-z0-9_-]{35}$"
    return bool(re.match(pattern, token))


def validate_username(username: str) -> bool:
    """
    Validate Telegram username format (5-32 chars, leading @ optional).

    Args:
        username: Username to validate

    Returns:
        True if valid, False otherwise
    """
    if not username:
        return False

    clean_username = username.lstrip("@")
    return bool(re.match(r"^[a-zA-Z0-9_]{5,32}$", clean_username))


def parse_positive_int(value: str, max_val: Optional[int] = None) -> Optional[int]:
    """
    Parse a positive integer command argument.

    Args:
        value: Raw argument text
        max_val: Upper bound; larger values are clamped to it

    Returns:
        Parsed integer, or None if the text is not a positive integer
    """
    if not value or not value.strip().isdigit():
        return None

    number = int(value.strip())
    if number <= 0:
        return None
    if max_val is not None and number > max_val:
        return max_val
    return number

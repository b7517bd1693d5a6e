"""
Common utility functions and helpers.
"""
from datetime import datetime
from typing import Optional
import re
import time


def collapse_whitespace(text: str, separator: str = "-") -> str:
    """
    Replace every run of whitespace in *text* with *separator*.

    Args:
        text: Raw text string
        separator: Replacement for each whitespace run

    Returns:
        Text with whitespace runs collapsed
    """
    return re.sub(r"\s+", separator, text)


def build_export_filename(account_name: str, extension: str, timestamp_ms: Optional[int] = None) -> str:
    """
    Build the download name for an exported statement of work.

    Args:
        account_name: Display name of the account the SOW belongs to
        extension: File extension without the dot (pdf, docx, txt)
        timestamp_ms: Epoch milliseconds; defaults to now

    Returns:
        ``SOW-<account-name>-<timestamp>.<ext>``
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"SOW-{collapse_whitespace(account_name)}-{timestamp_ms}.{extension}"


def format_date(value: datetime) -> str:
    """Format a date the way en-US locales print it, e.g. ``3/7/2026``."""
    return f"{value.month}/{value.day}/{value.year}"


def truncate_text(text: str, max_length: int = 200, suffix: str = "...") -> str:
    """
    Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix

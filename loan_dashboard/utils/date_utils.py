"""Date manipulation and formatting utilities"""

from datetime import date, datetime, timedelta
from typing import Any


def trailing_window_start(days: int, today: date | None = None) -> date:
    """First load_date inside a window of `days` ending today"""
    return (today or date.today()) - timedelta(days=days)


def format_date(value: Any) -> str:
    """Render a date-like value as YYYY-MM-DD, or "" when it cannot be read"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str) and value:
        try:
            return date.fromisoformat(value[:10]).isoformat()
        except ValueError:
            return ""
    return ""


def format_timestamp(value: Any) -> str:
    """Render a datetime-like value as YYYY-MM-DD HH:MM:SS, or "" when absent"""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d 00:00:00")
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            return ""
    return ""

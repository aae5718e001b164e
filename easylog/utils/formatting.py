"""Formatting helpers used by console output."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from easylog.utils.dates import ensure_utc


def format_duration(duration: Optional[timedelta]) -> str:
    """Format a session duration as ``1h 05m`` or ``42m``."""
    if duration is None:
        return "in progress"
    minutes = max(int(duration.total_seconds()), 0) // 60
    hours, remaining = divmod(minutes, 60)
    if hours:
        return f"{hours}h {remaining:02d}m"
    return f"{remaining}m"


def format_weight(weight: float, unit: str = "kg") -> str:
    """Drop the trailing ``.0`` on whole weights."""
    text = str(int(weight)) if float(weight).is_integer() else f"{weight:.2f}".rstrip("0")
    return f"{text} {unit}".strip()


def format_volume(volume: float, unit: str = "kg") -> str:
    return f"{volume:,.0f} {unit}".strip()


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "-"
    return ensure_utc(value).strftime("%Y-%m-%d %H:%M")

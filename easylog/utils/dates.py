"""Timestamp helpers for persistence and CSV interchange."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from easylog.core.constants import CSV_DATE_FORMAT


def utc_now() -> datetime:
    """Current time as an aware UTC datetime truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_csv_date(value: datetime) -> str:
    """Format a timestamp the way the CSV export encodes it."""
    return ensure_utc(value).strftime(CSV_DATE_FORMAT)


def parse_csv_date(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 date-time string, returning None when it is not one."""
    raw = value.strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, CSV_DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        pass
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        # Date-only or naive values carry no offset; reject the former.
        if "T" not in raw and " " not in raw:
            return None
    return ensure_utc(parsed)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serialize an optional timestamp for JSON storage."""
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    """Deserialize an optional JSON timestamp."""
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))

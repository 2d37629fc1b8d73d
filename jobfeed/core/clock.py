"""Timezone helpers"""

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as date_parser


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo on read)"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
    """Parse an ISO-ish timestamp from a source payload.

    Returns ``default`` when the value is missing or unparseable.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if not value or not isinstance(value, str):
        return default
    try:
        return as_utc(date_parser.isoparse(value))
    except (ValueError, OverflowError):
        return default

"""Timezone-aware date/time helpers for the scheduler application."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'America/Los_Angeles')
    return ZoneInfo(tz_name)


def get_now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_timezone())


def parse_datetime(value, tz: ZoneInfo) -> datetime | None:
    """
    Parse an ISO-8601 string (or datetime) into an aware datetime.

    Naive values are read as wall-clock time in ``tz``. A trailing ``Z`` is
    accepted as UTC.

    Args:
        value: ISO string, datetime, or None/empty
        tz: Timezone applied to naive values

    Returns:
        Aware datetime, or None when value is empty

    Raises:
        ValueError: If the string is not a valid ISO-8601 datetime
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    else:
        raise ValueError(f'Unsupported datetime value: {value!r}')

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz)
    return dt


def to_storage(dt: datetime) -> str:
    """Serialize an aware datetime as a UTC ISO-8601 string (seconds precision)."""
    return dt.astimezone(timezone.utc).isoformat(timespec='seconds')


def from_storage(value: str) -> datetime:
    """Parse a stored UTC ISO-8601 string back into an aware datetime."""
    return datetime.fromisoformat(value)

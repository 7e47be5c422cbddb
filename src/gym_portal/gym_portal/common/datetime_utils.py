from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def now_utc() -> datetime:
    """Current time, timezone-aware.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Naive datetimes coming from the system of record are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_datetime(value: Any) -> Optional[datetime]:
    """Coerce a datetime, date or ISO-8601 string into an aware datetime.

    Returns None for empty or unparseable values. Date-only values are
    midnight UTC of that day.
    """

    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return ensure_aware(value)

    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return ensure_aware(datetime.fromisoformat(text))
        except ValueError:
            return None

    return None


def get_timezone(name: Optional[str]) -> tzinfo:
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        raise ValueError(f"Unknown timezone: {name!r}") from None


def local_date(value: datetime, tz: tzinfo) -> date:
    """Calendar day of an instant in the facility timezone."""
    return ensure_aware(value).astimezone(tz).date()


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None

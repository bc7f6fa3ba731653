"""Date helpers for registration windows and document timestamps.

All stored timestamps are timezone-aware UTC. Registration bounds given as
bare dates cover the whole calendar day: a start bound opens at midnight and
an end bound closes at 23:59:59.999.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Union

DateLike = Union[date, datetime]

END_OF_DAY = time(23, 59, 59, 999000)
DISPLAY_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def start_of_day(day: date, tz: tzinfo = timezone.utc) -> datetime:
    return ensure_utc(datetime.combine(day, time.min, tzinfo=tz))


def end_of_day(day: date, tz: tzinfo = timezone.utc) -> datetime:
    return ensure_utc(datetime.combine(day, END_OF_DAY, tzinfo=tz))


def window_start(value: Optional[DateLike], tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Normalize a registration-open bound."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return start_of_day(value, tz)


def window_end(value: Optional[DateLike], tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Normalize a registration-close bound."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    return end_of_day(value, tz)


def parse_whole_day(value: Optional[str], tz: tzinfo = timezone.utc) -> Optional[datetime]:
    """Parse ``YYYY-MM-DD`` into the last instant of that day."""
    if value is None:
        return None
    return end_of_day(datetime.strptime(value, DISPLAY_FORMAT).date(), tz)


def format_for_display(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(DISPLAY_FORMAT)


def to_iso(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))

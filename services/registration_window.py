"""Registration window classification."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.constants import WindowStatus
from core.exceptions import WindowClosedError, WindowNotOpenError
from database.models import Event
from utils.dates import ensure_utc, utc_now

WINDOW_LABELS = {
    WindowStatus.OPEN: "",
    WindowStatus.NOT_YET_OPEN: "Registration opens soon",
    WindowStatus.CLOSED: "Registration closed",
}


def check_window(event: Event, now: Optional[datetime] = None) -> WindowStatus:
    """Classify ``now`` against the event's inclusive registration bounds.

    A missing bound leaves that side open.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    if event.registration_start is not None and now < event.registration_start:
        return WindowStatus.NOT_YET_OPEN
    if event.registration_end is not None and now > event.registration_end:
        return WindowStatus.CLOSED
    return WindowStatus.OPEN


def is_registration_open(event: Event, now: Optional[datetime] = None) -> bool:
    return check_window(event, now) is WindowStatus.OPEN


def describe_window(event: Event, now: Optional[datetime] = None) -> str:
    return WINDOW_LABELS[check_window(event, now)]


def require_open_window(event: Event, now: Optional[datetime] = None) -> None:
    status = check_window(event, now)
    if status is WindowStatus.NOT_YET_OPEN:
        raise WindowNotOpenError(f"Registration for event {event.event_id} has not yet started")
    if status is WindowStatus.CLOSED:
        raise WindowClosedError(f"Registration for event {event.event_id} has ended")

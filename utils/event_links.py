"""Event link payloads carried by event QR codes."""

from core.constants import EventLinkDefaults


def format_event_link(event_id: int) -> str:
    return f"{EventLinkDefaults.PREFIX}{event_id}"


def parse_event_link(payload: str) -> int | None:
    """Extract the event ID from a scanned payload, or None if it is not one."""
    if not payload or not payload.startswith(EventLinkDefaults.PREFIX):
        return None
    id_str = payload[len(EventLinkDefaults.PREFIX):].strip()
    if not id_str.isdigit():
        return None
    return int(id_str)

"""Domain records and their document encodings.

Field names in documents follow the store layout shared with other clients
(``uniqueEventID``, ``waitListEntrants``, ``eventOrganizerHardwareID``, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, List, Optional, Union

from core import get_logger
from core.constants import EntrantStatus, UserType
from core.exceptions import (
    AlreadyAcceptedError,
    AlreadyDeclinedError,
    AlreadyInvitedError,
    AlreadyOnWaitlistError,
    NotInvitedError,
    NotOnWaitlistError,
    StateConflictError,
    ValidationError,
)
from utils.dates import from_iso, to_iso

logger = get_logger(__name__)

Document = Dict[str, Any]


def _require(doc: Document, key: str) -> Any:
    value = doc.get(key)
    if value is None:
        raise ValidationError(f"Document is missing required field '{key}'")
    return value


def require_entrant_id(entrant_id: Optional[str]) -> str:
    if not entrant_id:
        raise ValidationError("Entrant hardware ID cannot be null or empty")
    return entrant_id


@dataclass(frozen=True, slots=True)
class WaitlistEntry:
    """One entrant on a waitlist together with the time they joined."""
    entrant_id: str
    joined_at: datetime

    def to_document(self) -> Document:
        return {"entrantHardwareID": self.entrant_id, "timeJoined": to_iso(self.joined_at)}

    @classmethod
    def from_document(cls, doc: Document) -> "WaitlistEntry":
        joined_at = from_iso(doc.get("timeJoined"))
        if joined_at is None:
            raise ValidationError("Waitlist entry has no join time")
        return cls(entrant_id=_require(doc, "entrantHardwareID"), joined_at=joined_at)


def _parse_waitlist(raw: Any) -> List[WaitlistEntry]:
    entries: List[WaitlistEntry] = []
    if not isinstance(raw, list):
        return entries
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            entries.append(WaitlistEntry.from_document(item))
        except (ValidationError, ValueError) as e:
            logger.error(f"Failed to parse one waitlist entry: {e}")
    return entries


def _parse_ids(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    ids: List[str] = []
    for item in raw:
        if isinstance(item, str) and item and item not in ids:
            ids.append(item)
    return ids


@dataclass(slots=True)
class Event:
    """An event and its entrant membership collections.

    The transition methods mutate this in-memory copy only; callers persist
    the result. ``waitlisted`` keeps join order and may hold more than one
    entry for an entrant whose joins raced; status, capacity and draws count
    each entrant once. The other collections are duplicate-free lists used
    as sets.
    """
    event_id: int
    name: str
    organizer_id: str
    description: str = ""
    location: str = ""
    start_time: Optional[datetime] = None
    registration_start: Optional[datetime] = None
    registration_end: Optional[datetime] = None
    poster_url: Optional[str] = None
    lottery_criteria: Optional[str] = None
    waitlist_capacity: Optional[int] = None
    requires_geolocation: bool = False
    waitlisted: List[WaitlistEntry] = field(default_factory=list)
    invited: List[str] = field(default_factory=list)
    accepted: List[str] = field(default_factory=list)
    declined: List[str] = field(default_factory=list)

    # Status

    def entrant_status(self, entrant_id: Optional[str]) -> EntrantStatus:
        """Resolve status with priority ACCEPTED > INVITED > WAITLISTED > DECLINED."""
        if not entrant_id:
            return EntrantStatus.NONE
        if entrant_id in self.accepted:
            return EntrantStatus.ACCEPTED
        if entrant_id in self.invited:
            return EntrantStatus.INVITED
        if self.find_waitlist_entry(entrant_id) is not None:
            return EntrantStatus.WAITLISTED
        if entrant_id in self.declined:
            return EntrantStatus.DECLINED
        return EntrantStatus.NONE

    def find_waitlist_entry(self, entrant_id: str) -> Optional[WaitlistEntry]:
        for entry in self.waitlisted:
            if entry.entrant_id == entrant_id:
                return entry
        return None

    def waitlist_entries_for(self, entrant_id: str) -> List[WaitlistEntry]:
        """Every waitlist entry of one entrant; racing joins can store more than one."""
        return [entry for entry in self.waitlisted if entry.entrant_id == entrant_id]

    def distinct_waitlist(self) -> List[WaitlistEntry]:
        """First entry per entrant, in join order."""
        seen = set()
        entries: List[WaitlistEntry] = []
        for entry in self.waitlisted:
            if entry.entrant_id not in seen:
                seen.add(entry.entrant_id)
                entries.append(entry)
        return entries

    def waitlisted_ids(self) -> List[str]:
        return [entry.entrant_id for entry in self.distinct_waitlist()]

    def ids_with_status(self, status: EntrantStatus) -> List[str]:
        """Entrant IDs whose resolved status is ``status``."""
        if status is EntrantStatus.WAITLISTED:
            candidates = self.waitlisted_ids()
        elif status is EntrantStatus.INVITED:
            candidates = list(self.invited)
        elif status is EntrantStatus.ACCEPTED:
            candidates = list(self.accepted)
        elif status is EntrantStatus.DECLINED:
            candidates = list(self.declined)
        else:
            return []
        return [entrant_id for entrant_id in candidates if self.entrant_status(entrant_id) is status]

    # Transitions

    def ensure_can_join(self, entrant_id: str) -> None:
        """Raise the state conflict that forbids joining, if any."""
        require_entrant_id(entrant_id)
        if entrant_id in self.invited:
            raise AlreadyInvitedError()
        if entrant_id in self.accepted:
            raise AlreadyAcceptedError()
        if entrant_id in self.declined:
            raise AlreadyDeclinedError()
        if self.find_waitlist_entry(entrant_id) is not None:
            raise AlreadyOnWaitlistError()

    def invite(self, entrant_id: str) -> None:
        """WAITLISTED -> INVITED."""
        if self.entrant_status(entrant_id) is not EntrantStatus.WAITLISTED:
            raise NotOnWaitlistError(f"Entrant {entrant_id} is not on the waitlist")
        self._drop_waitlisted(entrant_id)
        _add(self.invited, entrant_id)

    def accept(self, entrant_id: str) -> None:
        """INVITED -> ACCEPTED."""
        if self.entrant_status(entrant_id) is not EntrantStatus.INVITED:
            raise NotInvitedError(f"Entrant {entrant_id} holds no open invitation")
        self.invited.remove(entrant_id)
        _add(self.accepted, entrant_id)

    def decline(self, entrant_id: str) -> None:
        """INVITED -> DECLINED."""
        if self.entrant_status(entrant_id) is not EntrantStatus.INVITED:
            raise NotInvitedError(f"Entrant {entrant_id} holds no open invitation")
        self.invited.remove(entrant_id)
        _add(self.declined, entrant_id)

    def cancel(self, entrant_id: str) -> EntrantStatus:
        """INVITED or ACCEPTED -> DECLINED; returns the status it left."""
        status = self.entrant_status(entrant_id)
        if status is EntrantStatus.INVITED:
            self.invited.remove(entrant_id)
        elif status is EntrantStatus.ACCEPTED:
            self.accepted.remove(entrant_id)
        else:
            raise StateConflictError(
                f"Entrant {entrant_id} cannot be cancelled from status {status.value}"
            )
        _add(self.declined, entrant_id)
        return status

    def reinstate(self, entrant_id: str, now: datetime) -> WaitlistEntry:
        """DECLINED -> WAITLISTED with a fresh join time."""
        if self.entrant_status(entrant_id) is not EntrantStatus.DECLINED:
            raise StateConflictError(f"Entrant {entrant_id} has not declined")
        self.declined.remove(entrant_id)
        entry = WaitlistEntry(entrant_id, now)
        self.waitlisted.append(entry)
        return entry

    def _drop_waitlisted(self, entrant_id: str) -> None:
        self.waitlisted = [entry for entry in self.waitlisted if entry.entrant_id != entrant_id]

    # Encoding

    def to_document(self) -> Document:
        return {
            "uniqueEventID": self.event_id,
            "eventName": self.name,
            "eventDescription": self.description,
            "location": self.location,
            "startTime": to_iso(self.start_time),
            "registrationStartTime": to_iso(self.registration_start),
            "registrationEndTime": to_iso(self.registration_end),
            "posterURL": self.poster_url,
            "lotteryCriteria": self.lottery_criteria,
            "waitlistLimit": self.waitlist_capacity,
            "requiresGeolocation": self.requires_geolocation,
            "eventOrganizerHardwareID": self.organizer_id,
            "waitListEntrants": [entry.to_document() for entry in self.waitlisted],
            "invitedEntrants": list(self.invited),
            "acceptedEntrants": list(self.accepted),
            "declinedEntrants": list(self.declined),
        }

    @classmethod
    def from_document(cls, doc: Document) -> "Event":
        try:
            limit = doc.get("waitlistLimit")
            return cls(
                event_id=int(_require(doc, "uniqueEventID")),
                name=doc.get("eventName") or "",
                organizer_id=_require(doc, "eventOrganizerHardwareID"),
                description=doc.get("eventDescription") or "",
                location=doc.get("location") or "",
                start_time=from_iso(doc.get("startTime")),
                registration_start=from_iso(doc.get("registrationStartTime")),
                registration_end=from_iso(doc.get("registrationEndTime")),
                poster_url=doc.get("posterURL"),
                lottery_criteria=doc.get("lotteryCriteria"),
                waitlist_capacity=int(limit) if limit is not None else None,
                requires_geolocation=bool(doc.get("requiresGeolocation", False)),
                waitlisted=_parse_waitlist(doc.get("waitListEntrants")),
                invited=_parse_ids(doc.get("invitedEntrants")),
                accepted=_parse_ids(doc.get("acceptedEntrants")),
                declined=_parse_ids(doc.get("declinedEntrants")),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Malformed event document: {e}") from e


def _add(collection: List[str], entrant_id: str) -> None:
    if entrant_id not in collection:
        collection.append(entrant_id)


@dataclass(slots=True)
class Notification:
    notification_id: int
    sender_id: str
    receiver_id: str
    header: str
    body: str
    event_id: Optional[int] = None
    dismissed: bool = False

    def to_document(self) -> Document:
        return {
            "notificationID": self.notification_id,
            "sendingUserHardwareID": self.sender_id,
            "receivingUserHardwareID": self.receiver_id,
            "notificationHeader": self.header,
            "notificationBody": self.body,
            "eventID": self.event_id,
            "dismissed": self.dismissed,
        }

    @classmethod
    def from_document(cls, doc: Document) -> "Notification":
        try:
            event_id = doc.get("eventID")
            return cls(
                notification_id=int(_require(doc, "notificationID")),
                sender_id=doc.get("sendingUserHardwareID") or "",
                receiver_id=doc.get("receivingUserHardwareID") or "",
                header=doc.get("notificationHeader") or "",
                body=doc.get("notificationBody") or "",
                event_id=int(event_id) if event_id is not None else None,
                dismissed=bool(doc.get("dismissed", False)),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Malformed notification document: {e}") from e


# Users: one record shape per ``userType`` value


@dataclass(slots=True)
class Entrant:
    user_type: ClassVar[UserType] = UserType.ENTRANT
    hardware_id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    phone_number: Optional[str] = None
    use_geolocation: bool = False
    wants_notifications: bool = True


@dataclass(slots=True)
class Organizer:
    user_type: ClassVar[UserType] = UserType.ORGANIZER
    hardware_id: str
    first_name: str = ""
    last_name: str = ""


@dataclass(slots=True)
class Administrator:
    user_type: ClassVar[UserType] = UserType.ADMINISTRATOR
    hardware_id: str
    first_name: str = ""
    last_name: str = ""


User = Union[Entrant, Organizer, Administrator]


def user_to_document(user: User) -> Document:
    doc: Document = {
        "userType": user.user_type.value,
        "hardwareID": user.hardware_id,
        "firstName": user.first_name,
        "lastName": user.last_name,
    }
    match user:
        case Entrant():
            doc.update({
                "email": user.email,
                "phoneNumber": user.phone_number,
                "useGeolocation": user.use_geolocation,
                "wantsNotifications": user.wants_notifications,
            })
        case Organizer() | Administrator():
            pass
    return doc


def user_from_document(doc: Document) -> User:
    """Build the user variant named by the document's ``userType``."""
    raw_type = doc.get("userType")
    try:
        user_type = UserType(raw_type)
    except ValueError as e:
        raise ValidationError(f"Unknown user type: {raw_type!r}") from e

    hardware_id = _require(doc, "hardwareID")
    first_name = doc.get("firstName") or ""
    last_name = doc.get("lastName") or ""

    match user_type:
        case UserType.ENTRANT:
            return Entrant(
                hardware_id=hardware_id,
                first_name=first_name,
                last_name=last_name,
                email=doc.get("email"),
                phone_number=doc.get("phoneNumber"),
                use_geolocation=bool(doc.get("useGeolocation", False)),
                wants_notifications=bool(doc.get("wantsNotifications", True)),
            )
        case UserType.ORGANIZER:
            return Organizer(hardware_id=hardware_id, first_name=first_name, last_name=last_name)
        case UserType.ADMINISTRATOR:
            return Administrator(hardware_id=hardware_id, first_name=first_name, last_name=last_name)

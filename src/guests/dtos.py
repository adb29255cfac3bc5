from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class GuestStatus(str, Enum):
    ATTENDING = "attending"
    NOT_ATTENDING = "not-attending"
    # Only for guests added by the host who have not answered yet
    PENDING = "pending"


RESPONSE_STATUSES = (GuestStatus.ATTENDING, GuestStatus.NOT_ATTENDING)


@dataclass(frozen=True)
class GuestDTO:
    """DTO for a guest record."""

    id: UUID
    event_id: UUID
    name: str
    status: GuestStatus
    responded_at: datetime
    plus_ones: int = 0
    comment: str = ""
    email: str | None = None
    # Stripped (None) in every non-admin projection
    manage_token: str | None = None


@dataclass(frozen=True)
class GuestDraft:
    """Mutable guest fields as written by an RSVP or an admin invite."""

    name: str
    status: GuestStatus
    responded_at: datetime
    plus_ones: int = 0
    comment: str = ""
    email: str | None = None
    # Only used when the draft creates a new guest
    manage_token: str | None = None


@dataclass(frozen=True)
class RsvpSubmission:
    """Raw RSVP payload as received from a guest."""

    name: str
    status: str
    plus_ones: int = 0
    comment: str | None = None
    email: str | None = None
    manage_token: str | None = None


@dataclass(frozen=True)
class NewGuestDTO:
    """Admin-provided data for a guest that has not responded yet."""

    name: str
    email: str | None = None
    comment: str | None = None

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from src.guests.dtos import GuestDTO


class ViewerRole(str, Enum):
    ADMIN = "admin"
    GUEST = "guest"
    PUBLIC = "public"


@dataclass(frozen=True)
class EventTheme:
    primary: str
    secondary: str
    background: str
    text: str

    def to_dict(self) -> dict:
        return asdict(self)


DEFAULT_EVENT_THEME = EventTheme(
    primary="#4f46e5",
    secondary="#6366f1",
    background="#eef2ff",
    text="#1e293b",
)


@dataclass(frozen=True)
class EventDetailsDTO:
    """Host-owned display fields. Always written as a whole."""

    title: str
    host: str
    starts_at: datetime
    location: str
    ends_at: datetime | None = None
    message: str = ""
    show_guest_list: bool = True
    allow_share_link: bool = True
    theme: EventTheme = DEFAULT_EVENT_THEME
    background_image: str | None = None
    hero_images: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class EventDTO:
    """DTO for an event as stored. Carries the password hash, never serialize it."""

    id: UUID
    share_token: str
    details: EventDetailsDTO
    password_hash: str | None = None
    # Bumped on every password change; embedded in guest access tokens
    password_version: int = 0
    created_at: datetime | None = None

    @property
    def password_protected(self) -> bool:
        return bool(self.password_hash)


@dataclass(frozen=True)
class EventView:
    """What a given viewer is allowed to see of an event."""

    event: EventDTO
    guests: list[GuestDTO]
    attendee_count: int
    role: ViewerRole

"""Response bodies shared by the event and guest routers."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.events.dtos import EventTheme, EventView
from src.guests.dtos import GuestDTO, GuestStatus


class ThemeSchema(BaseModel):
    primary: str
    secondary: str
    background: str
    text: str

    def to_dto(self) -> EventTheme:
        return EventTheme(**self.model_dump())


class GuestResponse(BaseModel):
    id: UUID
    name: str
    status: GuestStatus
    plus_ones: int
    comment: str
    email: str | None = None
    responded_at: datetime
    # Only present for admins and for the guest's own RSVP response
    manage_token: str | None = None

    @classmethod
    def from_dto(cls, guest: GuestDTO) -> "GuestResponse":
        return cls(
            id=guest.id,
            name=guest.name,
            status=guest.status,
            plus_ones=guest.plus_ones,
            comment=guest.comment,
            email=guest.email,
            responded_at=guest.responded_at,
            manage_token=guest.manage_token,
        )


class EventResponse(BaseModel):
    id: UUID
    share_token: str
    title: str
    host: str
    starts_at: datetime
    ends_at: datetime | None = None
    location: str
    message: str
    show_guest_list: bool
    allow_share_link: bool
    password_protected: bool
    theme: ThemeSchema
    background_image: str | None = None
    hero_images: list[str]
    created_at: datetime | None = None
    guests: list[GuestResponse]
    attendee_count: int

    @classmethod
    def from_view(cls, view: EventView) -> "EventResponse":
        event = view.event
        details = event.details
        return cls(
            id=event.id,
            share_token=event.share_token,
            title=details.title,
            host=details.host,
            starts_at=details.starts_at,
            ends_at=details.ends_at,
            location=details.location,
            message=details.message,
            show_guest_list=details.show_guest_list,
            allow_share_link=details.allow_share_link,
            password_protected=event.password_protected,
            theme=ThemeSchema(**details.theme.to_dict()),
            background_image=details.background_image,
            hero_images=list(details.hero_images),
            created_at=event.created_at,
            guests=[GuestResponse.from_dto(guest) for guest in view.guests],
            attendee_count=view.attendee_count,
        )

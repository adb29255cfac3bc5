from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.auth.access import AccessGrant
from src.auth.dependencies import require_admin
from src.events.dtos import DEFAULT_EVENT_THEME, EventDetailsDTO
from src.events.features.manage_events.service import (
    ManageEventsService,
    get_manage_events_service,
)
from src.events.schemas import EventResponse, ThemeSchema
from src.events.urls import ADMIN_EVENT_URL, ADMIN_EVENTS_URL

router = APIRouter()


class EventDetailsRequest(BaseModel):
    title: str
    host: str
    starts_at: datetime
    ends_at: datetime | None = None
    location: str
    message: str = ""
    show_guest_list: bool = True
    allow_share_link: bool = True
    theme: ThemeSchema | None = None
    background_image: str | None = None
    hero_images: list[str] = Field(default_factory=list)

    def to_dto(self) -> EventDetailsDTO:
        return EventDetailsDTO(
            title=self.title.strip(),
            host=self.host.strip(),
            starts_at=self.starts_at,
            ends_at=self.ends_at,
            location=self.location.strip(),
            message=self.message,
            show_guest_list=self.show_guest_list,
            allow_share_link=self.allow_share_link,
            theme=self.theme.to_dto() if self.theme else DEFAULT_EVENT_THEME,
            background_image=self.background_image or None,
            hero_images=list(self.hero_images),
        )


class CreateEventRequest(EventDetailsRequest):
    password: str | None = None


class UpdateEventRequest(EventDetailsRequest):
    password: str | None = None
    remove_password: bool = False


@router.get(ADMIN_EVENTS_URL, response_model=list[EventResponse])
async def list_events(
    _: AccessGrant = Depends(require_admin),
    service: ManageEventsService = Depends(get_manage_events_service),
) -> list[EventResponse]:
    """All events, newest first, with their full guest lists."""
    views = await service.list_events()
    return [EventResponse.from_view(view) for view in views]


@router.post(ADMIN_EVENTS_URL, response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    body: CreateEventRequest,
    _: AccessGrant = Depends(require_admin),
    service: ManageEventsService = Depends(get_manage_events_service),
) -> EventResponse:
    view = await service.create_event(body.to_dto(), password=body.password)
    return EventResponse.from_view(view)


@router.put(ADMIN_EVENT_URL, response_model=EventResponse)
async def update_event(
    event_id: UUID,
    body: UpdateEventRequest,
    _: AccessGrant = Depends(require_admin),
    service: ManageEventsService = Depends(get_manage_events_service),
) -> EventResponse:
    view = await service.update_event(
        event_id,
        body.to_dto(),
        password=body.password,
        remove_password=body.remove_password,
    )
    return EventResponse.from_view(view)


@router.delete(ADMIN_EVENT_URL, status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: UUID,
    _: AccessGrant = Depends(require_admin),
    service: ManageEventsService = Depends(get_manage_events_service),
) -> Response:
    await service.delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

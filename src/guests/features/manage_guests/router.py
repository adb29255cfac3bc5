from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel

from src.auth.access import AccessGrant
from src.auth.dependencies import require_admin
from src.events.schemas import GuestResponse
from src.guests.dtos import NewGuestDTO
from src.guests.features.manage_guests.service import (
    ManageGuestsService,
    get_manage_guests_service,
)
from src.guests.urls import ADMIN_GUEST_URL, ADMIN_GUESTS_URL, ADMIN_SEND_INVITE_URL

router = APIRouter()


class AddGuestRequest(BaseModel):
    name: str
    email: str | None = None
    comment: str | None = None


class GuestListResponse(BaseModel):
    guests: list[GuestResponse]
    attendee_count: int


class SendInviteResponse(BaseModel):
    sent: bool


@router.get(ADMIN_GUESTS_URL, response_model=GuestListResponse)
async def list_guests(
    event_id: UUID,
    _: AccessGrant = Depends(require_admin),
    service: ManageGuestsService = Depends(get_manage_guests_service),
) -> GuestListResponse:
    view = await service.list_guests(event_id)
    return GuestListResponse(
        guests=[GuestResponse.from_dto(guest) for guest in view.guests],
        attendee_count=view.attendee_count,
    )


@router.post(ADMIN_GUESTS_URL, response_model=GuestResponse, status_code=status.HTTP_201_CREATED)
async def add_guest(
    event_id: UUID,
    body: AddGuestRequest,
    background_tasks: BackgroundTasks,
    _: AccessGrant = Depends(require_admin),
    service: ManageGuestsService = Depends(get_manage_guests_service),
) -> GuestResponse:
    guest = await service.add_guest(
        event_id,
        NewGuestDTO(name=body.name, email=body.email, comment=body.comment),
        background_tasks=background_tasks,
    )
    return GuestResponse.from_dto(guest)


@router.delete(ADMIN_GUEST_URL, status_code=status.HTTP_204_NO_CONTENT)
async def remove_guest(
    event_id: UUID,
    guest_id: UUID,
    _: AccessGrant = Depends(require_admin),
    service: ManageGuestsService = Depends(get_manage_guests_service),
) -> Response:
    await service.remove_guest(event_id, guest_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(ADMIN_SEND_INVITE_URL, response_model=SendInviteResponse)
async def send_invite(
    event_id: UUID,
    guest_id: UUID,
    _: AccessGrant = Depends(require_admin),
    service: ManageGuestsService = Depends(get_manage_guests_service),
) -> SendInviteResponse:
    return SendInviteResponse(sent=await service.send_invite(event_id, guest_id))

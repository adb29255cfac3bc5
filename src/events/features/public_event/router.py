from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.auth.access import AccessMethod
from src.auth.dependencies import get_bearer_token
from src.events.features.public_event.service import (
    PasswordRequired,
    PublicEventService,
    get_public_event_service,
)
from src.events.schemas import EventResponse
from src.events.urls import PUBLIC_EVENT_ACCESS_URL, PUBLIC_EVENT_URL

router = APIRouter()


class PublicEventResponse(BaseModel):
    event: EventResponse
    guest_access_token: str | None = None


class PasswordRequiredResponse(BaseModel):
    requires_password: bool = True


class EventAccessRequest(BaseModel):
    password: str | None = None
    # The share token itself, accepted instead of a password when the host allows it
    share_link: str | None = None


class EventAccessResponse(BaseModel):
    event_id: UUID
    guest_access_token: str
    method: AccessMethod


@router.get(
    PUBLIC_EVENT_URL,
    response_model=PublicEventResponse,
    responses={401: {"model": PasswordRequiredResponse}},
)
async def fetch_public_event(
    share_token: str,
    bearer: str | None = Depends(get_bearer_token),
    service: PublicEventService = Depends(get_public_event_service),
):
    result = await service.fetch_public_event(share_token, bearer=bearer)
    if isinstance(result, PasswordRequired):
        return JSONResponse(status_code=401, content=PasswordRequiredResponse().model_dump())

    return PublicEventResponse(
        event=EventResponse.from_view(result.view),
        guest_access_token=result.guest_access_token,
    )


@router.post(PUBLIC_EVENT_ACCESS_URL, response_model=EventAccessResponse)
async def authorize_event_access(
    share_token: str,
    body: EventAccessRequest,
    service: PublicEventService = Depends(get_public_event_service),
) -> EventAccessResponse:
    result = await service.authorize_event_access(
        share_token, password=body.password, share_link=body.share_link
    )
    return EventAccessResponse(
        event_id=result.event_id,
        guest_access_token=result.guest_access_token,
        method=result.method,
    )

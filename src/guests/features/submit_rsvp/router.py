from fastapi import APIRouter, BackgroundTasks, Depends, Header
from pydantic import BaseModel

from src.auth.dependencies import get_bearer_token
from src.auth.tokens import manage_capability
from src.events.schemas import EventResponse, GuestResponse
from src.guests.dtos import RsvpSubmission
from src.guests.features.submit_rsvp.service import SubmitRsvpService, get_submit_rsvp_service
from src.guests.urls import SUBMIT_RSVP_URL

router = APIRouter()


class RsvpRequest(BaseModel):
    name: str = ""
    # Checked by the reconciliation rules so the caller gets a field-level message
    status: str = ""
    plus_ones: int = 0
    comment: str | None = None
    email: str | None = None
    manage_token: str | None = None


class RsvpResponse(BaseModel):
    event: EventResponse
    guest: GuestResponse
    manage_token: str
    guest_access_token: str | None = None


@router.post(SUBMIT_RSVP_URL, response_model=RsvpResponse)
async def submit_rsvp(
    share_token: str,
    body: RsvpRequest,
    background_tasks: BackgroundTasks,
    x_manage_token: str | None = Header(default=None),
    bearer: str | None = Depends(get_bearer_token),
    service: SubmitRsvpService = Depends(get_submit_rsvp_service),
) -> RsvpResponse:
    """
    Create or update the caller's RSVP. A manage token (body or X-Manage-Token
    header) targets the guest it was issued to.
    """
    capability = manage_capability(body.manage_token) or manage_capability(x_manage_token)
    submission = RsvpSubmission(
        name=body.name,
        status=body.status,
        plus_ones=body.plus_ones,
        comment=body.comment,
        email=body.email,
        manage_token=capability.manage_token if capability else None,
    )

    result = await service.submit_rsvp(
        share_token, submission, bearer=bearer, background_tasks=background_tasks
    )
    return RsvpResponse(
        event=EventResponse.from_view(result.view),
        guest=GuestResponse.from_dto(result.guest),
        manage_token=result.manage_token,
        guest_access_token=result.guest_access_token,
    )

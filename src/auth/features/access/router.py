from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.auth.dependencies import get_bearer_token
from src.auth.features.access.service import AccessService, AdminAccess, get_access_service
from src.auth.urls import ACCESS_URL, ADMIN_TOKEN_URL

router = APIRouter()


class AccessRequest(BaseModel):
    password: str | None = None


class AdminAccessResponse(BaseModel):
    type: Literal["admin"] = "admin"
    token: str


class EventAccessResponse(BaseModel):
    type: Literal["event"] = "event"
    event_id: UUID
    share_token: str
    guest_access_token: str


class AdminTokenResponse(BaseModel):
    token: str


@router.post(ACCESS_URL, response_model=AdminAccessResponse | EventAccessResponse)
async def submit_access_password(
    body: AccessRequest,
    service: AccessService = Depends(get_access_service),
) -> AdminAccessResponse | EventAccessResponse:
    """Exchange a password for an admin token or a guest token for the matching event."""
    result = await service.submit_access_password(body.password)
    if isinstance(result, AdminAccess):
        return AdminAccessResponse(token=result.token)
    return EventAccessResponse(
        event_id=result.event_id,
        share_token=result.share_token,
        guest_access_token=result.guest_access_token,
    )


@router.post(ADMIN_TOKEN_URL, response_model=AdminTokenResponse)
async def refresh_admin_token(
    bearer: str | None = Depends(get_bearer_token),
    service: AccessService = Depends(get_access_service),
) -> AdminTokenResponse:
    return AdminTokenResponse(token=service.refresh_admin_token(bearer))

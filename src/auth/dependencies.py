from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.auth.access import AccessControl, AccessGrant, get_access_control

bearer_scheme = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Raw bearer token, or None when the header is missing or not a bearer."""
    if credentials is None:
        return None
    return credentials.credentials


def require_admin(
    bearer: str | None = Depends(get_bearer_token),
    access_control: AccessControl = Depends(get_access_control),
) -> AccessGrant:
    return access_control.require_admin(bearer)

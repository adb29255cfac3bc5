"""Token service (JWT, opaque capabilities).

Three token kinds gate access without user accounts:

- admin: signed with the admin secret, role=admin, short-lived.
- guest access: signed with the guest secret, scoped to one event and to the
  event's current password version.
- manage: an opaque random capability stored on the guest row. Possession
  allows editing that one RSVP; it never expires.

`identify()` maps a raw bearer string onto one of the tagged variants below
so callers can dispatch on the type instead of parsing strings.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Protocol
from uuid import UUID

import jwt

from src.config.settings import settings

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
GUEST_ROLE = "guest"


class InvalidTokenError(Exception):
    """Bad signature, expired, wrong role or wrong scope."""


@dataclass(frozen=True)
class AdminToken:
    pass


@dataclass(frozen=True)
class GuestAccessToken:
    event_id: UUID
    password_version: int

    def grants(self, event_id: UUID, password_version: int) -> bool:
        return self.event_id == event_id and self.password_version == password_version


@dataclass(frozen=True)
class ManageCapability:
    manage_token: str


class TokenConfig(Protocol):
    admin_jwt_secret: str
    guest_jwt_secret: str
    jwt_algorithm: str
    admin_token_ttl_minutes: int
    guest_token_ttl_minutes: int


def generate_manage_token() -> str:
    return secrets.token_hex(12)


def generate_share_token() -> str:
    return secrets.token_hex(9)


class TokenService:
    def __init__(
        self,
        admin_secret: str,
        guest_secret: str,
        admin_ttl: timedelta = timedelta(hours=12),
        guest_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ) -> None:
        if admin_secret == guest_secret:
            raise ValueError("Admin and guest tokens must use different secrets")
        self._admin_secret = admin_secret
        self._guest_secret = guest_secret
        self._admin_ttl = admin_ttl
        self._guest_ttl = guest_ttl
        self._algorithm = algorithm

    @classmethod
    def from_config(cls, config: TokenConfig) -> "TokenService":
        return cls(
            admin_secret=config.admin_jwt_secret,
            guest_secret=config.guest_jwt_secret,
            admin_ttl=timedelta(minutes=config.admin_token_ttl_minutes),
            guest_ttl=timedelta(minutes=config.guest_token_ttl_minutes),
            algorithm=config.jwt_algorithm,
        )

    def issue_admin_token(self) -> str:
        return self._encode({"role": ADMIN_ROLE}, self._admin_secret, self._admin_ttl)

    def verify_admin_token(self, token: str | None) -> AdminToken:
        payload = self._decode(token, self._admin_secret)
        if payload.get("role") != ADMIN_ROLE:
            raise InvalidTokenError("not an admin token")
        return AdminToken()

    def issue_guest_access_token(self, event_id: UUID, password_version: int = 0) -> str:
        payload = {
            "role": GUEST_ROLE,
            "event_id": str(event_id),
            "pwv": password_version,
        }
        return self._encode(payload, self._guest_secret, self._guest_ttl)

    def verify_guest_access_token(
        self,
        token: str | None,
        event_id: UUID,
        password_version: int = 0,
    ) -> GuestAccessToken:
        """Fails unless the token was issued for this event and its current password."""
        guest_token = self._decode_guest_token(token)
        if not guest_token.grants(event_id, password_version):
            raise InvalidTokenError("guest token scoped to another event or password")
        return guest_token

    def identify(self, token: str | None) -> AdminToken | GuestAccessToken | None:
        """Return the verified variant for a bearer token, or None when invalid."""
        if not token:
            return None
        try:
            return self.verify_admin_token(token)
        except InvalidTokenError:
            pass
        try:
            return self._decode_guest_token(token)
        except InvalidTokenError as e:
            logger.debug("Rejected bearer token: %s", e)
            return None

    def _decode_guest_token(self, token: str | None) -> GuestAccessToken:
        payload = self._decode(token, self._guest_secret)
        if payload.get("role") != GUEST_ROLE:
            raise InvalidTokenError("not a guest token")
        try:
            return GuestAccessToken(
                event_id=UUID(str(payload["event_id"])),
                password_version=int(payload.get("pwv", 0)),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTokenError("malformed guest token") from e

    def _encode(self, payload: dict, secret: str, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        claims = {**payload, "iat": now, "exp": now + ttl}
        return jwt.encode(claims, secret, algorithm=self._algorithm)

    def _decode(self, token: str | None, secret: str) -> dict:
        if not token or not isinstance(token, str):
            raise InvalidTokenError("empty token")
        try:
            return jwt.decode(token.strip(), secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e


@lru_cache
def get_token_service() -> TokenService:
    return TokenService.from_config(settings)


def manage_capability(raw: str | None) -> ManageCapability | None:
    """Wrap a manage token sent by a guest. Blank values carry no capability."""
    if raw is None:
        return None
    token = raw.strip()
    return ManageCapability(manage_token=token) if token else None

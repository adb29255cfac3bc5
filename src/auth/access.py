"""Per-request access decisions.

Nothing is remembered between requests: every call re-verifies whatever
credentials it was given. Invalid, expired and mis-scoped tokens are treated
exactly like a missing token.
"""

import hmac
import logging
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from src.auth.passwords import PasswordHasher, get_password_hasher
from src.auth.tokens import AdminToken, GuestAccessToken, TokenService, get_token_service
from src.errors import Unauthorized
from src.events.dtos import EventDTO, ViewerRole

logger = logging.getLogger(__name__)


class AccessMethod(str, Enum):
    ADMIN_TOKEN = "admin_token"
    OPEN_EVENT = "open_event"
    GUEST_TOKEN = "guest_token"
    PASSWORD = "password"
    # Weaker than a password, only honoured when the host allows it
    SHARE_LINK = "share_link"


@dataclass(frozen=True)
class AccessGrant:
    role: ViewerRole
    method: AccessMethod
    # Set when this request minted a fresh guest token
    guest_access_token: str | None = None


class AccessControl:
    def __init__(self, token_service: TokenService, password_hasher: PasswordHasher) -> None:
        self.token_service = token_service
        self.password_hasher = password_hasher

    def admin_grant(self, bearer: str | None) -> AccessGrant | None:
        if isinstance(self.token_service.identify(bearer), AdminToken):
            return AccessGrant(role=ViewerRole.ADMIN, method=AccessMethod.ADMIN_TOKEN)
        return None

    def require_admin(self, bearer: str | None) -> AccessGrant:
        grant = self.admin_grant(bearer)
        if grant is None:
            raise Unauthorized()
        return grant

    async def resolve_event_access(
        self,
        event: EventDTO,
        bearer: str | None = None,
        password: str | None = None,
        share_link: str | None = None,
    ) -> AccessGrant | None:
        """
        Decide how (and whether) the caller may see `event`.

        Checked in order: admin token, open event, guest token scoped to this
        event and its current password, password, share link. Returns None
        when none of them holds.
        """
        token = self.token_service.identify(bearer)
        if isinstance(token, AdminToken):
            return AccessGrant(role=ViewerRole.ADMIN, method=AccessMethod.ADMIN_TOKEN)

        if not event.password_protected:
            return AccessGrant(role=ViewerRole.PUBLIC, method=AccessMethod.OPEN_EVENT)

        if isinstance(token, GuestAccessToken) and token.grants(event.id, event.password_version):
            return AccessGrant(role=ViewerRole.GUEST, method=AccessMethod.GUEST_TOKEN)

        if password and await self.password_hasher.verify_async(password, event.password_hash):
            return self._mint_guest_grant(event, AccessMethod.PASSWORD)

        if share_link and event.details.allow_share_link:
            if hmac.compare_digest(share_link.encode(), event.share_token.encode()):
                return self._mint_guest_grant(event, AccessMethod.SHARE_LINK)

        logger.debug("No valid access proof for event %s", event.id)
        return None

    async def require_event_access(self, event: EventDTO, **credentials) -> AccessGrant:
        grant = await self.resolve_event_access(event, **credentials)
        if grant is None:
            raise Unauthorized()
        return grant

    def issue_guest_access(self, event: EventDTO) -> str:
        return self.token_service.issue_guest_access_token(event.id, event.password_version)

    def _mint_guest_grant(self, event: EventDTO, method: AccessMethod) -> AccessGrant:
        return AccessGrant(
            role=ViewerRole.GUEST,
            method=method,
            guest_access_token=self.issue_guest_access(event),
        )


@lru_cache
def get_access_control() -> AccessControl:
    return AccessControl(get_token_service(), get_password_hasher())

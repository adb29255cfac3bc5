"""Single password box: admin password or any event's password."""

import hmac
from dataclasses import dataclass
from uuid import UUID

from src.auth.access import AccessControl, get_access_control
from src.config.settings import settings
from src.errors import Unauthorized, ValidationError
from src.events.repository.repository import EventUnitOfWork, get_event_unit_of_work


@dataclass(frozen=True)
class AdminAccess:
    token: str


@dataclass(frozen=True)
class EventAccess:
    event_id: UUID
    share_token: str
    guest_access_token: str


class AccessService:
    def __init__(
        self,
        unit_of_work: EventUnitOfWork,
        access_control: AccessControl,
        admin_password: str = "",
        admin_password_hash: str = "",
    ) -> None:
        self.unit_of_work = unit_of_work
        self.access_control = access_control
        self.admin_password = admin_password
        self.admin_password_hash = admin_password_hash

    async def submit_access_password(self, password: str | None) -> AdminAccess | EventAccess:
        """
        Admin password first, then every password-protected event in turn.
        The first match wins; no match is Unauthorized.
        """
        if not password:
            raise ValidationError("Password is required.", field="password")

        if await self._is_admin_password(password):
            return AdminAccess(token=self.access_control.token_service.issue_admin_token())

        async with self.unit_of_work.transaction() as repository:
            events = await repository.list_password_protected_events()

        hasher = self.access_control.password_hasher
        for event in events:
            if await hasher.verify_async(password, event.password_hash):
                return EventAccess(
                    event_id=event.id,
                    share_token=event.share_token,
                    guest_access_token=self.access_control.issue_guest_access(event),
                )

        raise Unauthorized()

    def refresh_admin_token(self, bearer: str | None) -> str:
        self.access_control.require_admin(bearer)
        return self.access_control.token_service.issue_admin_token()

    async def _is_admin_password(self, password: str) -> bool:
        if self.admin_password_hash:
            return await self.access_control.password_hasher.verify_async(
                password, self.admin_password_hash
            )
        if self.admin_password:
            return hmac.compare_digest(password.encode(), self.admin_password.encode())
        return False


def get_access_service() -> AccessService:
    return AccessService(
        unit_of_work=get_event_unit_of_work(),
        access_control=get_access_control(),
        admin_password=settings.admin_password,
        admin_password_hash=settings.admin_password_hash,
    )

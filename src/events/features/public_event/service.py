from dataclasses import dataclass
from uuid import UUID

from src.auth.access import AccessControl, AccessMethod, get_access_control
from src.errors import NotFound, Unauthorized, ValidationError
from src.events.dtos import EventView
from src.events.projection import project_for_viewer
from src.events.repository.repository import EventUnitOfWork, get_event_unit_of_work


@dataclass(frozen=True)
class PasswordRequired:
    pass


@dataclass(frozen=True)
class PublicEvent:
    view: EventView
    # Echoed back when the caller proved access with a guest token
    guest_access_token: str | None = None


@dataclass(frozen=True)
class EventAccessToken:
    event_id: UUID
    guest_access_token: str
    method: AccessMethod


class PublicEventService:
    def __init__(self, unit_of_work: EventUnitOfWork, access_control: AccessControl) -> None:
        self.unit_of_work = unit_of_work
        self.access_control = access_control

    async def fetch_public_event(
        self,
        share_token: str,
        bearer: str | None = None,
    ) -> PublicEvent | PasswordRequired:
        """PasswordRequired iff the event is gated and no valid token for it was given."""
        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_share_token(share_token)
            if event is None:
                raise NotFound("Event not found.")

            grant = await self.access_control.resolve_event_access(event, bearer=bearer)
            if grant is None:
                return PasswordRequired()

            guests = await repository.get_guests_for_event(event.id)

        return PublicEvent(
            view=project_for_viewer(event, guests, grant.role),
            guest_access_token=bearer if grant.method == AccessMethod.GUEST_TOKEN else None,
        )

    async def authorize_event_access(
        self,
        share_token: str,
        password: str | None = None,
        share_link: str | None = None,
    ) -> EventAccessToken:
        """
        Trade a password (or the share link, when the host allows it) for a
        guest token. Open events hand out a token without checking anything.
        """
        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_share_token(share_token)
        if event is None:
            raise NotFound("Event not found.")

        grant = await self.access_control.resolve_event_access(
            event, password=password, share_link=share_link
        )
        if grant is None:
            if not password and not share_link:
                raise ValidationError("Password is required.", field="password")
            raise Unauthorized()

        token = grant.guest_access_token or self.access_control.issue_guest_access(event)
        return EventAccessToken(event_id=event.id, guest_access_token=token, method=grant.method)


def get_public_event_service() -> PublicEventService:
    return PublicEventService(
        unit_of_work=get_event_unit_of_work(),
        access_control=get_access_control(),
    )

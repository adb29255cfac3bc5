"""Admin CRUD over events."""

import logging
from uuid import UUID

from src.auth.passwords import PasswordHasher, get_password_hasher
from src.auth.tokens import generate_share_token
from src.errors import NotFound, ValidationError
from src.events.dtos import EventDetailsDTO, EventDTO, EventView, ViewerRole
from src.events.projection import project_for_viewer
from src.events.repository.repository import (
    EventRepository,
    EventUnitOfWork,
    get_event_unit_of_work,
)
from src.models.base import SHORT_TEXT_LENGTH

logger = logging.getLogger(__name__)


def validate_details(details: EventDetailsDTO) -> None:
    for field in ("title", "host", "location"):
        value = getattr(details, field) or ""
        if not value.strip():
            raise ValidationError(f"The event {field} is required.", field=field)
        if len(value) > SHORT_TEXT_LENGTH:
            raise ValidationError(
                f"The event {field} is limited to {SHORT_TEXT_LENGTH} characters.", field=field
            )
    if details.ends_at is not None and details.ends_at < details.starts_at:
        raise ValidationError("The event cannot end before it starts.", field="ends_at")


class ManageEventsService:
    def __init__(self, unit_of_work: EventUnitOfWork, password_hasher: PasswordHasher) -> None:
        self.unit_of_work = unit_of_work
        self.password_hasher = password_hasher

    async def list_events(self) -> list[EventView]:
        async with self.unit_of_work.transaction() as repository:
            events = await repository.list_events()
            return [await self._admin_view(repository, event) for event in events]

    async def create_event(self, details: EventDetailsDTO, password: str | None = None) -> EventView:
        validate_details(details)
        password_hash = await self.password_hasher.hash_async(password) if password else None

        async with self.unit_of_work.transaction() as repository:
            event = await repository.insert_event(
                details, share_token=generate_share_token(), password_hash=password_hash
            )
        logger.info("Created event %s (%s)", event.id, event.share_token)
        return project_for_viewer(event, [], ViewerRole.ADMIN)

    async def update_event(
        self,
        event_id: UUID,
        details: EventDetailsDTO,
        password: str | None = None,
        remove_password: bool = False,
    ) -> EventView:
        """
        Replace every display field. The password is kept unless a new one is
        given or `remove_password` is set; either change bumps the password
        version, which invalidates guest tokens issued so far.
        """
        validate_details(details)

        async with self.unit_of_work.transaction() as repository:
            existing = await repository.get_event_by_id(event_id)
            if existing is None:
                raise NotFound("Event not found.")

            password_hash = existing.password_hash
            password_version = existing.password_version
            if remove_password:
                if password_hash is not None:
                    password_hash = None
                    password_version += 1
            elif password:
                password_hash = await self.password_hasher.hash_async(password)
                password_version += 1

            event = await repository.update_event(event_id, details, password_hash, password_version)
            return await self._admin_view(repository, event)

    async def delete_event(self, event_id: UUID) -> None:
        async with self.unit_of_work.transaction() as repository:
            if not await repository.delete_event(event_id):
                raise NotFound("Event not found.")
        logger.info("Deleted event %s", event_id)

    async def _admin_view(self, repository: EventRepository, event: EventDTO) -> EventView:
        guests = await repository.get_guests_for_event(event.id)
        return project_for_viewer(event, guests, ViewerRole.ADMIN)


def get_manage_events_service() -> ManageEventsService:
    return ManageEventsService(
        unit_of_work=get_event_unit_of_work(),
        password_hasher=get_password_hasher(),
    )

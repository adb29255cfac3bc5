"""Admin guest management: list, pre-provision, remove, (re)invite."""

import logging
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from fastapi import BackgroundTasks

from src.auth.tokens import generate_manage_token
from src.email_service.mailer import RsvpMailer, get_rsvp_mailer
from src.errors import ConflictRetryable, NotFound, ValidationError
from src.events.dtos import EventView, ViewerRole
from src.events.projection import project_for_viewer
from src.events.repository.repository import EventUnitOfWork, get_event_unit_of_work
from src.guests.dtos import GuestDraft, GuestDTO, GuestStatus, NewGuestDTO
from src.guests.reconciliation import normalize_email, utc_now
from src.models.base import SHORT_TEXT_LENGTH

logger = logging.getLogger(__name__)


class ManageGuestsService:
    def __init__(
        self,
        unit_of_work: EventUnitOfWork,
        mailer: RsvpMailer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.unit_of_work = unit_of_work
        self.mailer = mailer
        self.clock = clock

    async def list_guests(self, event_id: UUID) -> EventView:
        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_id(event_id)
            if event is None:
                raise NotFound("Event not found.")
            guests = await repository.get_guests_for_event(event_id)
        return project_for_viewer(event, guests, ViewerRole.ADMIN)

    async def add_guest(
        self,
        event_id: UUID,
        new_guest: NewGuestDTO,
        background_tasks: BackgroundTasks | None = None,
    ) -> GuestDTO:
        """
        Add a pending guest with a fresh manage token, then email them an
        invitation when an address was given. The email is queued on
        `background_tasks` when given.
        """
        name = (new_guest.name or "").strip()
        if not name:
            raise ValidationError("The guest name is required.", field="name")
        if len(name) > SHORT_TEXT_LENGTH:
            raise ValidationError(f"Names are limited to {SHORT_TEXT_LENGTH} characters.", field="name")
        email = normalize_email(new_guest.email)
        if email and len(email) > SHORT_TEXT_LENGTH:
            raise ValidationError("Please enter a valid email address.", field="email")

        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_id(event_id)
            if event is None:
                raise NotFound("Event not found.")

            if email and await repository.find_guest_by_email(event_id, email) is not None:
                raise ValidationError("A guest with this email already exists.", field="email")

            draft = GuestDraft(
                name=name,
                status=GuestStatus.PENDING,
                responded_at=self.clock(),
                comment=new_guest.comment or "",
                email=email,
                manage_token=generate_manage_token(),
            )
            try:
                guest = await repository.upsert_guest(event_id, draft)
            except ConflictRetryable as e:
                raise ValidationError("A guest with this email already exists.", field="email") from e

        logger.info("Added guest %s to event %s", guest.id, event_id)
        if background_tasks is not None:
            background_tasks.add_task(self.mailer.send_invitation, event, guest)
        else:
            await self.mailer.send_invitation(event, guest)
        return guest

    async def remove_guest(self, event_id: UUID, guest_id: UUID) -> None:
        async with self.unit_of_work.transaction() as repository:
            if await repository.get_event_by_id(event_id) is None:
                raise NotFound("Event not found.")
            if not await repository.delete_guest(event_id, guest_id):
                raise NotFound("Guest not found.")

    async def send_invite(self, event_id: UUID, guest_id: UUID) -> bool:
        """Returns False when the guest has no email or delivery failed."""
        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_id(event_id)
            if event is None:
                raise NotFound("Event not found.")
            guest = await repository.get_guest(event_id, guest_id)
            if guest is None:
                raise NotFound("Guest not found.")

        return await self.mailer.send_invitation(event, guest)


def get_manage_guests_service() -> ManageGuestsService:
    return ManageGuestsService(
        unit_of_work=get_event_unit_of_work(),
        mailer=get_rsvp_mailer(),
    )

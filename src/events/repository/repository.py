"""Event and guest persistence.

Repositories return DTOs, never ORM models. A repository is bound to one
session; `EventUnitOfWork.transaction()` hands out a repository whose work is
committed together or rolled back together.
"""

import contextlib
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from functools import partial
from uuid import UUID, uuid4

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import async_session_manager
from src.errors import ConflictRetryable, DependencyFailure
from src.events.dtos import DEFAULT_EVENT_THEME, EventDetailsDTO, EventDTO, EventTheme
from src.events.repository.orm_models import Event, Guest
from src.guests.dtos import GuestDraft, GuestDTO, GuestStatus

logger = logging.getLogger(__name__)


class EventRepository(ABC):
    @abstractmethod
    async def get_event_by_id(self, event_id: UUID) -> EventDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def get_event_by_share_token(self, share_token: str) -> EventDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def list_events(self) -> list[EventDTO]:
        """All events, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def list_password_protected_events(self) -> list[EventDTO]:
        raise NotImplementedError

    @abstractmethod
    async def insert_event(
        self,
        details: EventDetailsDTO,
        share_token: str,
        password_hash: str | None = None,
    ) -> EventDTO:
        raise NotImplementedError

    @abstractmethod
    async def update_event(
        self,
        event_id: UUID,
        details: EventDetailsDTO,
        password_hash: str | None,
        password_version: int,
    ) -> EventDTO | None:
        """Replace all host-owned fields. Returns None for an unknown event."""
        raise NotImplementedError

    @abstractmethod
    async def delete_event(self, event_id: UUID) -> bool:
        """Delete the event and all of its guests."""
        raise NotImplementedError

    @abstractmethod
    async def get_guests_for_event(self, event_id: UUID) -> list[GuestDTO]:
        """Guests ordered by responded_at, most recent first."""
        raise NotImplementedError

    @abstractmethod
    async def get_guest(self, event_id: UUID, guest_id: UUID) -> GuestDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def find_guest_by_manage_token(self, manage_token: str) -> GuestDTO | None:
        """Manage tokens are globally unique, so no event scoping here."""
        raise NotImplementedError

    @abstractmethod
    async def find_guest_by_email(self, event_id: UUID, email: str) -> GuestDTO | None:
        raise NotImplementedError

    @abstractmethod
    async def upsert_guest(
        self,
        event_id: UUID,
        draft: GuestDraft,
        guest_id: UUID | None = None,
    ) -> GuestDTO:
        """
        Update guest `guest_id` in place, or insert a new guest when it is None.
        Updates keep the stored id and manage token.
        Raises ConflictRetryable when a uniqueness constraint is violated or
        the guest to update no longer exists.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_guest(self, event_id: UUID, guest_id: UUID) -> bool:
        raise NotImplementedError


class EventUnitOfWork(ABC):
    @abstractmethod
    def transaction(self) -> contextlib.AbstractAsyncContextManager[EventRepository]:
        """All-or-nothing scope. Storage failures surface as DependencyFailure."""
        raise NotImplementedError


def event_to_dto(event: Event) -> EventDTO:
    return EventDTO(
        id=event.uuid,
        share_token=event.share_token,
        details=EventDetailsDTO(
            title=event.title,
            host=event.host,
            starts_at=event.starts_at,
            ends_at=event.ends_at,
            location=event.location,
            message=event.message or "",
            show_guest_list=event.show_guest_list,
            allow_share_link=event.allow_share_link,
            theme=EventTheme(**event.theme) if event.theme else DEFAULT_EVENT_THEME,
            background_image=event.background_image,
            hero_images=list(event.hero_images or []),
        ),
        password_hash=event.password_hash,
        password_version=event.password_version,
        created_at=event.created_at,
    )


def guest_to_dto(guest: Guest) -> GuestDTO:
    return GuestDTO(
        id=guest.uuid,
        event_id=guest.event_id,
        name=guest.name,
        status=GuestStatus(guest.status),
        plus_ones=guest.plus_ones,
        comment=guest.comment or "",
        email=guest.email,
        manage_token=guest.manage_token,
        responded_at=guest.responded_at,
    )


def _apply_details(event: Event, details: EventDetailsDTO) -> None:
    event.title = details.title
    event.host = details.host
    event.starts_at = details.starts_at
    event.ends_at = details.ends_at
    event.location = details.location
    event.message = details.message
    event.show_guest_list = details.show_guest_list
    event.allow_share_link = details.allow_share_link
    event.theme = details.theme.to_dict()
    event.background_image = details.background_image
    event.hero_images = list(details.hero_images)


class SqlEventRepository(EventRepository):
    """SQL implementation bound to a single session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_event_by_id(self, event_id: UUID) -> EventDTO | None:
        event = await self._get_event_row(event_id)
        return event_to_dto(event) if event else None

    async def get_event_by_share_token(self, share_token: str) -> EventDTO | None:
        result = await self.session.execute(select(Event).where(Event.share_token == share_token))
        event = result.scalar_one_or_none()
        return event_to_dto(event) if event else None

    async def list_events(self) -> list[EventDTO]:
        result = await self.session.execute(select(Event).order_by(Event.created_at.desc()))
        return [event_to_dto(event) for event in result.scalars().all()]

    async def list_password_protected_events(self) -> list[EventDTO]:
        result = await self.session.execute(
            select(Event).where(Event.password_hash.is_not(None)).order_by(Event.created_at)
        )
        return [event_to_dto(event) for event in result.scalars().all()]

    async def insert_event(
        self,
        details: EventDetailsDTO,
        share_token: str,
        password_hash: str | None = None,
    ) -> EventDTO:
        event = Event(
            uuid=uuid4(),
            share_token=share_token,
            password_hash=password_hash,
            password_version=0,
        )
        _apply_details(event, details)
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event_to_dto(event)

    async def update_event(
        self,
        event_id: UUID,
        details: EventDetailsDTO,
        password_hash: str | None,
        password_version: int,
    ) -> EventDTO | None:
        event = await self._get_event_row(event_id)
        if event is None:
            return None

        _apply_details(event, details)
        event.password_hash = password_hash
        event.password_version = password_version
        await self.session.flush()
        await self.session.refresh(event)
        return event_to_dto(event)

    async def delete_event(self, event_id: UUID) -> bool:
        event = await self._get_event_row(event_id)
        if event is None:
            return False

        # Explicit so the cascade does not depend on the backend enforcing FKs
        await self.session.execute(delete(Guest).where(Guest.event_id == event_id))
        await self.session.execute(delete(Event).where(Event.uuid == event_id))
        await self.session.flush()
        return True

    async def get_guests_for_event(self, event_id: UUID) -> list[GuestDTO]:
        stmt = (
            select(Guest)
            .where(Guest.event_id == event_id)
            .order_by(Guest.responded_at.desc(), Guest.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return [guest_to_dto(guest) for guest in result.scalars().all()]

    async def get_guest(self, event_id: UUID, guest_id: UUID) -> GuestDTO | None:
        guest = await self._get_guest_row(event_id, guest_id)
        return guest_to_dto(guest) if guest else None

    async def find_guest_by_manage_token(self, manage_token: str) -> GuestDTO | None:
        result = await self.session.execute(
            select(Guest).where(Guest.manage_token == manage_token)
        )
        guest = result.scalar_one_or_none()
        return guest_to_dto(guest) if guest else None

    async def find_guest_by_email(self, event_id: UUID, email: str) -> GuestDTO | None:
        result = await self.session.execute(
            select(Guest).where(Guest.event_id == event_id, Guest.email == email)
        )
        guest = result.scalar_one_or_none()
        return guest_to_dto(guest) if guest else None

    async def upsert_guest(
        self,
        event_id: UUID,
        draft: GuestDraft,
        guest_id: UUID | None = None,
    ) -> GuestDTO:
        if guest_id is None:
            guest = Guest(
                uuid=uuid4(),
                event_id=event_id,
                manage_token=draft.manage_token,
            )
        else:
            guest = await self._get_guest_row(event_id, guest_id)
            if guest is None:
                # Deleted since it was resolved; resolution has to run again
                raise ConflictRetryable()

        # Savepoint so a unique violation leaves the outer transaction usable
        try:
            async with self.session.begin_nested():
                guest.name = draft.name
                guest.status = draft.status
                guest.plus_ones = draft.plus_ones
                guest.comment = draft.comment
                guest.email = draft.email
                guest.responded_at = draft.responded_at
                self.session.add(guest)
                await self.session.flush()
        except IntegrityError as e:
            if guest_id is None:
                if guest in self.session:
                    self.session.expunge(guest)
            else:
                await self.session.refresh(guest)
            raise ConflictRetryable() from e

        await self.session.refresh(guest)
        return guest_to_dto(guest)

    async def delete_guest(self, event_id: UUID, guest_id: UUID) -> bool:
        guest = await self._get_guest_row(event_id, guest_id)
        if guest is None:
            return False

        await self.session.delete(guest)
        await self.session.flush()
        return True

    async def _get_event_row(self, event_id: UUID) -> Event | None:
        result = await self.session.execute(select(Event).where(Event.uuid == event_id))
        return result.scalar_one_or_none()

    async def _get_guest_row(self, event_id: UUID, guest_id: UUID) -> Guest | None:
        result = await self.session.execute(
            select(Guest).where(Guest.uuid == guest_id, Guest.event_id == event_id)
        )
        return result.scalar_one_or_none()


class SqlEventUnitOfWork(EventUnitOfWork):
    """Runs each transaction in its own session, or inside `session_overwrite`."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    @contextlib.asynccontextmanager
    async def transaction(self) -> AsyncIterator[EventRepository]:
        try:
            async with self.async_session_manager(session_overwrite=self.session_overwrite) as session:
                yield SqlEventRepository(session)
        except SQLAlchemyError as e:
            logger.exception("Storage failure, transaction rolled back")
            raise DependencyFailure() from e


def get_event_unit_of_work() -> EventUnitOfWork:
    return SqlEventUnitOfWork()

from uuid import uuid4

import pytest
from fastapi import BackgroundTasks

from src.email_service.mailer import RsvpMailer
from src.errors import NotFound, ValidationError
from src.events.repository.tests.inmemory_models import (
    InMemoryEmailService,
    InMemoryEventStore,
    InMemoryEventUnitOfWork,
    sample_details,
)
from src.guests.dtos import GuestStatus, NewGuestDTO, RsvpSubmission
from src.guests.features.manage_guests.service import ManageGuestsService
from src.guests.features.submit_rsvp.service import SubmitRsvpService


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def event(store):
    return store.add_event(sample_details(), share_token="open")


@pytest.fixture
def email_service() -> InMemoryEmailService:
    return InMemoryEmailService()


@pytest.fixture
def mailer(email_service) -> RsvpMailer:
    return RsvpMailer(email_service, "https://party.test")


@pytest.fixture
def service(store, mailer) -> ManageGuestsService:
    return ManageGuestsService(InMemoryEventUnitOfWork(store), mailer)


async def test_add_guest_is_pending_and_invited(service, event, email_service):
    guest = await service.add_guest(event.id, NewGuestDTO(name="Bob", email=" Bob@X.com "))

    assert guest.status == GuestStatus.PENDING
    assert guest.email == "bob@x.com"
    assert len(guest.manage_token) == 24
    assert len(email_service.sent_emails) == 1
    invitation = email_service.sent_emails[0]
    assert invitation.to == "bob@x.com"
    assert f"https://party.test/event/open?manage={guest.manage_token}" in invitation.text


async def test_add_guest_queues_invitation(service, event, email_service):
    background_tasks = BackgroundTasks()

    guest = await service.add_guest(
        event.id, NewGuestDTO(name="Bob", email="bob@x.com"), background_tasks=background_tasks
    )

    assert email_service.sent_emails == []
    assert len(background_tasks.tasks) == 1

    await background_tasks()

    assert [message.to for message in email_service.sent_emails] == [guest.email]


async def test_add_guest_without_email_sends_nothing(service, event, email_service):
    guest = await service.add_guest(event.id, NewGuestDTO(name="Bob"))

    assert guest.email is None
    assert email_service.sent_emails == []


async def test_add_guest_rejects_duplicate_email(service, event):
    await service.add_guest(event.id, NewGuestDTO(name="Bob", email="bob@x.com"))

    with pytest.raises(ValidationError) as exc_info:
        await service.add_guest(event.id, NewGuestDTO(name="Robert", email="BOB@x.com"))
    assert exc_info.value.field == "email"


async def test_add_guest_requires_name_and_event(service, event):
    with pytest.raises(ValidationError):
        await service.add_guest(event.id, NewGuestDTO(name=" "))
    with pytest.raises(NotFound):
        await service.add_guest(uuid4(), NewGuestDTO(name="Bob"))


async def test_add_guest_rejects_oversized_fields(service, event, store):
    with pytest.raises(ValidationError) as exc_info:
        await service.add_guest(event.id, NewGuestDTO(name="B" * 256))
    assert exc_info.value.field == "name"

    with pytest.raises(ValidationError) as exc_info:
        await service.add_guest(event.id, NewGuestDTO(name="Bob", email="b" * 250 + "@x.com"))
    assert exc_info.value.field == "email"
    assert store.guests == {}


async def test_added_guest_rsvp_updates_same_record(service, store, event, mailer, access_control):
    pending = await service.add_guest(event.id, NewGuestDTO(name="Bob", email="bob@x.com"))
    rsvp = SubmitRsvpService(InMemoryEventUnitOfWork(store), access_control, mailer)

    result = await rsvp.submit_rsvp(
        "open",
        RsvpSubmission(name="Bob", status="attending", manage_token=pending.manage_token),
    )

    assert result.guest.id == pending.id
    assert result.guest.status == GuestStatus.ATTENDING
    assert len(store.guests) == 1


async def test_list_guests_shows_manage_tokens(service, event):
    added = await service.add_guest(event.id, NewGuestDTO(name="Bob"))

    view = await service.list_guests(event.id)

    assert [g.manage_token for g in view.guests] == [added.manage_token]
    assert view.attendee_count == 0
    with pytest.raises(NotFound):
        await service.list_guests(uuid4())


async def test_remove_guest(service, store, event):
    guest = await service.add_guest(event.id, NewGuestDTO(name="Bob"))

    await service.remove_guest(event.id, guest.id)

    assert store.guests == {}
    with pytest.raises(NotFound):
        await service.remove_guest(event.id, guest.id)


async def test_send_invite(service, event, email_service):
    with_email = await service.add_guest(event.id, NewGuestDTO(name="Bob", email="bob@x.com"))
    without_email = await service.add_guest(event.id, NewGuestDTO(name="Cy"))
    email_service.sent_emails.clear()

    assert await service.send_invite(event.id, with_email.id) is True
    assert await service.send_invite(event.id, without_email.id) is False
    assert len(email_service.sent_emails) == 1
    with pytest.raises(NotFound):
        await service.send_invite(event.id, uuid4())

from datetime import UTC, datetime
from uuid import uuid4

import httpx
import pytest

from src.email_service.base import EmailMessage
from src.email_service.mailer import RsvpMailer
from src.email_service.mailgun_service import MailgunEmailService
from src.events.dtos import EventDTO
from src.events.repository.tests.inmemory_models import InMemoryEmailService, sample_details
from src.guests.dtos import GuestDTO, GuestStatus


@pytest.fixture
def event() -> EventDTO:
    return EventDTO(id=uuid4(), share_token="share", details=sample_details(title="<Party>"))


def _guest(event, **overrides) -> GuestDTO:
    values = {
        "id": uuid4(),
        "event_id": event.id,
        "name": "Ann",
        "status": GuestStatus.NOT_ATTENDING,
        "responded_at": datetime.now(UTC),
        "comment": "Next time!",
        "email": "ann@x.com",
        "manage_token": "ann-token",
    }
    values.update(overrides)
    return GuestDTO(**values)


async def test_notify_rsvp_without_host_address_only_confirms(event):
    email_service = InMemoryEmailService()
    mailer = RsvpMailer(email_service, "https://party.test/")

    await mailer.notify_rsvp(event, _guest(event))

    (confirmation,) = email_service.sent_emails
    assert confirmation.to == "ann@x.com"
    assert "Ann is not attending" in confirmation.text
    assert "https://party.test/event/share?manage=ann-token" in confirmation.text


async def test_host_notification_escapes_html(event):
    email_service = InMemoryEmailService()
    mailer = RsvpMailer(email_service, "https://party.test", host_address="host@x.com")

    await mailer.notify_rsvp(event, _guest(event, email=None))

    (notification,) = email_service.sent_emails
    assert notification.subject == "RSVP update for <Party>"
    assert "&lt;Party&gt;" in notification.html
    assert "Comment: Next time!" in notification.text


async def test_failures_are_swallowed(event, caplog):
    mailer = RsvpMailer(InMemoryEmailService(fail=True), "https://party.test", host_address="h@x.com")

    await mailer.notify_rsvp(event, _guest(event))
    assert await mailer.send_invitation(event, _guest(event)) is False
    assert "Unable to send email" in caplog.text


async def test_mailgun_posts_form_with_basic_auth():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "<msg@mailgun>"})

    class Config:
        mailgun_api_key = "key-123"
        mailgun_domain = "mg.party.test"
        emails_from = "Party <party@mg.party.test>"

    service = MailgunEmailService(Config(), transport=httpx.MockTransport(handler))
    await service.send(EmailMessage(to="ann@x.com", subject="Hi", text="Hello", html="<p>Hello</p>"))

    (request,) = requests
    assert str(request.url) == "https://api.mailgun.net/v3/mg.party.test/messages"
    assert request.headers["Authorization"].startswith("Basic ")
    assert b"to=ann%40x.com" in request.content


async def test_mailgun_error_status_raises():
    class Config:
        mailgun_api_key = "key-123"
        mailgun_domain = "mg.party.test"
        emails_from = "party@mg.party.test"

    transport = httpx.MockTransport(lambda request: httpx.Response(401, text="Forbidden"))
    service = MailgunEmailService(Config(), transport=transport)

    with pytest.raises(httpx.HTTPStatusError):
        await service.send(EmailMessage(to="ann@x.com", subject="Hi", text="Hello", html="Hello"))

"""Fire-and-forget emails around invitations and RSVPs.

Delivery failures are logged and swallowed; they never fail the operation
that triggered the email.
"""

import logging

from src.config.settings import settings
from src.email_service import get_email_service
from src.email_service.base import EmailMessage, EmailServiceBase
from src.email_service.templates import (
    confirmation_email,
    host_notification_email,
    invitation_email,
    manage_url,
)
from src.events.dtos import EventDTO
from src.guests.dtos import GuestDTO

logger = logging.getLogger(__name__)


class RsvpMailer:
    def __init__(
        self,
        email_service: EmailServiceBase,
        frontend_url: str,
        host_address: str | None = None,
    ) -> None:
        self.email_service = email_service
        self.frontend_url = frontend_url
        self.host_address = host_address or None

    async def send_invitation(self, event: EventDTO, guest: GuestDTO) -> bool:
        """Invite a guest with their personal manage link. Returns whether it was sent."""
        if not guest.email or not guest.manage_token:
            return False
        url = manage_url(self.frontend_url, event, guest.manage_token)
        return await self._deliver(invitation_email(event, guest, url))

    async def notify_rsvp(self, event: EventDTO, guest: GuestDTO) -> None:
        if self.host_address:
            await self._deliver(host_notification_email(event, guest, self.host_address))
        if guest.email and guest.manage_token:
            url = manage_url(self.frontend_url, event, guest.manage_token)
            await self._deliver(confirmation_email(event, guest, url))

    async def _deliver(self, message: EmailMessage) -> bool:
        try:
            await self.email_service.send(message)
        except Exception:
            logger.exception("Unable to send email %r to %s", message.subject, message.to)
            return False
        return True


def get_rsvp_mailer() -> RsvpMailer:
    return RsvpMailer(
        email_service=get_email_service(),
        frontend_url=settings.frontend_url,
        host_address=settings.mail_to,
    )

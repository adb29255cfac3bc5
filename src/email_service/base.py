import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    text: str
    html: str


class EmailServiceBase(ABC):
    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """Deliver one message. Raises on delivery failure."""
        pass


class LoggingEmailService(EmailServiceBase):
    """Used when no mail transport is configured. Only logs what would be sent."""

    async def send(self, message: EmailMessage) -> None:
        logger.info("Email delivery disabled, not sending %r to %s", message.subject, message.to)

from typing import Protocol

import httpx

from src.email_service.base import EmailMessage, EmailServiceBase

MAILGUN_API_URL = "https://api.mailgun.net/v3"


class MailgunEmailConfig(Protocol):
    mailgun_api_key: str
    mailgun_domain: str
    emails_from: str


class MailgunEmailService(EmailServiceBase):
    def __init__(
        self,
        config: MailgunEmailConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    async def send(self, message: EmailMessage) -> None:
        """Send via the Mailgun messages API. Non-2xx responses raise httpx.HTTPStatusError."""
        async with httpx.AsyncClient(transport=self._transport, timeout=10.0) as client:
            response = await client.post(
                f"{MAILGUN_API_URL}/{self._config.mailgun_domain}/messages",
                auth=("api", self._config.mailgun_api_key),
                data={
                    "from": self._config.emails_from,
                    "to": message.to,
                    "subject": message.subject,
                    "text": message.text,
                    "html": message.html,
                },
            )
            response.raise_for_status()

from src.config.settings import settings
from src.email_service.base import EmailMessage, EmailServiceBase, LoggingEmailService
from src.email_service.mailgun_service import MailgunEmailService
from src.email_service.smtp_service import SMTPEmailService


def get_email_service() -> EmailServiceBase:
    if settings.mailgun_api_key and settings.mailgun_domain:
        return MailgunEmailService(config=settings)
    if settings.smtp_host:
        return SMTPEmailService(config=settings)
    return LoggingEmailService()


__all__ = [
    "EmailMessage",
    "EmailServiceBase",
    "get_email_service",
]

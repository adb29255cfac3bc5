from dataclasses import dataclass
from datetime import datetime
from html import escape

from src.email_service.base import EmailMessage
from src.events.dtos import EventDTO
from src.guests.dtos import GuestDTO, GuestStatus


def format_event_date(value: datetime) -> str:
    return value.strftime("%A, %B %d, %Y at %H:%M")


def manage_url(frontend_url: str, event: EventDTO, manage_token: str) -> str:
    return f"{frontend_url.rstrip('/')}/event/{event.share_token}?manage={manage_token}"


def _response_line(guest: GuestDTO) -> str:
    line = f"{guest.name} is {'attending' if guest.status == GuestStatus.ATTENDING else 'not attending'}"
    if guest.plus_ones > 0:
        line += f" with +{guest.plus_ones}"
    return line


@dataclass
class EmailTemplates:
    INVITATION_SUBJECT = "You're invited: {title}"
    INVITATION_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #1e293b; max-width: 600px; margin: 0 auto; padding: 20px;">
        <h1 style="color: #4f46e5;">{title}</h1>

        <p>Hi {guest_name},</p>

        <p>{host} would love to see you there.</p>

        <div style="background-color: #eef2ff; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <p><strong>When:</strong> {event_date}</p>
            <p><strong>Where:</strong> {location}</p>
        </div>

        <div style="text-align: center; margin: 30px 0;">
            <a href="{rsvp_url}" style="background-color: #4f46e5; color: white; padding: 15px 30px; text-decoration: none; border-radius: 5px; font-size: 18px;">
                RSVP
            </a>
        </div>

        <p>If the button doesn't work, copy this link into your browser:</p>
        <p style="word-break: break-all;"><a href="{rsvp_url}">{rsvp_url}</a></p>
    </body>
    </html>
    """

    INVITATION_TEXT = """
    Hi {guest_name},

    {host} would love to see you at {title}.

    When: {event_date}
    Where: {location}

    Let us know if you can make it:
    {rsvp_url}
    """

    CONFIRMATION_SUBJECT = "Your RSVP for {title}"
    CONFIRMATION_HTML = """
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
    </head>
    <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #1e293b; max-width: 600px; margin: 0 auto; padding: 20px;">
        <p>Hi {guest_name},</p>

        <p>Thanks for responding. We recorded: <strong>{response}</strong>.</p>

        <p>You can change your answer at any time with this link:</p>
        <p style="word-break: break-all;"><a href="{manage_url}">{manage_url}</a></p>
    </body>
    </html>
    """

    CONFIRMATION_TEXT = """
    Hi {guest_name},

    Thanks for responding. We recorded: {response}.

    You can change your answer at any time with this link:
    {manage_url}
    """

    NOTIFICATION_SUBJECT = "RSVP update for {title}"
    NOTIFICATION_HTML = "<p>{response}</p><p><strong>Event:</strong> {title}</p><p><strong>Comment:</strong> {comment}</p>"
    NOTIFICATION_TEXT = "{response}\nEvent: {title}\nComment: {comment}"


def invitation_email(event: EventDTO, guest: GuestDTO, rsvp_url: str) -> EmailMessage:
    details = event.details
    values = {
        "title": details.title,
        "host": details.host,
        "guest_name": guest.name,
        "event_date": format_event_date(details.starts_at),
        "location": details.location,
        "rsvp_url": rsvp_url,
    }
    return EmailMessage(
        to=guest.email,
        subject=EmailTemplates.INVITATION_SUBJECT.format(title=details.title),
        text=EmailTemplates.INVITATION_TEXT.format(**values),
        html=EmailTemplates.INVITATION_HTML.format(**{k: escape(v) for k, v in values.items()}),
    )


def confirmation_email(event: EventDTO, guest: GuestDTO, url: str) -> EmailMessage:
    values = {
        "guest_name": guest.name,
        "response": _response_line(guest),
        "manage_url": url,
    }
    return EmailMessage(
        to=guest.email,
        subject=EmailTemplates.CONFIRMATION_SUBJECT.format(title=event.details.title),
        text=EmailTemplates.CONFIRMATION_TEXT.format(**values),
        html=EmailTemplates.CONFIRMATION_HTML.format(**{k: escape(v) for k, v in values.items()}),
    )


def host_notification_email(event: EventDTO, guest: GuestDTO, to: str) -> EmailMessage:
    values = {
        "title": event.details.title,
        "response": _response_line(guest),
        "comment": guest.comment or "-",
    }
    return EmailMessage(
        to=to,
        subject=EmailTemplates.NOTIFICATION_SUBJECT.format(title=event.details.title),
        text=EmailTemplates.NOTIFICATION_TEXT.format(**values),
        html=EmailTemplates.NOTIFICATION_HTML.format(**{k: escape(v) for k, v in values.items()}),
    )

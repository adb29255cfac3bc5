"""CLI commands for party invitation management."""

import asyncio
from datetime import datetime
from uuid import UUID

import typer
import uvicorn

from src.auth.passwords import get_password_hasher
from src.auth.tokens import get_token_service
from src.config.settings import settings
from src.email_service.mailer import get_rsvp_mailer
from src.errors import PartyInviterError
from src.events.dtos import EventDetailsDTO
from src.events.features.manage_events.service import ManageEventsService
from src.events.repository.repository import get_event_unit_of_work
from src.guests.dtos import NewGuestDTO
from src.guests.features.manage_guests.service import ManageGuestsService

app = typer.Typer(help="CLI commands for party invitation management")


def _manage_events() -> ManageEventsService:
    return ManageEventsService(get_event_unit_of_work(), get_password_hasher())


def _manage_guests() -> ManageGuestsService:
    return ManageGuestsService(get_event_unit_of_work(), get_rsvp_mailer())


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
):
    """Run the API server."""
    uvicorn.run("src.main:app", host=settings.app_host, port=settings.app_port, reload=reload)


@app.command()
def hash_password(
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Print a bcrypt hash to use as ADMIN_PASSWORD_HASH."""
    typer.echo(get_password_hasher().hash(password))


@app.command()
def issue_admin_token():
    """Print a fresh admin token."""
    typer.echo(get_token_service().issue_admin_token())


@app.command()
def create_event(
    title: str = typer.Argument(..., help="Event title"),
    host: str = typer.Option(..., "--host", "-h", help="Who is hosting"),
    starts_at: datetime = typer.Option(..., "--starts-at", "-s", help="Start date and time"),
    location: str = typer.Option(..., "--location", "-l", help="Where it takes place"),
    message: str = typer.Option("", "--message", "-m", help="Invitation message"),
    password: str = typer.Option(None, "--password", "-p", help="Password-protect the event"),
    hide_guest_list: bool = typer.Option(False, "--hide-guest-list", help="Hide guests from visitors"),
):
    """Create an event and print its share link."""
    details = EventDetailsDTO(
        title=title,
        host=host,
        starts_at=starts_at,
        location=location,
        message=message,
        show_guest_list=not hide_guest_list,
    )

    try:
        view = asyncio.run(_manage_events().create_event(details, password=password))
    except PartyInviterError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Event created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event ID: {view.event.id}", fg=typer.colors.CYAN)
    typer.secho(
        f"  Share link: {settings.frontend_url.rstrip('/')}/event/{view.event.share_token}",
        fg=typer.colors.CYAN,
    )
    if view.event.password_protected:
        typer.secho("  Password protected", fg=typer.colors.YELLOW)


@app.command()
def list_guests(
    event_id: str = typer.Argument(..., help="Event UUID"),
):
    """Show an event's guests with their manage tokens."""
    try:
        view = asyncio.run(_manage_guests().list_guests(UUID(event_id)))
    except PartyInviterError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho(f"{view.event.details.title}: {view.attendee_count} attending", fg=typer.colors.GREEN)
    for guest in view.guests:
        extra = f" +{guest.plus_ones}" if guest.plus_ones else ""
        typer.secho(f"  - {guest.name}{extra} [{guest.status.value}]", fg=typer.colors.BLUE)
        typer.secho(f"    Email: {guest.email or 'N/A'}", fg=typer.colors.BLUE)
        typer.secho(f"    Manage token: {guest.manage_token}", fg=typer.colors.CYAN)


@app.command()
def add_guest(
    event_id: str = typer.Argument(..., help="Event UUID"),
    name: str = typer.Argument(..., help="Guest name"),
    email: str = typer.Option(None, "--email", "-e", help="Send the invitation to this address"),
):
    """Add a pending guest and email them their invitation link."""
    try:
        guest = asyncio.run(
            _manage_guests().add_guest(UUID(event_id), NewGuestDTO(name=name, email=email))
        )
    except PartyInviterError as e:
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(1)

    typer.secho("Guest added!", fg=typer.colors.GREEN)
    typer.secho(f"  Guest ID: {guest.id}", fg=typer.colors.CYAN)
    typer.secho(f"  Manage token: {guest.manage_token}", fg=typer.colors.CYAN)
    if guest.email:
        typer.secho(f"  Invitation sent to {guest.email}", fg=typer.colors.BLUE)


if __name__ == "__main__":
    app()

from dataclasses import replace

from src.events.dtos import EventDTO, EventView, ViewerRole
from src.guests.dtos import GuestDTO, GuestStatus


def attendee_count(guests: list[GuestDTO]) -> int:
    """Headcount of attending guests including their plus-ones."""
    return sum(1 + guest.plus_ones for guest in guests if guest.status == GuestStatus.ATTENDING)


def project_for_viewer(event: EventDTO, guests: list[GuestDTO], role: ViewerRole) -> EventView:
    """
    Filter an event's guests down to what `role` may see.

    Admins get every guest with manage tokens. Everyone else never sees a
    manage token, and sees no guests at all when the host hid the list. The
    headcount is always computed from the full guest set.
    """
    count = attendee_count(guests)
    if role == ViewerRole.ADMIN:
        visible = list(guests)
    elif not event.details.show_guest_list:
        visible = []
    else:
        visible = [replace(guest, manage_token=None) for guest in guests]

    return EventView(event=event, guests=visible, attendee_count=count, role=role)

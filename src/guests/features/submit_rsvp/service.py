import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from fastapi import BackgroundTasks

from src.auth.access import AccessControl, get_access_control
from src.email_service.mailer import RsvpMailer, get_rsvp_mailer
from src.errors import NotFound, Unauthorized
from src.events.dtos import EventView, ViewerRole
from src.events.projection import project_for_viewer
from src.events.repository.repository import EventUnitOfWork, get_event_unit_of_work
from src.guests.dtos import GuestDTO, RsvpSubmission
from src.guests.reconciliation import RsvpReconciler, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RsvpResult:
    view: EventView
    # The submitter's own record, manage token included
    guest: GuestDTO
    manage_token: str
    guest_access_token: str | None = None


class SubmitRsvpService:
    def __init__(
        self,
        unit_of_work: EventUnitOfWork,
        access_control: AccessControl,
        mailer: RsvpMailer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.unit_of_work = unit_of_work
        self.access_control = access_control
        self.mailer = mailer
        self.clock = clock

    async def submit_rsvp(
        self,
        share_token: str,
        submission: RsvpSubmission,
        bearer: str | None = None,
        background_tasks: BackgroundTasks | None = None,
    ) -> RsvpResult:
        """
        Record an RSVP and return the refreshed event as the caller may see it.

        Lookup, write and read-back share one transaction. Emails go out only
        after it committed: queued on `background_tasks` when given, else sent
        before returning.
        """
        async with self.unit_of_work.transaction() as repository:
            event = await repository.get_event_by_share_token(share_token)
            if event is None:
                raise NotFound("Event not found.")

            grant = await self.access_control.resolve_event_access(event, bearer=bearer)
            if grant is None:
                raise Unauthorized()

            reconciler = RsvpReconciler(repository, clock=self.clock)
            guest = await reconciler.reconcile(event.id, submission)
            guests = await repository.get_guests_for_event(event.id)

        logger.info("Recorded RSVP %s for guest %s of event %s", guest.status.value, guest.id, event.id)
        if background_tasks is not None:
            background_tasks.add_task(self.mailer.notify_rsvp, event, guest)
        else:
            await self.mailer.notify_rsvp(event, guest)

        guest_access_token = None
        if event.password_protected and grant.role != ViewerRole.ADMIN:
            guest_access_token = self.access_control.issue_guest_access(event)

        return RsvpResult(
            view=project_for_viewer(event, guests, grant.role),
            guest=guest,
            manage_token=guest.manage_token,
            guest_access_token=guest_access_token,
        )


def get_submit_rsvp_service() -> SubmitRsvpService:
    return SubmitRsvpService(
        unit_of_work=get_event_unit_of_work(),
        access_control=get_access_control(),
        mailer=get_rsvp_mailer(),
    )

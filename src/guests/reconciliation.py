"""RSVP reconciliation.

Maps one RSVP submission onto exactly one guest of an event: the guest
holding the submitted manage token, else the guest with the submitted email,
else a new guest. The engine works on a repository bound to an open
transaction; the caller owns commit and rollback.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID

from src.auth.tokens import generate_manage_token
from src.errors import ConflictRetryable, DependencyFailure, IdentityConflict, ValidationError
from src.events.repository.repository import EventRepository
from src.guests.dtos import RESPONSE_STATUSES, GuestDraft, GuestDTO, GuestStatus, RsvpSubmission
from src.models.base import SHORT_TEXT_LENGTH, TOKEN_LENGTH

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: str | None) -> str | None:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


@dataclass(frozen=True)
class _NormalizedRsvp:
    name: str
    status: GuestStatus
    plus_ones: int
    comment: str
    # Used to find an existing guest
    lookup_email: str | None
    # Stored on the guest; dropped unless attending
    written_email: str | None
    manage_token: str | None


def normalize_submission(submission: RsvpSubmission) -> _NormalizedRsvp:
    name = (submission.name or "").strip()
    if not name:
        raise ValidationError("Please enter your name.", field="name")
    if len(name) > SHORT_TEXT_LENGTH:
        raise ValidationError(f"Names are limited to {SHORT_TEXT_LENGTH} characters.", field="name")

    try:
        status = GuestStatus(submission.status)
    except ValueError:
        status = None
    if status not in RESPONSE_STATUSES:
        raise ValidationError("Please choose whether you are attending.", field="status")

    plus_ones = submission.plus_ones
    if isinstance(plus_ones, bool) or not isinstance(plus_ones, int) or plus_ones < 0:
        raise ValidationError("Plus-ones must be zero or a positive number.", field="plus_ones")

    email = normalize_email(submission.email)
    if email and len(email) > SHORT_TEXT_LENGTH:
        raise ValidationError("Please enter a valid email address.", field="email")
    attending = status == GuestStatus.ATTENDING
    manage_token = (submission.manage_token or "").strip() or None

    return _NormalizedRsvp(
        name=name,
        status=status,
        plus_ones=plus_ones if attending else 0,
        comment=submission.comment or "",
        lookup_email=email,
        written_email=email if attending else None,
        manage_token=manage_token,
    )


class RsvpReconciler:
    def __init__(
        self,
        repository: EventRepository,
        clock: Callable[[], datetime] = utc_now,
        max_attempts: int = MAX_ATTEMPTS,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.max_attempts = max_attempts

    async def reconcile(self, event_id: UUID, submission: RsvpSubmission) -> GuestDTO:
        """
        Create or update the guest this submission belongs to.

        Raises ValidationError for bad input and IdentityConflict when the
        submission would take over another guest's email. A unique violation
        means a concurrent submission won the insert; resolution is re-run so
        the write lands on the winner's row. After `max_attempts` losses the
        call fails with DependencyFailure.
        """
        rsvp = normalize_submission(submission)

        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._apply(event_id, rsvp)
            except ConflictRetryable:
                logger.info(
                    "RSVP for event %s hit a uniqueness conflict (attempt %s/%s)",
                    event_id,
                    attempt,
                    self.max_attempts,
                )

        logger.error("RSVP for event %s still conflicting after %s attempts", event_id, self.max_attempts)
        raise DependencyFailure()

    async def _apply(self, event_id: UUID, rsvp: _NormalizedRsvp) -> GuestDTO:
        target = await self._resolve(event_id, rsvp)

        if target is not None and rsvp.written_email:
            owner = await self.repository.find_guest_by_email(event_id, rsvp.written_email)
            if owner is not None and owner.id != target.id:
                raise IdentityConflict()

        draft = GuestDraft(
            name=rsvp.name,
            status=rsvp.status,
            responded_at=self.clock(),
            plus_ones=rsvp.plus_ones,
            comment=rsvp.comment,
            email=rsvp.written_email,
        )

        if target is not None:
            return await self.repository.upsert_guest(event_id, draft, guest_id=target.id)

        manage_token = await self._manage_token_for_new_guest(rsvp.manage_token)
        return await self.repository.upsert_guest(event_id, replace(draft, manage_token=manage_token))

    async def _resolve(self, event_id: UUID, rsvp: _NormalizedRsvp) -> GuestDTO | None:
        if rsvp.manage_token:
            guest = await self.repository.find_guest_by_manage_token(rsvp.manage_token)
            if guest is not None and guest.event_id == event_id:
                return guest

        if rsvp.lookup_email:
            return await self.repository.find_guest_by_email(event_id, rsvp.lookup_email)

        return None

    async def _manage_token_for_new_guest(self, supplied: str | None) -> str:
        if (
            supplied
            and len(supplied) <= TOKEN_LENGTH
            and await self.repository.find_guest_by_manage_token(supplied) is None
        ):
            return supplied
        return generate_manage_token()

"""Domain errors shared by every feature.

Each error carries the HTTP status it maps to and a message that is safe to
show to the caller. Authorization failures always use the same generic text
so the public API never reveals whether a share token, a password or a
token was the part that failed.
"""


class PartyInviterError(Exception):
    """Base class for errors rendered by the API exception handler."""

    status_code: int = 500
    default_message: str = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PartyInviterError):
    """A required field is missing or malformed. User-correctable."""

    status_code = 400
    default_message = "The submitted data is invalid."

    def __init__(self, message: str | None = None, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class Unauthorized(PartyInviterError):
    status_code = 401
    default_message = "Access denied. Check your password or link and try again."


class NotFound(PartyInviterError):
    status_code = 404
    default_message = "Not found."


class IdentityConflict(PartyInviterError):
    """An RSVP would take over an email that belongs to another guest."""

    status_code = 409
    default_message = "This email address is already linked to another response for this event."


class ConflictRetryable(PartyInviterError):
    """A uniqueness constraint fired at the storage layer.

    Raised by repositories, recovered by the reconciliation engine and never
    rendered to callers.
    """

    status_code = 409
    default_message = "A concurrent change was detected."


class DependencyFailure(PartyInviterError):
    status_code = 503
    default_message = "The service is temporarily unavailable. Please try again."

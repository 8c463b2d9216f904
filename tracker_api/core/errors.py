"""Business-rule outcomes raised by the access and sharing services.

Each subclass is an expected outcome the HTTP layer maps to a response;
anything else that escapes a service is an infrastructure failure.
"""


class TrackerError(Exception):
    """Base class for expected business-rule outcomes."""

    status_code = 400
    code = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TrackerError):
    """Target is absent, not the caller's, or in a terminal state.

    "Not yours" and "already used" surface identically on purpose.
    """

    status_code = 404
    code = "NOT_FOUND"


class ConflictError(TrackerError):
    """A uniqueness rule would be violated."""

    status_code = 409
    code = "CONFLICT"


class ForbiddenError(TrackerError):
    """Caller lacks the permission level or role for the action."""

    status_code = 403
    code = "FORBIDDEN"


class InvalidRequestError(TrackerError):
    """Malformed input: bad code format or unknown role/permission value."""

    status_code = 400
    code = "VALIDATION_ERROR"


class RateLimitedError(TrackerError):
    """Redemption throttle tripped."""

    status_code = 429
    code = "RATE_LIMITED"

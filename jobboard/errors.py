"""Domain errors raised by the services and translated by the API layer."""


class JobBoardError(Exception):
    """Base error with an HTTP status class and a client-safe message."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(JobBoardError):
    status_code = 400
    default_message = "Validation error"


class Unauthenticated(JobBoardError):
    status_code = 401
    default_message = "Authentication required"


class InvalidOrExpiredToken(Unauthenticated):
    default_message = "Invalid or expired token"


class Forbidden(JobBoardError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(JobBoardError):
    status_code = 404
    default_message = "Resource not found"


class JobNotFound(NotFound):
    default_message = "Job not found"


class NotFoundOrForbidden(JobBoardError):
    """Missing and not-yours look the same to the caller."""

    status_code = 404
    default_message = "Resource not found or you do not have permission to access it"


class Conflict(JobBoardError):
    status_code = 409
    default_message = "Resource already exists"


class DuplicateSubmission(Conflict):
    default_message = "You have already applied to this job"


class UpstreamUnavailable(JobBoardError):
    """Evaluation provider failure. Absorbed by the scoring engine."""

    status_code = 503
    default_message = "Evaluation provider unavailable"


class RateLimited(JobBoardError):
    status_code = 429
    default_message = "Rate limit exceeded"

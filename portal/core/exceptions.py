"""Domain errors raised by the grading core and the routers.

Every error carries the HTTP status it maps to; the handler registered in
``portal.main`` renders them in the same ``detail`` shape as ``HTTPException``.
"""


class PortalError(Exception):
    status_code = 400
    error = "PortalError"

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_detail(self) -> dict:
        return {
            "error": self.error,
            "message": self.message,
            "details": [{"field": self.field, "message": self.message}],
        }


class ValidationError(PortalError):
    """Malformed or incomplete input. Never retryable."""

    status_code = 400
    error = "ValidationError"


class NotAuthorizedError(PortalError):
    status_code = 403
    error = "NotAuthorized"


class NotFoundError(PortalError):
    status_code = 404
    error = "NotFound"


class DuplicateAttemptError(PortalError):
    """A student submitted a second attempt for the same quiz."""

    status_code = 409
    error = "DuplicateAttempt"

"""Errors raised by the scheduling core.

Each kind carries the HTTP status it maps to so the API layer can translate
it without knowing the individual classes.
"""


class SchedulingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed input, detected before any storage access."""
    status_code = 400


class NotFoundError(SchedulingError):
    status_code = 404


class ConflictError(SchedulingError):
    """The slot is already booked or the record already exists."""
    status_code = 409


class ForbiddenError(SchedulingError):
    status_code = 403


class InternalError(SchedulingError):
    status_code = 500

    def __init__(self, message: str = 'Internal server error'):
        super().__init__(message)

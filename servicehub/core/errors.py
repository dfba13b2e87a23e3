"""Domain errors raised by the scheduling services.

Endpoints translate these into ``HTTPException`` responses; see
``http_status_for``.
"""

from fastapi import HTTPException, status


class SchedulingError(Exception):
    """Base class for scheduling failures with a user-facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidDateError(SchedulingError):
    pass


class InvalidTimeError(SchedulingError):
    pass


class BookingNotFoundError(SchedulingError):
    pass


class BookingAccessError(SchedulingError):
    pass


class BookingStateError(SchedulingError):
    pass


class TimeOffConflictError(SchedulingError):
    pass


class TimeOffNotFoundError(SchedulingError):
    pass


class BookingDataError(SchedulingError):
    """A stored booking holds a value the scheduler cannot interpret."""


_STATUS_CODES = {
    InvalidDateError: status.HTTP_400_BAD_REQUEST,
    InvalidTimeError: status.HTTP_400_BAD_REQUEST,
    BookingStateError: status.HTTP_400_BAD_REQUEST,
    TimeOffConflictError: status.HTTP_400_BAD_REQUEST,
    BookingAccessError: status.HTTP_403_FORBIDDEN,
    BookingNotFoundError: status.HTTP_404_NOT_FOUND,
    TimeOffNotFoundError: status.HTTP_404_NOT_FOUND,
    BookingDataError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def http_status_for(error: SchedulingError) -> int:
    """Map a domain error to the HTTP status the API responds with."""
    for error_type in type(error).__mro__:
        if error_type in _STATUS_CODES:
            return _STATUS_CODES[error_type]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(error: SchedulingError) -> HTTPException:
    return HTTPException(status_code=http_status_for(error), detail=error.message)

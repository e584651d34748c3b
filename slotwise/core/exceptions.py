# slotwise/core/exceptions.py
from http import HTTPStatus


class SchedulingError(Exception):
    """
    Base class for expected business outcomes of the scheduling engine.

    Each subclass carries the HTTP status the API layer answers with, so
    routes never have to translate them one by one.
    """

    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(SchedulingError):
    """
    Referenced event type, booking, user or override does not exist
    (an inactive event type counts as missing).
    """

    status_code = HTTPStatus.NOT_FOUND


class ConflictError(SchedulingError):
    """
    The requested write collides with current state: the slot overlaps a
    confirmed booking, the booking is already cancelled, or a unique key
    (slug, username) is taken.
    """

    status_code = HTTPStatus.CONFLICT


class SchedulingValidationError(SchedulingError):
    """
    Input passed shape validation but is not acceptable (bad range,
    unknown timezone, date in the past...).
    """

    status_code = HTTPStatus.BAD_REQUEST

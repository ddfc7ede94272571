"""Error taxonomy of the booking engine."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    OUTSIDE_HOURS = "OUTSIDE_HOURS"
    TOO_SOON = "TOO_SOON"
    TOO_FAR = "TOO_FAR"
    OVERLAP = "OVERLAP"
    SLOT_TAKEN = "SLOT_TAKEN"
    STALE_VERSION = "STALE_VERSION"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    GATEWAY_ERROR = "GATEWAY_ERROR"


UNAVAILABLE_MESSAGES = {
    ErrorCode.OUTSIDE_HOURS: "The studio is not open for the whole requested time.",
    ErrorCode.TOO_SOON: "This time is too soon to book. Please pick a later time.",
    ErrorCode.TOO_FAR: "This time is too far ahead to book. Please pick an earlier time.",
    ErrorCode.OVERLAP: "This time overlaps another booking. Please pick another time.",
    ErrorCode.SLOT_TAKEN: "This slot has just been taken. Please pick another time.",
}


class BookingError(Exception):
    """Base class for errors raised by the booking engine."""

    code: ErrorCode | None = None
    default_detail = "Booking engine error."

    def __init__(self, detail: str | None = None, *, code: ErrorCode | None = None):
        if code is not None:
            self.code = code
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def as_dict(self) -> dict[str, str | None]:
        return {"code": self.code.value if self.code else None, "detail": self.detail}


class BookingUnavailableError(BookingError):
    """The requested interval cannot be booked; the client should pick another time."""

    def __init__(self, code: ErrorCode, detail: str | None = None):
        super().__init__(detail or UNAVAILABLE_MESSAGES[code], code=code)


class StaleVersionError(BookingError):
    code = ErrorCode.STALE_VERSION
    default_detail = "Booking was modified concurrently."


class IllegalTransitionError(BookingError):
    code = ErrorCode.ILLEGAL_TRANSITION
    default_detail = "Transition is not allowed from the booking's current state."


class NotFoundError(BookingError):
    default_detail = "Not found."


class BookingNotFoundError(NotFoundError):
    default_detail = "Booking not found."


class ServiceNotFoundError(NotFoundError):
    default_detail = "Service not found or not bookable."

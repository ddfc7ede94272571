"""Errors raised at the payment gateway boundary."""

from __future__ import annotations

from apps.bookings.errors import BookingError, ErrorCode


class SignatureInvalidError(BookingError):
    code = ErrorCode.SIGNATURE_INVALID
    default_detail = "Webhook signature could not be verified."


class PaymentGatewayError(BookingError):
    code = ErrorCode.GATEWAY_ERROR
    default_detail = "Payment provider is unavailable. Please try again."


class MalformedEventError(Exception):
    """Webhook payload does not describe a valid event."""

    def __init__(self, errors):
        self.errors = errors
        super().__init__(str(errors))


class UnsupportedEventTypeError(MalformedEventError):
    """Webhook carries an event type this service does not act on."""

    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__({"event_type": [f"Unsupported event type: {event_type}"]})

"""
Payment Gateway Events

Webhook payloads are parsed once, at the boundary, into this closed set
of event types. Nothing past ``parse_event`` looks at raw strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import ClassVar, Union

from shared.domain.value_objects import Money

from .errors import MalformedEventError, UnsupportedEventTypeError
from .serializers import WebhookEventSerializer


@dataclass(frozen=True)
class GatewayEvent:
    event_type: ClassVar[str] = ""

    event_id: str
    session_ref: str
    occurred_at: datetime


@dataclass(frozen=True)
class SessionCompleted(GatewayEvent):
    """Checkout session paid. ``amount`` may be a deposit or the full price."""

    event_type: ClassVar[str] = "session_completed"
    amount: Money


@dataclass(frozen=True)
class PaymentSucceeded(GatewayEvent):
    event_type: ClassVar[str] = "payment_succeeded"
    amount: Money


@dataclass(frozen=True)
class SessionExpired(GatewayEvent):
    event_type: ClassVar[str] = "session_expired"


@dataclass(frozen=True)
class PaymentFailed(GatewayEvent):
    event_type: ClassVar[str] = "payment_failed"
    failure_message: str = ""


@dataclass(frozen=True)
class RefundIssued(GatewayEvent):
    event_type: ClassVar[str] = "refund_issued"
    amount: Money


AnyGatewayEvent = Union[SessionCompleted, PaymentSucceeded, SessionExpired, PaymentFailed, RefundIssued]

EVENT_TYPES: dict[str, type[GatewayEvent]] = {
    cls.event_type: cls
    for cls in (SessionCompleted, PaymentSucceeded, SessionExpired, PaymentFailed, RefundIssued)
}

AMOUNT_EVENTS = (SessionCompleted, PaymentSucceeded, RefundIssued)


def event_amount(event: GatewayEvent) -> Money | None:
    return getattr(event, "amount", None)


def parse_event(payload) -> GatewayEvent:
    """Turn a decoded webhook body into one of the event classes above.

    Raises MalformedEventError with field errors for invalid payloads and
    UnsupportedEventTypeError for event types outside the set.
    """

    if not isinstance(payload, dict):
        raise MalformedEventError({"non_field_errors": ["Expected a JSON object."]})

    serializer = WebhookEventSerializer(data=payload)
    if not serializer.is_valid():
        raise MalformedEventError(serializer.errors)
    data = serializer.validated_data

    event_cls = EVENT_TYPES.get(data["event_type"])
    if event_cls is None:
        raise UnsupportedEventTypeError(data["event_type"])

    try:
        occurred_at = datetime.fromtimestamp(data["timestamp"], tz=dt_timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise MalformedEventError({"timestamp": ["Out of range."]}) from exc

    common = {
        "event_id": data["event_id"],
        "session_ref": data["payment_session_ref"],
        "occurred_at": occurred_at,
    }

    if event_cls in AMOUNT_EVENTS:
        if not data["currency"]:
            raise MalformedEventError({"currency": [f"Required for {event_cls.event_type} events."]})
        if data["amount"] <= 0:
            raise MalformedEventError({"amount": [f"Must be positive for {event_cls.event_type} events."]})
        return event_cls(amount=Money.from_minor_units(data["amount"], data["currency"]), **common)

    if event_cls is PaymentFailed:
        return PaymentFailed(failure_message=data["failure_message"], **common)

    return event_cls(**common)

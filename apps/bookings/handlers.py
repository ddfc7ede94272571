"""Subscribers for booking domain events."""

from __future__ import annotations

import structlog

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

audit_logger = structlog.get_logger("apps.bookings.audit")


def log_domain_event(event: DomainEvent) -> None:
    """Write every committed booking event to the audit log."""

    audit_logger.info("booking.event", **event.to_dict())


def register(bus: MessageBus) -> None:
    bus.register_event_handler(DomainEvent, log_domain_event)

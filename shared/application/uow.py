"""
Unit of Work Pattern

Wraps a block of persistence work in a database transaction and
publishes the domain events raised inside it only after the outermost
transaction has committed.
"""

from functools import partial
from typing import Iterable, List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            updated = repository.compare_and_set(booking_id, version, fields)
            uow.add_event(BookingConfirmed(booking_id=booking_id))
        # Events are published after commit

    Nested units of work become savepoints; their events are still held
    back until the outermost transaction commits.
    """

    def __init__(self, using: str | None = None):
        self.using = using
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic(using=self.using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)
            self._atomic = None

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def add_events(self, events: Iterable[DomainEvent]):
        self._events.extend(events)

    def commit(self):
        """Schedule publishing of the collected events for after commit"""
        events = self._events.copy()
        self._events.clear()
        logger.debug(f"Committing unit of work with {len(events)} events")
        if events:
            transaction.on_commit(partial(self._publish_events, events), using=self.using)

    def rollback(self):
        """Discard collected events"""
        if self._events:
            logger.info(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.debug(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)

"""
Base Domain Classes

Building blocks shared by the scheduling and payment domains:
- ValueObject: Immutable objects compared by value
- DomainEvent: Events that represent something that happened
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from django.utils import timezone


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects

    Value objects are immutable and have no identity.
    Two value objects are equal if all their attributes are equal.
    """
    pass


def _plain(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (UUID, Decimal, ValueObject)):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass
class DomainEvent:
    """
    Base class for domain events

    Domain events are collected by a unit of work and handed to the
    message bus once the surrounding database transaction has committed.
    The bookkeeping fields are keyword-only so subclasses can declare
    their own required fields.
    """
    event_id: UUID = field(default_factory=uuid4, kw_only=True)
    occurred_at: datetime = field(default_factory=timezone.now, kw_only=True)
    aggregate_id: int | None = field(default=None, kw_only=True)

    @property
    def event_type(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict:
        """Convert event to a flat dictionary suitable for structured logs"""
        data = {f.name: _plain(getattr(self, f.name)) for f in fields(self)}
        data['event_type'] = self.event_type
        return data

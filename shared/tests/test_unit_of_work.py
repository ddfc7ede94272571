from dataclasses import dataclass
from unittest.mock import patch

import pytest

from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent


@dataclass
class SomethingHappened(DomainEvent):
    name: str


def test_bus_routes_by_event_hierarchy():
    bus = MessageBus()
    specific, catch_all = [], []
    bus.register_event_handler(SomethingHappened, specific.append)
    bus.subscribe(DomainEvent)(catch_all.append)

    event = SomethingHappened(name="x", aggregate_id=7)
    bus.publish_events([event])

    assert specific == [event]
    assert catch_all == [event]


def test_failing_handler_does_not_stop_others():
    bus = MessageBus()
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, received.append)

    bus.publish_events([SomethingHappened(name="x")])

    assert len(received) == 1


def test_event_to_dict_is_flat():
    data = SomethingHappened(name="x", aggregate_id=3).to_dict()
    assert data["event_type"] == "SomethingHappened"
    assert data["aggregate_id"] == 3
    assert isinstance(data["event_id"], str)
    assert isinstance(data["occurred_at"], str)


@pytest.mark.django_db
def test_events_published_only_after_commit(django_capture_on_commit_callbacks):
    event = SomethingHappened(name="committed")
    with patch("shared.application.message_bus.message_bus.publish_events") as publish:
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            with DjangoUnitOfWork() as uow:
                uow.add_event(event)
                publish.assert_not_called()

    assert len(callbacks) == 1
    publish.assert_called_once_with([event])


@pytest.mark.django_db
def test_events_discarded_on_rollback(django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks() as callbacks:
        with pytest.raises(RuntimeError):
            with DjangoUnitOfWork() as uow:
                uow.add_event(SomethingHappened(name="lost"))
                raise RuntimeError("abort")

    assert callbacks == []

"""
Message Bus

Routes committed domain events to the handlers that subscribed to them.
"""

from typing import Callable, Dict, Iterable, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    In-process event bus

    Multiple handlers may subscribe to the same event type. A handler
    subscribed to ``DomainEvent`` receives every event.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered {handler.__name__} for {event_type.__name__}")

    def subscribe(self, *event_types: Type[DomainEvent]):
        """Decorator form of ``register_event_handler``"""
        def decorator(handler: EventHandler) -> EventHandler:
            for event_type in event_types:
                self.register_event_handler(event_type, handler)
            return handler
        return decorator

    def handlers_for(self, event: DomainEvent) -> List[EventHandler]:
        matched: List[EventHandler] = []
        for event_type in type(event).__mro__:
            for handler in self._event_handlers.get(event_type, []):
                if handler not in matched:
                    matched.append(handler)
        return matched

    def publish_events(self, events: Iterable[DomainEvent]):
        """
        Publish domain events

        Errors in handlers are logged and don't stop other handlers:
        the state change behind the event has already been committed.
        """
        for event in events:
            handlers = self.handlers_for(event)
            if not handlers:
                logger.debug(f"No handlers registered for event {event.event_type}")
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {handler.__name__} "
                        f"for event {event.event_type}: {e}",
                        exc_info=True
                    )


# Global message bus instance
message_bus = MessageBus()

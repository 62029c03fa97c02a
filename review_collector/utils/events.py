"""
Event bus.

Synchronous fan-out of collector events to registered observers.
"""

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Type, Union

from review_collector.models.events import CollectorEvent, EVENT_TYPES

logger = logging.getLogger(__name__)

Handler = Callable[[CollectorEvent], None]
EventKey = Union[str, Type[CollectorEvent]]


class EventBus:
    """
    Plain publish/subscribe for collector events.

    Handlers are keyed by event type and may be registered with either the
    event class or its wire name ("review", "page complete",
    "done collecting", "done with apps"). emit() calls every handler of the
    event's type in registration order; handler exceptions propagate.
    """

    def __init__(self):
        self._handlers: Dict[Type[CollectorEvent], List[Handler]] = defaultdict(list)

    def on(self, event: EventKey, handler: Handler) -> None:
        """Register a handler for an event type."""
        if not callable(handler):
            raise TypeError("Event handler must be callable")
        self._handlers[self._resolve(event)].append(handler)

    def off(self, event: EventKey, handler: Handler) -> bool:
        """
        Remove a previously registered handler.

        Returns:
            True if the handler was registered, False otherwise
        """
        handlers = self._handlers.get(self._resolve(event), [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def emit(self, event: CollectorEvent) -> None:
        """Deliver an event to all of its handlers."""
        handlers = list(self._handlers.get(type(event), []))
        logger.debug(f"Emitting '{event.name}' to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(event)

    def handler_count(self, event: EventKey) -> int:
        return len(self._handlers.get(self._resolve(event), []))

    @staticmethod
    def _resolve(event: EventKey) -> Type[CollectorEvent]:
        if isinstance(event, str):
            if event not in EVENT_TYPES:
                raise ValueError(
                    f"Unknown event: {event}. Must be one of {sorted(EVENT_TYPES)}"
                )
            return EVENT_TYPES[event]
        if isinstance(event, type) and issubclass(event, CollectorEvent):
            return event
        raise ValueError(f"Unknown event: {event!r}")

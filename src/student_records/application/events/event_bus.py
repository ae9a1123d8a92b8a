"""
Event Bus System

Provides publish/subscribe for domain events.

All publishers and subscribers run on the Qt main thread (the repository is
only touched from the event loop), so handlers are called synchronously in
subscription order. A handler that raises is logged and skipped; it never
aborts the publish or the mutation that triggered it.
"""
from typing import Dict, List, Callable, Union, Type

from student_records.application.events.events import DomainEvent
from student_records.utils.message import Log


ALL_EVENTS = "*"

Handler = Callable[[DomainEvent], None]


class EventBus:
    """
    Event bus for publishing and subscribing to domain events.

    Usage:
        bus = EventBus()
        bus.subscribe("StudentAdded", handle_added)
        # Or with class:
        bus.subscribe(StudentAdded, handle_added)
        # Or every event:
        bus.subscribe(ALL_EVENTS, handle_any)
        bus.publish(StudentAdded(data={"student": student}))
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def _normalize_event_name(self, event_name_or_class: Union[str, Type[DomainEvent]]) -> str:
        """Convert event class or string to normalized string name."""
        if isinstance(event_name_or_class, str):
            return event_name_or_class
        return getattr(event_name_or_class, "name", None) or event_name_or_class.__name__

    def subscribe(self, event_name: Union[str, Type[DomainEvent]], handler: Handler) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_name: Name of the event type, event class, or ALL_EVENTS
            handler: Function to call when event is published
        """
        event_name = self._normalize_event_name(event_name)
        handlers = self._subscribers.setdefault(event_name, [])
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, event_name: Union[str, Type[DomainEvent]], handler: Handler) -> None:
        """
        Unsubscribe from events of a specific type.

        Args:
            event_name: Name of the event type or event class
            handler: Handler function to remove
        """
        event_name = self._normalize_event_name(event_name)
        handlers = self._subscribers.get(event_name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._subscribers[event_name]

    def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all subscribers.

        Args:
            event: DomainEvent instance to publish
        """
        event_name = event.name
        # Copy so handlers may unsubscribe while being called
        handlers = list(self._subscribers.get(event_name, []))
        handlers += [h for h in self._subscribers.get(ALL_EVENTS, []) if h not in handlers]

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                Log.error(f"EventBus: Error in handler for '{event_name}': {e}")

    def get_subscriber_count(self, event_name: str) -> int:
        return len(self._subscribers.get(event_name, []))

    def clear(self) -> None:
        """Clear all subscribers"""
        self._subscribers.clear()

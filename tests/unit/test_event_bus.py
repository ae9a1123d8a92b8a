"""
Tests for EventBus
"""
from unittest.mock import MagicMock

from student_records.application.events import (
    ALL_EVENTS,
    EventBus,
    MUTATION_EVENTS,
    StudentAdded,
    StudentRemoved,
    StudentsReloaded,
)


class TestEventBus:

    def test_subscribe_by_name_and_class(self):
        bus = EventBus()
        by_name, by_class = MagicMock(), MagicMock()
        bus.subscribe("StudentAdded", by_name)
        bus.subscribe(StudentAdded, by_class)

        event = StudentAdded(data={"student": None})
        bus.publish(event)

        by_name.assert_called_once_with(event)
        by_class.assert_called_once_with(event)

    def test_only_matching_handlers_called(self):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(StudentRemoved, handler)
        bus.publish(StudentAdded())
        handler.assert_not_called()

    def test_wildcard_receives_everything_after_specific(self):
        bus = EventBus()
        calls = []
        bus.subscribe(ALL_EVENTS, lambda e: calls.append(("any", e.name)))
        bus.subscribe(StudentAdded, lambda e: calls.append(("added", e.name)))

        bus.publish(StudentAdded())
        bus.publish(StudentsReloaded())

        assert calls == [
            ("added", "StudentAdded"),
            ("any", "StudentAdded"),
            ("any", "StudentsReloaded"),
        ]

    def test_duplicate_subscription_ignored(self):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(StudentAdded, handler)
        bus.subscribe(StudentAdded, handler)
        assert bus.get_subscriber_count("StudentAdded") == 1

    def test_unsubscribe(self):
        bus = EventBus()
        handler = MagicMock()
        bus.subscribe(StudentAdded, handler)
        bus.unsubscribe(StudentAdded, handler)
        bus.unsubscribe(StudentAdded, handler)
        bus.publish(StudentAdded())
        handler.assert_not_called()
        assert bus.get_subscriber_count("StudentAdded") == 0

    def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        after = MagicMock()
        bus.subscribe(StudentAdded, MagicMock(side_effect=ValueError("boom")))
        bus.subscribe(StudentAdded, after)
        bus.publish(StudentAdded())
        after.assert_called_once()

    def test_handler_may_unsubscribe_during_publish(self):
        bus = EventBus()
        seen = []

        def once(event):
            seen.append(event.name)
            bus.unsubscribe(StudentAdded, once)

        bus.subscribe(StudentAdded, once)
        bus.publish(StudentAdded())
        bus.publish(StudentAdded())
        assert seen == ["StudentAdded"]

    def test_clear(self):
        bus = EventBus()
        bus.subscribe(StudentAdded, MagicMock())
        bus.clear()
        assert bus.get_subscriber_count("StudentAdded") == 0

    def test_mutation_events_exclude_reload(self):
        assert StudentsReloaded.name not in MUTATION_EVENTS
        assert StudentAdded.name in MUTATION_EVENTS

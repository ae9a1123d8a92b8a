from student_records.application.events.events import (
    DomainEvent,
    StudentAdded,
    StudentUpdated,
    StudentRemoved,
    StudentsReloaded,
    MUTATION_EVENTS,
)
from student_records.application.events.event_bus import EventBus, ALL_EVENTS

__all__ = [
    'DomainEvent',
    'StudentAdded',
    'StudentUpdated',
    'StudentRemoved',
    'StudentsReloaded',
    'MUTATION_EVENTS',
    'EventBus',
    'ALL_EVENTS',
]

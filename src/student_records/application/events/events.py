"""
Domain Events

Events published by StudentRepository after the collection changes.
Used for loose coupling between the store, the sync controller and the UI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict


@dataclass
class DomainEvent:
    """Base class for all domain events"""
    name: ClassVar[str] = "DomainEvent"
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class StudentAdded(DomainEvent):
    """
    Data fields:
        - student: The Student appended to the collection
    """
    name: ClassVar[str] = "StudentAdded"


@dataclass
class StudentUpdated(DomainEvent):
    """
    Data fields:
        - original_id: Id the record was stored under before the update
        - student: The replacement Student
    """
    name: ClassVar[str] = "StudentUpdated"


@dataclass
class StudentRemoved(DomainEvent):
    """
    Data fields:
        - student_id: Id of the removed record
    """
    name: ClassVar[str] = "StudentRemoved"


@dataclass
class StudentsReloaded(DomainEvent):
    """
    Published after the whole collection was replaced from the file.

    Data fields:
        - count: Number of records kept
        - path: Data file path as a string
    """
    name: ClassVar[str] = "StudentsReloaded"


# Events that change the in-memory collection relative to the file
MUTATION_EVENTS = (StudentAdded.name, StudentUpdated.name, StudentRemoved.name)

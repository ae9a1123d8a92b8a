"""
Student search filter.

A query matches a student when it appears, case-insensitively, in any
displayed column. Blank queries match everything.
"""
from typing import Callable, Iterable, List, Optional

from student_records.domain.entities.student import Student


def searchable_text(student: Student) -> List[str]:
    """Column values a query is matched against."""
    return [
        str(student.id),
        student.full_name or "",
        str(student.age),
        student.address or "",
        student.course_year or "",
        student.birthday.isoformat() if student.birthday else "",
        student.email or "",
    ]


def build_search_predicate(query: Optional[str]) -> Callable[[Student], bool]:
    needle = (query or "").strip().casefold()
    if not needle:
        return lambda student: True

    def matches(student: Student) -> bool:
        return any(needle in value.casefold() for value in searchable_text(student))

    return matches


def filter_students(students: Iterable[Student], query: Optional[str]) -> List[Student]:
    predicate = build_search_predicate(query)
    return [s for s in students if predicate(s)]

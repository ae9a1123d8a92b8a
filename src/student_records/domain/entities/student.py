"""
Student Entity

One row of the student record file.

The entity itself enforces nothing: uniqueness and business rules live in
StudentRepository and validate_student(). Identity for set membership and
equality is the id alone, so a record edited in a form still compares equal
to the stored one it replaces.
"""
from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Optional


def normalize_key(value: Optional[str]) -> str:
    """Trimmed, case-folded comparison key ("" for None or blank)."""
    if value is None:
        return ""
    return value.strip().casefold()


@dataclass(eq=False)
class Student:
    """
    Student record.

    Attributes:
        id: Positive primary key
        full_name: Optional display name
        age: Age in years
        address: Free-form address
        course_year: Free-form course and year label (e.g. "BS-CS 2")
        birthday: Optional date of birth
        email: Optional email address
    """
    id: int = 0
    full_name: str = ""
    age: int = 0
    address: str = ""
    course_year: str = ""
    birthday: Optional[date] = None
    email: str = ""

    def __eq__(self, other) -> bool:
        if not isinstance(other, Student):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def name_key(self) -> str:
        return normalize_key(self.full_name)

    @property
    def email_key(self) -> str:
        return normalize_key(self.email)

    def same_fields(self, other: "Student") -> bool:
        """Field-by-field comparison (== only compares ids)."""
        return all(getattr(self, f.name) == getattr(other, f.name) for f in fields(self))

    def copy_with(self, **changes) -> "Student":
        return replace(self, **changes)

    def __str__(self) -> str:
        birthday = self.birthday.isoformat() if self.birthday else "-"
        return (
            f"{self.id}: {self.full_name or '-'} | age {self.age} | {self.address or '-'} | "
            f"{self.course_year or '-'} | {birthday} | {self.email or '-'}"
        )

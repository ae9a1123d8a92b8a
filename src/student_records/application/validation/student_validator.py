"""
Student business rules.

validate_student() is advisory: forms call it before add/update to collect
every message at once. The repository enforces id/name/email uniqueness on
its own, and both go through StudentRepository.find_conflicts() so the two
layers agree on what a collision is.
"""
import re
from datetime import date
from typing import Callable, Optional, TYPE_CHECKING

from student_records.domain.entities.student import Student
from .validation_framework import (
    ValidationResult,
    RangeValidator,
    PatternValidator,
    CustomValidator,
    validate,
)

if TYPE_CHECKING:
    from student_records.infrastructure.persistence.student_repository import StudentRepository


MIN_AGE = 0
MAX_AGE = 150
EMAIL_PATTERN = r"[^@\n\r]+@[^@\n\r]+\.[^@\n\r]+"

MSG_ID_NOT_POSITIVE = "ID number must be a positive integer"
MSG_AGE_RANGE = f"Age must be between {MIN_AGE} and {MAX_AGE}"
MSG_EMAIL_FORMAT = "Invalid email format"
MSG_BIRTHDAY_FUTURE = "Birthday cannot be in the future"
MSG_NAME_DIGITS = "Full name cannot contain numbers"
MSG_DUPLICATE_ID = "ID already exists"
MSG_DUPLICATE_NAME = "Full name already exists"
MSG_DUPLICATE_EMAIL = "Email already exists"

_age_validator = RangeValidator(MIN_AGE, MAX_AGE, MSG_AGE_RANGE)
_email_validator = PatternValidator(EMAIL_PATTERN, MSG_EMAIL_FORMAT)
# ASCII digits only; superscripts and other numeric symbols are allowed
_DIGIT_RE = re.compile(r"[0-9]")
_name_validator = CustomValidator(lambda name: not _DIGIT_RE.search(name), MSG_NAME_DIGITS)


def validate_student(
    student: Student,
    check_duplicate_id: bool,
    repository: Optional["StudentRepository"] = None,
    original_id: Optional[int] = None,
    today: Optional[Callable[[], date]] = None,
) -> ValidationResult:
    """
    Check a student against every rule and collect all failures.

    Args:
        student: Candidate record (not yet stored)
        check_duplicate_id: Report an id already held by another record
        repository: Store to check uniqueness against (rules 6-8 skipped if None)
        original_id: Id of the record being edited, None when adding
        today: Date provider, defaults to date.today

    Returns:
        ValidationResult whose errors list the messages in rule order
    """
    result = ValidationResult()
    current_day = (today or date.today)()

    if student.id <= 0:
        result.add_error(MSG_ID_NOT_POSITIVE)

    result.merge(validate(student.age, _age_validator))

    if student.email and student.email.strip():
        result.merge(validate(student.email, _email_validator))

    if student.birthday is not None:
        result.merge(validate(
            student.birthday,
            CustomValidator(lambda d: d <= current_day, MSG_BIRTHDAY_FUTURE),
        ))

    full_name = (student.full_name or "").strip()
    if full_name:
        result.merge(validate(full_name, _name_validator))

    if repository is not None:
        conflicts = repository.find_conflicts(student, exclude_id=original_id)
        if check_duplicate_id and conflicts.id:
            result.add_error(MSG_DUPLICATE_ID)
        if original_id is None:
            # Adding: a record holding the same id is reported as an id clash only
            conflicts = repository.find_conflicts(student, exclude_id=student.id)
        if conflicts.full_name:
            result.add_error(MSG_DUPLICATE_NAME)
        if conflicts.email:
            result.add_error(MSG_DUPLICATE_EMAIL)

    return result

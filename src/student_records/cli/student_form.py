"""
Student form for the console front-end.

Reads the seven fields one prompt at a time and performs the form-level
checks that happen before repository validation: age must be given and the
birthday must parse in one of the accepted layouts.
"""
from datetime import date, datetime
from typing import List, Optional, Tuple

from student_records.cli.tools import InputFunc, prompt_with_default
from student_records.domain.entities.student import Student


MSG_AGE_REQUIRED = "Age is required"
MSG_EMAIL_SHAPE = "Email must contain '@' and '.'"
MSG_BIRTHDAY_FORMAT = "Birthday must be a valid date (e.g., YYYY-MM-DD or MM/DD/YYYY)"

# Tried in order; the first that parses wins (so 01/02/2000 is January 2nd)
DATE_FORMATS = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%m-%d-%Y",
)

FIELDS = (
    ("id", "ID number"),
    ("full_name", "Full name"),
    ("age", "Age"),
    ("address", "Address"),
    ("course_year", "Course/Year"),
    ("birthday", "Birthday"),
    ("email", "Email"),
)


def parse_flexible_date(text: Optional[str]) -> Optional[date]:
    value = (text or "").strip()
    if not value:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


def _initial_values(initial: Optional[Student]) -> dict:
    if initial is None:
        return {name: "" for name, _ in FIELDS}
    return {
        "id": str(initial.id),
        "full_name": initial.full_name,
        "age": str(initial.age),
        "address": initial.address,
        "course_year": initial.course_year,
        "birthday": initial.birthday.isoformat() if initial.birthday else "",
        "email": initial.email,
    }


def build_student(values: dict) -> Tuple[Student, List[str]]:
    """
    Turn raw field text into a Student plus form-level errors.

    Unparseable numbers become 0 so repository validation reports them.
    """
    errors: List[str] = []

    age_text = values.get("age", "").strip()
    if not age_text:
        errors.append(MSG_AGE_REQUIRED)

    email = values.get("email", "").strip()
    if email and not ("@" in email and "." in email):
        errors.append(MSG_EMAIL_SHAPE)

    birthday_text = values.get("birthday", "").strip()
    birthday = parse_flexible_date(birthday_text)
    if birthday_text and birthday is None:
        errors.append(MSG_BIRTHDAY_FORMAT)

    student = Student(
        id=_to_int(values.get("id", "")),
        full_name=values.get("full_name", "").strip(),
        age=_to_int(age_text),
        address=values.get("address", "").strip(),
        course_year=values.get("course_year", "").strip(),
        birthday=birthday,
        email=email,
    )
    return student, errors


def read_student_form(
    input_func: InputFunc = input,
    initial: Optional[Student] = None,
) -> Optional[Tuple[Student, List[str]]]:
    """
    Prompt for every field (blank keeps the current value when editing, "-" clears it).

    Returns:
        (student, form errors), or None if the user cancelled
    """
    current = _initial_values(initial)
    values = {}
    for name, label in FIELDS:
        answer = prompt_with_default(label, current[name], input_func)
        if answer is None:
            return None
        values[name] = answer
    return build_student(values)

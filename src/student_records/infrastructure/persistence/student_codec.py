"""
Student line codec.

The data file is long-lived and may have been written by older releases, so
decoding accepts three layouts while encoding only ever produces the current
one. Saving a file therefore migrates it.

Formats:
    canonical      id|full_name|age|address|course_year|birthday|email
                   free text escaped: \\ -> \\\\, | -> \\p, CR -> \\r, LF -> \\n
    legacy block   the same seven fields on seven consecutive lines, unescaped
    legacy csv     comma separated with RFC 4180 quoting; seven fields, or six
                   when written before full_name existed

Field parsing is lenient: a bad age becomes 0 and a bad birthday becomes None.
Only the id is mandatory; a line without a positive id decodes to None and
the caller skips it.
"""
import csv
import re
from datetime import date
from enum import Enum
from typing import List, Optional

from student_records.domain.entities.student import Student


DELIMITER = "|"
FIELD_COUNT = 7
LEGACY_CSV_FIELD_COUNT = 6

_INT_RE = re.compile(r"[+-]?[0-9]+")
_ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

_UNESCAPE = {
    "\\": "\\",
    "p": DELIMITER,
    "r": "\r",
    "n": "\n",
}


class DecodeError(ValueError):
    """Raised when a field cannot be turned into a Student (never leaves this module)."""


class StudentFormat(Enum):
    CANONICAL = "canonical"
    LEGACY_BLOCK = "legacy_block"
    LEGACY_CSV = "legacy_csv"
    UNKNOWN = "unknown"


# =============================================================================
# Escaping
# =============================================================================

def escape_field(value: Optional[str]) -> str:
    """Escape one free-text field. Backslash goes first so later escapes are not doubled."""
    if value is None:
        return ""
    return (
        value
        .replace("\\", "\\\\")
        .replace(DELIMITER, "\\p")
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def unescape_field(value: Optional[str]) -> str:
    """
    Reverse escape_field().

    Unknown sequences keep the escaped character (\\q -> q) and a trailing
    lone backslash is kept as-is.
    """
    if not value:
        return ""
    out: List[str] = []
    escaping = False
    for ch in value:
        if escaping:
            out.append(_UNESCAPE.get(ch, ch))
            escaping = False
        elif ch == "\\":
            escaping = True
        else:
            out.append(ch)
    if escaping:
        out.append("\\")
    return "".join(out)


# =============================================================================
# Field parsers
# =============================================================================

def _parse_int(value: Optional[str]) -> int:
    text = (value or "").strip()
    if not _INT_RE.fullmatch(text):
        raise DecodeError(f"not an integer: {value!r}")
    return int(text)


def _parse_id(value: Optional[str]) -> int:
    student_id = _parse_int(value)
    if student_id <= 0:
        raise DecodeError(f"id must be positive: {value!r}")
    return student_id


def _parse_age(value: Optional[str]) -> int:
    try:
        return _parse_int(value)
    except DecodeError:
        return 0


def _parse_birthday(value: Optional[str]) -> Optional[date]:
    text = (value or "").strip()
    if not _ISO_DATE_RE.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def _build(student_id, full_name, age, address, course_year, birthday, email) -> Student:
    return Student(
        id=_parse_id(student_id),
        full_name=full_name,
        age=_parse_age(age),
        address=address,
        course_year=course_year,
        birthday=_parse_birthday(birthday),
        email=email,
    )


# =============================================================================
# Public API
# =============================================================================

def encode_student(student: Student) -> str:
    """Render a Student as one canonical line (no line terminator)."""
    birthday = student.birthday.isoformat() if student.birthday else ""
    return DELIMITER.join([
        str(int(student.id)),
        escape_field(student.full_name),
        str(int(student.age)),
        escape_field(student.address),
        escape_field(student.course_year),
        birthday,
        escape_field(student.email),
    ])


def detect_format(text: Optional[str]) -> StudentFormat:
    if not text:
        return StudentFormat.UNKNOWN
    if DELIMITER in text:
        return StudentFormat.CANONICAL
    if text.count("\n") >= FIELD_COUNT - 1:
        return StudentFormat.LEGACY_BLOCK
    if "," in text:
        return StudentFormat.LEGACY_CSV
    return StudentFormat.UNKNOWN


def split_csv_line(text: str) -> List[str]:
    """Split one RFC 4180 line (quoted fields, "" as an escaped quote)."""
    rows = list(csv.reader([text], strict=True))
    return rows[0] if rows else []


def _decode_canonical(text: str) -> Optional[Student]:
    parts = text.split(DELIMITER)
    if len(parts) < FIELD_COUNT:
        return None
    return _build(
        parts[0],
        unescape_field(parts[1]),
        parts[2],
        unescape_field(parts[3]),
        unescape_field(parts[4]),
        parts[5],
        unescape_field(parts[6]),
    )


def _decode_legacy_block(text: str) -> Optional[Student]:
    parts = text.split("\n", FIELD_COUNT - 1)
    if len(parts) < FIELD_COUNT:
        return None
    return _build(*parts)


def _decode_legacy_csv(text: str) -> Optional[Student]:
    parts = split_csv_line(text)
    if len(parts) == FIELD_COUNT:
        return _build(*parts)
    if len(parts) == LEGACY_CSV_FIELD_COUNT:
        student_id, age, address, course_year, birthday, email = parts
        return _build(student_id, "", age, address, course_year, birthday, email)
    return None


_DECODERS = {
    StudentFormat.CANONICAL: _decode_canonical,
    StudentFormat.LEGACY_BLOCK: _decode_legacy_block,
    StudentFormat.LEGACY_CSV: _decode_legacy_csv,
}


def decode_student(text: Optional[str]) -> Optional[Student]:
    """
    Parse any supported layout into a Student.

    Returns:
        The Student, or None when the text is not a usable record.
    """
    decoder = _DECODERS.get(detect_format(text))
    if decoder is None:
        return None
    try:
        return decoder(text)
    except Exception:
        # DecodeError or anything else: a bad line must not abort a file load
        return None

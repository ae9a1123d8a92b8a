"""
Tests for the student line codec.

Covers the canonical pipe format, its escaping, and the two legacy layouts
that are still accepted on read.
"""
from datetime import date

import pytest

from student_records.domain.entities.student import Student
from student_records.infrastructure.persistence.student_codec import (
    StudentFormat,
    decode_student,
    detect_format,
    encode_student,
    escape_field,
    split_csv_line,
    unescape_field,
)


# =============================================================================
# Encoding
# =============================================================================

class TestEncode:
    """Tests for encode_student()."""

    def test_encodes_canonical_line(self, jane, jane_line):
        assert encode_student(jane) == jane_line

    def test_missing_birthday_is_empty_field(self):
        line = encode_student(Student(id=3, full_name="Al", age=9))
        assert line == "3|Al|9||||"
        assert line.split("|")[5] == ""

    def test_free_text_is_escaped(self):
        student = Student(id=1, full_name="A|B", address="C:\\tmp", course_year="x\ny", email="a\r@b.c")
        parts = encode_student(student).split("|")
        assert len(parts) == 7
        assert parts[1] == "A\\pB"
        assert parts[3] == "C:\\\\tmp"
        assert parts[4] == "x\\ny"
        assert parts[6] == "a\\r@b.c"


# =============================================================================
# Escaping
# =============================================================================

class TestEscaping:
    """Tests for escape_field() / unescape_field()."""

    def test_backslash_escaped_before_delimiter(self):
        assert escape_field("\\|") == "\\\\\\p"

    def test_special_characters_round_trip(self):
        value = "pipe | back \\ cr \r lf \n end"
        assert unescape_field(escape_field(value)) == value

    def test_unknown_escape_keeps_character(self):
        assert unescape_field("\\q") == "q"

    def test_trailing_backslash_kept(self):
        assert unescape_field("abc\\") == "abc\\"

    def test_none_and_empty(self):
        assert escape_field(None) == ""
        assert unescape_field(None) == ""
        assert unescape_field("") == ""


# =============================================================================
# Format detection
# =============================================================================

class TestDetectFormat:
    """Tests for detect_format()."""

    def test_pipe_is_canonical(self, jane_line):
        assert detect_format(jane_line) == StudentFormat.CANONICAL

    def test_seven_lines_is_legacy_block(self):
        assert detect_format("1\nA\n2\nB\nC\n\nD") == StudentFormat.LEGACY_BLOCK

    def test_comma_line_is_legacy_csv(self):
        assert detect_format("1,A,2,B,C,,D") == StudentFormat.LEGACY_CSV

    def test_other_text_is_unknown(self):
        assert detect_format("") == StudentFormat.UNKNOWN
        assert detect_format(None) == StudentFormat.UNKNOWN
        assert detect_format("hello") == StudentFormat.UNKNOWN


# =============================================================================
# Decoding
# =============================================================================

class TestDecodeCanonical:
    """Tests for decode_student() on the pipe format."""

    def test_decodes_jane(self, jane_line):
        student = decode_student(jane_line)
        assert student is not None
        assert student.id == 7
        assert student.full_name == "Jane Doe"
        assert student.age == 20
        assert student.address == "1 Main St"
        assert student.course_year == "BS-CS"
        assert student.birthday == date(2003, 5, 1)
        assert student.email == "jane@x.com"

    def test_round_trip_preserves_all_fields(self, jane):
        assert decode_student(encode_student(jane)).same_fields(jane)

    def test_round_trip_with_delimiter_backslash_and_newlines(self):
        student = Student(
            id=12,
            full_name="O|Brien",
            age=30,
            address="Line 1\r\nLine 2 \\ C:\\dir",
            course_year="BS|IT 3",
            birthday=None,
            email="o\\b@x.com",
        )
        decoded = decode_student(encode_student(student))
        assert decoded.same_fields(student)

    def test_bad_age_defaults_to_zero(self):
        assert decode_student("5|Al|abc|||2000-01-01|").age == 0

    def test_bad_birthday_becomes_none(self):
        student = decode_student("5|Al|9|||2000-13-45|")
        assert student is not None
        assert student.birthday is None

    @pytest.mark.parametrize("line", [
        "0|Al|9|||2000-01-01|",
        "-3|Al|9|||2000-01-01|",
        "x|Al|9|||2000-01-01|",
        "|Al|9|||2000-01-01|",
    ])
    def test_invalid_id_returns_none(self, line):
        assert decode_student(line) is None

    def test_too_few_fields_returns_none(self):
        assert decode_student("5|Al|9") is None

    def test_blank_and_none_return_none(self):
        assert decode_student("") is None
        assert decode_student(None) is None


class TestDecodeLegacy:
    """Tests for decode_student() on the legacy layouts."""

    def test_seven_line_block(self):
        student = decode_student("7\nJane Doe\n20\n1 Main St\nBS-CS\n2003-05-01\njane@x.com")
        assert student.id == 7
        assert student.full_name == "Jane Doe"
        assert student.birthday == date(2003, 5, 1)

    def test_block_fields_are_not_unescaped(self):
        student = decode_student("7\nJane\n20\nC:\\n\nBS\n\njane@x.com")
        assert student.address == "C:\\n"

    def test_seven_field_csv_with_quotes(self):
        student = decode_student('7,"Doe, Jane",20,"1 ""Main"" St",BS-CS,2003-05-01,jane@x.com')
        assert student.full_name == "Doe, Jane"
        assert student.address == '1 "Main" St'
        assert student.email == "jane@x.com"

    def test_six_field_csv_has_empty_name(self):
        student = decode_student("7,20,1 Main St,BS-CS,2003-05-01,jane@x.com")
        assert student.id == 7
        assert student.full_name == ""
        assert student.age == 20
        assert student.email == "jane@x.com"

    def test_block_and_six_field_csv_agree(self):
        block = decode_student("7\n\n20\n1 Main St\nBS-CS\n2003-05-01\njane@x.com")
        csv_record = decode_student("7,20,1 Main St,BS-CS,2003-05-01,jane@x.com")
        assert block.same_fields(csv_record)

    def test_csv_with_wrong_field_count_returns_none(self):
        assert decode_student("7,20,1 Main St") is None

    def test_split_csv_line_handles_doubled_quotes(self):
        assert split_csv_line('a,"b,c","d""e"') == ["a", "b,c", 'd"e']

"""
Tests for the Student entity.
"""
from student_records.domain.entities.student import Student, normalize_key


class TestStudent:

    def test_equality_uses_id_only(self, jane):
        assert jane == Student(id=7)
        assert jane != Student(id=8)
        assert len({jane, Student(id=7, full_name="Other")}) == 1

    def test_same_fields_compares_everything(self, jane):
        assert jane.same_fields(jane.copy_with())
        assert not jane.same_fields(jane.copy_with(age=21))

    def test_copy_with_leaves_original(self, jane):
        moved = jane.copy_with(id=8)
        assert moved.id == 8
        assert jane.id == 7

    def test_keys_are_normalized(self):
        student = Student(id=1, full_name="  Jane DOE ", email=" Jane@X.com")
        assert student.name_key == "jane doe"
        assert student.email_key == "jane@x.com"
        assert normalize_key(None) == ""

    def test_str_shows_placeholders(self):
        assert str(Student(id=3, age=9)) == "3: - | age 9 | - | - | - | -"

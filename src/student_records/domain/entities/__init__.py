from student_records.domain.entities.student import Student, normalize_key

__all__ = [
    'Student',
    'normalize_key',
]

"""
Student file persistence.
"""
from student_records.infrastructure.persistence.base_repository import (
    BaseFileRepository,
    RepositoryError,
    RepositoryIOError,
    EntityNotFoundError,
    DuplicateEntityError,
)
from student_records.infrastructure.persistence.student_codec import (
    StudentFormat,
    decode_student,
    detect_format,
    encode_student,
)
from student_records.infrastructure.persistence.student_repository import (
    Conflicts,
    LoadReport,
    StudentRepository,
)

__all__ = [
    'BaseFileRepository',
    'RepositoryError',
    'RepositoryIOError',
    'EntityNotFoundError',
    'DuplicateEntityError',
    'StudentFormat',
    'decode_student',
    'detect_format',
    'encode_student',
    'Conflicts',
    'LoadReport',
    'StudentRepository',
]

"""
Validation module.

Key Components:
- ValidationResult: Result container with errors/warnings
- Validator: Base class for validators
- Common validators: Range, Pattern, Choices, Custom
- validate(): Convenience function for validation chains
- validate_student(): Student business rules
"""
from .validation_framework import (
    ValidationResult,
    Validator,
    ValidationError,
    RangeValidator,
    PatternValidator,
    ChoicesValidator,
    CustomValidator,
    All,
    validate,
)
from .student_validator import (
    EMAIL_PATTERN,
    MIN_AGE,
    MAX_AGE,
    validate_student,
)

__all__ = [
    'ValidationResult',
    'Validator',
    'ValidationError',
    'RangeValidator',
    'PatternValidator',
    'ChoicesValidator',
    'CustomValidator',
    'All',
    'validate',
    'EMAIL_PATTERN',
    'MIN_AGE',
    'MAX_AGE',
    'validate_student',
]

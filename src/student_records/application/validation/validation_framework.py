"""
Validation Framework

Provides a composable validation pattern for student forms and settings.

Usage:
    # Simple validation
    result = validate(age, [
        RangeValidator(0, 150, "Age must be between 0 and 150"),
    ])
    if not result.valid:
        show_errors(result.errors)

    # Custom validators
    result = validate(name, CustomValidator(lambda v: not any(c.isdigit() for c in v), "no digits"))

Validators never raise for bad values; they collect messages so several rule
violations can be reported together. ValidationResult.raise_if_invalid() turns
a result into a ValidationError when a caller needs to fail hard.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, List, Callable, Union
import re


# =============================================================================
# Exceptions
# =============================================================================

class ValidationError(Exception):
    """
    Exception for validation failures.

    Can be raised when validation must fail immediately.
    """

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.message = message
        self.field_name = field_name
        full_message = f"{field_name}: {message}" if field_name else message
        super().__init__(full_message)


# =============================================================================
# Validation Result
# =============================================================================

@dataclass
class ValidationResult:
    """
    Result of validation operations.

    Attributes:
        valid: True if all validations passed
        errors: List of error messages (validation failures)
        warnings: List of warning messages (non-blocking issues)
        field_name: Optional field name for context
    """
    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    field_name: Optional[str] = None

    def add_error(self, message: str) -> None:
        """Add an error and mark as invalid. Repeated messages are kept once."""
        if self.field_name and not message.startswith(self.field_name):
            message = f"{self.field_name}: {message}"
        if message not in self.errors:
            self.errors.append(message)
        self.valid = False

    def add_warning(self, message: str) -> None:
        """Add a warning (doesn't affect validity)."""
        if self.field_name and not message.startswith(self.field_name):
            message = f"{self.field_name}: {message}"
        if message not in self.warnings:
            self.warnings.append(message)

    def merge(self, other: 'ValidationResult') -> None:
        """Merge another ValidationResult into this one."""
        if not other.valid:
            self.valid = False
        for message in other.errors:
            if message not in self.errors:
                self.errors.append(message)
        for message in other.warnings:
            if message not in self.warnings:
                self.warnings.append(message)

    @property
    def message(self) -> str:
        """Errors joined for display."""
        return "; ".join(self.errors)

    def __bool__(self) -> bool:
        """Allow using ValidationResult in boolean context."""
        return self.valid

    def raise_if_invalid(self) -> None:
        """Raise ValidationError if result is invalid."""
        if not self.valid:
            raise ValidationError(self.message, self.field_name)

    @classmethod
    def success(cls) -> 'ValidationResult':
        return cls(valid=True)

    @classmethod
    def failure(cls, message: str, field_name: Optional[str] = None) -> 'ValidationResult':
        result = cls(valid=False, field_name=field_name)
        result.errors.append(f"{field_name}: {message}" if field_name else message)
        return result


# =============================================================================
# Base Validator
# =============================================================================

class Validator(ABC):
    """
    Abstract base class for validators.

    Subclass and implement validate() to create custom validators.
    """

    @abstractmethod
    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        """
        Validate a value.

        Args:
            value: The value to validate
            field_name: Optional field name for error messages

        Returns:
            ValidationResult with any errors/warnings
        """
        pass

    def __call__(self, value: Any, field_name: str = "") -> ValidationResult:
        return self.validate(value, field_name)


# =============================================================================
# Common Validators
# =============================================================================

class RangeValidator(Validator):
    """
    Validates that a numeric value is within an inclusive range.

    Usage:
        validator = RangeValidator(min_value=0, max_value=150)
        result = validator.validate(20, "age")
    """

    def __init__(
        self,
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None,
        message: Optional[str] = None,
    ):
        self.min_value = min_value
        self.max_value = max_value
        self.message = message

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        try:
            num_value = float(value)
        except (TypeError, ValueError):
            result.add_error(f"must be a number, got {type(value).__name__}")
            return result

        if self.min_value is not None and num_value < self.min_value:
            result.add_error(self.message or f"must be at least {self.min_value}")

        if self.max_value is not None and num_value > self.max_value:
            result.add_error(self.message or f"must be at most {self.max_value}")

        return result


class PatternValidator(Validator):
    """
    Validates that a string matches a regex pattern.

    Usage:
        validator = PatternValidator(r'^[a-z]+$', "must be lowercase letters")
        result = validator.validate("hello", "name")
    """

    def __init__(self, pattern: str, message: Optional[str] = None):
        self.pattern = pattern
        self.compiled = re.compile(pattern)
        self.message = message or f"does not match pattern: {pattern}"

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        if not isinstance(value, str):
            result.add_error(f"must be a string, got {type(value).__name__}")
            return result

        if not self.compiled.fullmatch(value):
            result.add_error(self.message)

        return result


class ChoicesValidator(Validator):
    """
    Validates that a value is one of the allowed choices.

    Usage:
        validator = ChoicesValidator(["DEBUG", "INFO"])
        result = validator.validate("INFO", "log_level")
    """

    def __init__(self, choices: List[Any], message: Optional[str] = None):
        self.choices = list(choices)
        self.message = message

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        if value not in self.choices:
            choices_str = ", ".join(repr(c) for c in self.choices)
            result.add_error(self.message or f"must be one of: {choices_str}")

        return result


class CustomValidator(Validator):
    """
    Validator with a custom predicate.

    Usage:
        validator = CustomValidator(lambda d: d <= date.today(), "cannot be in the future")
    """

    def __init__(
        self,
        func: Callable[[Any], bool],
        message: str = "validation failed",
    ):
        self.func = func
        self.message = message

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        if value is None:
            return result

        try:
            if not self.func(value):
                result.add_error(self.message)
        except Exception as e:
            result.add_error(f"validation error: {e}")

        return result


# =============================================================================
# Composable Validators
# =============================================================================

class All(Validator):
    """
    Composes multiple validators with AND logic.

    All validators must pass for the result to be valid.
    """

    def __init__(self, *validators: Validator, stop_on_first_error: bool = False):
        self.validators = validators
        self.stop_on_first_error = stop_on_first_error

    def validate(self, value: Any, field_name: str = "") -> ValidationResult:
        result = ValidationResult(field_name=field_name)

        for validator in self.validators:
            sub_result = validator.validate(value, field_name)
            result.merge(sub_result)

            if self.stop_on_first_error and not sub_result.valid:
                break

        return result


# =============================================================================
# Convenience Functions
# =============================================================================

def validate(
    value: Any,
    validators: Union[Validator, List[Validator]],
    field_name: str = "",
) -> ValidationResult:
    """
    Validate a value against one or more validators.

    Args:
        value: The value to validate
        validators: Single validator or list of validators
        field_name: Optional field name for error messages

    Returns:
        ValidationResult with any errors/warnings
    """
    if isinstance(validators, Validator):
        return validators.validate(value, field_name)

    return All(*validators).validate(value, field_name)

"""
Base Settings

Provides a standardized foundation for settings schemas.

Features:
- Dataclass-based schema with type safety
- Backwards-compatible loading (handles missing and unknown fields)
- Field validation with ValidationResult

Usage:
    1. Create a dataclass for your settings schema inheriting BaseSettings
    2. Declare fields with validated_field() to attach rules
    3. Call validate() after loading
"""
from dataclasses import dataclass, asdict, fields, field
from typing import Optional, Dict, Any, List, Callable, Union
import re

from student_records.application.validation.validation_framework import ValidationResult
from student_records.utils.message import Log


_MISSING = object()


def coerce_to_default_type(value: Any, default: Any) -> Any:
    """
    Convert a loaded value to the type of the field's default.

    Returns _MISSING when the value cannot stand in for that type (None for
    a str field, "fast" for an int field). Numeric strings are accepted for
    number fields.
    """
    if default is None:
        return value
    if isinstance(default, bool):
        return value if isinstance(value, bool) else _MISSING
    if isinstance(default, (int, float)):
        if isinstance(value, bool):
            return _MISSING
        if isinstance(value, str):
            try:
                value = float(value.strip())
            except ValueError:
                return _MISSING
        if not isinstance(value, (int, float)):
            return _MISSING
        if isinstance(default, int):
            if isinstance(value, float) and not value.is_integer():
                return _MISSING
            return int(value)
        return float(value)
    if isinstance(default, str):
        return value if isinstance(value, str) else _MISSING
    return value if isinstance(value, type(default)) else _MISSING


@dataclass
class FieldValidator:
    """
    Validation rules for a settings field.

    Example:
        @dataclass
        class MySettings(BaseSettings):
            interval_ms: int = field(default=1000, metadata={
                'validator': FieldValidator(min_value=50, max_value=60000)
            })
    """
    # Range validation (for numbers)
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None

    # Choice validation (for enums/strings)
    choices: Optional[List[Any]] = None

    # Pattern validation (for strings)
    pattern: Optional[str] = None
    pattern_message: Optional[str] = None

    # Required validation
    required: bool = False

    # Signature: (value, field_name) -> Optional[str] (returns error message or None)
    custom: Optional[Callable[[Any, str], Optional[str]]] = None

    def validate(self, value: Any, field_name: str) -> ValidationResult:
        """
        Validate a value against this validator's rules.

        Args:
            value: The value to validate
            field_name: Name of the field (for error messages)

        Returns:
            ValidationResult with any errors/warnings
        """
        result = ValidationResult()

        if value is None:
            if self.required:
                result.add_error(f"{field_name}: Required field cannot be empty")
            return result

        if self.required and isinstance(value, str) and not value.strip():
            result.add_error(f"{field_name}: Required field cannot be empty")
            return result

        # bool is an int subclass but never a meaningful number here
        is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
        if self.min_value is not None and is_number and value < self.min_value:
            result.add_error(f"{field_name}: Value {value} is below minimum {self.min_value}")

        if self.max_value is not None and is_number and value > self.max_value:
            result.add_error(f"{field_name}: Value {value} is above maximum {self.max_value}")

        if self.choices is not None and value not in self.choices:
            result.add_error(f"{field_name}: Value '{value}' not in allowed choices: {self.choices}")

        if self.pattern is not None and isinstance(value, str):
            if not re.match(self.pattern, value):
                msg = self.pattern_message or "Value does not match required pattern"
                result.add_error(f"{field_name}: {msg}")

        if self.custom is not None:
            error = self.custom(value, field_name)
            if error:
                result.add_error(error)

        return result


def validated_field(
    default: Any = None,
    *,
    min_value: Optional[Union[int, float]] = None,
    max_value: Optional[Union[int, float]] = None,
    choices: Optional[List[Any]] = None,
    pattern: Optional[str] = None,
    pattern_message: Optional[str] = None,
    required: bool = False,
    custom: Optional[Callable[[Any, str], Optional[str]]] = None,
    **kwargs
):
    """
    Create a dataclass field with validation metadata.

    Example:
        @dataclass
        class MySettings(BaseSettings):
            interval_ms: int = validated_field(1000, min_value=50)
            log_level: str = validated_field('INFO', choices=['DEBUG', 'INFO'])
    """
    validator = FieldValidator(
        min_value=min_value,
        max_value=max_value,
        choices=choices,
        pattern=pattern,
        pattern_message=pattern_message,
        required=required,
        custom=custom,
    )

    metadata = kwargs.pop('metadata', {})
    metadata['validator'] = validator

    return field(default=default, metadata=metadata, **kwargs)


@dataclass
class BaseSettings:
    """
    Base class for all settings dataclasses.

    Subclasses should define fields with default values for backwards compatibility.
    """

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary for storage."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BaseSettings':
        """
        Create settings from dictionary.

        Missing keys fall back to defaults and unknown keys are ignored, so
        settings files written by other versions still load. Values of the
        wrong type are converted when possible and otherwise replaced by the
        default, with a warning.
        """
        merged = asdict(cls())
        for name, default in list(merged.items()):
            if name not in data:
                continue
            value = coerce_to_default_type(data[name], default)
            if value is _MISSING:
                Log.warning(
                    f"{cls.__name__}: Ignoring {name}={data[name]!r}, expected {type(default).__name__}"
                )
                continue
            merged[name] = value
        return cls(**merged)

    def validate(self) -> ValidationResult:
        """
        Validate all settings fields against their validators.

        Fields without validators are skipped (assumed valid).
        """
        result = ValidationResult()

        for f in fields(self):
            validator = f.metadata.get('validator') if f.metadata else None
            if isinstance(validator, FieldValidator):
                result.merge(validator.validate(getattr(self, f.name), f.name))

        return result

    def validate_field(self, field_name: str) -> ValidationResult:
        """
        Validate a single field by name.

        Raises:
            AttributeError: If field doesn't exist
        """
        for f in fields(self):
            if f.name == field_name:
                validator = f.metadata.get('validator') if f.metadata else None
                if isinstance(validator, FieldValidator):
                    return validator.validate(getattr(self, field_name), field_name)
                return ValidationResult()

        raise AttributeError(f"Field '{field_name}' not found in {self.__class__.__name__}")

    def is_valid(self) -> bool:
        return self.validate().valid

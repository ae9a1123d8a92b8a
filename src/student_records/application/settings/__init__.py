"""
Application Settings Module

Classes:
    BaseSettings: Base dataclass for settings schemas
    FieldValidator: Per-field validation rules
    StoreSettings: Data file location and sync timings

Functions:
    load_store_settings / save_store_settings: JSON persistence
    resolve_data_file: Effective data file path
"""

from .base_settings import BaseSettings, FieldValidator, validated_field
from .store_settings import (
    DATA_FILE_ENV,
    StoreSettings,
    load_store_settings,
    save_store_settings,
    resolve_data_file,
)

__all__ = [
    'BaseSettings',
    'FieldValidator',
    'validated_field',
    'DATA_FILE_ENV',
    'StoreSettings',
    'load_store_settings',
    'save_store_settings',
    'resolve_data_file',
]

"""
Store Settings

Configuration for the student store and its sync controller.

Settings are read from settings.json in the user config directory. The data
file can also be pointed elsewhere with the STUDENT_RECORDS_DATA_FILE
environment variable, which wins over the file.

Usage:
    settings = load_store_settings()
    repo = StudentRepository(resolve_data_file(settings))
    controller = SyncController(repo, settings=settings)
"""
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from student_records.utils.message import Log
from student_records.utils.paths import get_default_data_file, get_settings_path
from .base_settings import BaseSettings, validated_field


DATA_FILE_ENV = "STUDENT_RECORDS_DATA_FILE"


@dataclass
class StoreSettings(BaseSettings):
    """
    Store and sync settings schema.

    All fields have defaults so older settings files keep loading.
    """

    # Backing file; empty means students.txt in the working directory
    data_file: str = ""

    # Quiet period after the last edit before the file is written
    auto_save_debounce_ms: int = validated_field(1000, min_value=50, max_value=60_000)

    # How often the file's modification time is checked for outside edits
    auto_reload_interval_ms: int = validated_field(1500, min_value=100, max_value=600_000)

    # Modification times this close after our own save are treated as our own write
    self_save_guard_ms: int = validated_field(400, min_value=0, max_value=60_000)

    log_level: str = validated_field("INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])


def load_store_settings(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StoreSettings:
    """
    Load settings, falling back to defaults for anything missing or unreadable.

    Args:
        path: Settings JSON file (defaults to the user config settings.json)
        environ: Environment to read overrides from (defaults to os.environ)
    """
    path = Path(path) if path else get_settings_path()
    environ = os.environ if environ is None else environ

    settings = StoreSettings()
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                settings = StoreSettings.from_dict(data)
            else:
                Log.warning(f"StoreSettings: Ignoring {path}, expected a JSON object")
        except (OSError, ValueError, TypeError) as e:
            Log.warning(f"StoreSettings: Failed to load {path}, using defaults: {e}")

    override = environ.get(DATA_FILE_ENV, "").strip()
    if override:
        settings.data_file = override

    result = settings.validate()
    for error in result.errors:
        Log.warning(f"StoreSettings: {error}")

    return settings


def save_store_settings(settings: StoreSettings, path: Optional[Path] = None) -> Path:
    """Write settings as JSON and return the path written."""
    path = Path(path) if path else get_settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings.to_dict(), f, indent=2)
    return path


def resolve_data_file(settings: Optional[StoreSettings] = None, working_dir: Optional[Path] = None) -> Path:
    """The data file to use: the configured path, else the default location."""
    if settings is not None and settings.data_file.strip():
        return Path(settings.data_file.strip()).expanduser()
    return get_default_data_file(working_dir=working_dir)

"""
Path management for Student Records

Handles platform-specific user directories following standard conventions:
- macOS: ~/Library/Application Support/StudentRecords/
- Linux: ~/.local/share/student_records/ (config in ~/.config/student_records/)
- Windows: %APPDATA%/StudentRecords/

The student data file itself defaults to the working directory so it can be
edited by hand next to the application.
"""
import os
import sys
import shutil
from pathlib import Path
from typing import Optional

from student_records.utils.message import Log


APP_NAME = "StudentRecords"
APP_SLUG = "student_records"
DATA_FILE_NAME = "students.txt"


def get_user_data_dir() -> Path:
    """
    Get platform-specific user data directory.

    Returns:
        Path to user data directory where logs and other user files are stored.
    """
    system = sys.platform

    if system == "darwin":
        user_data_dir = Path.home() / "Library" / "Application Support" / APP_NAME
    elif system == "win32":
        user_data_dir = Path(os.getenv("APPDATA", Path.home() / "AppData" / "Roaming")) / APP_NAME
    else:
        user_data_dir = Path.home() / ".local" / "share" / APP_SLUG

    user_data_dir.mkdir(parents=True, exist_ok=True)
    return user_data_dir


def get_user_config_dir() -> Path:
    """
    Get platform-specific user config directory.

    Same as the data directory on macOS/Windows, ~/.config/student_records/ on Linux.
    """
    if sys.platform in ("darwin", "win32"):
        return get_user_data_dir()

    config_dir = Path.home() / ".config" / APP_SLUG
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_logs_dir() -> Path:
    logs_dir = get_user_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def get_settings_path() -> Path:
    """
    Get path to settings file.

    Returns:
        Path to settings.json in user config directory.
    """
    return get_user_config_dir() / "settings.json"


def get_default_data_file(
    working_dir: Optional[Path] = None,
    legacy_dir: Optional[Path] = None,
) -> Path:
    """
    Get the default student data file.

    The file lives in the working directory. Older releases kept it in the
    home directory; if only that copy exists it is copied into place once.

    Args:
        working_dir: Directory to resolve against (defaults to the cwd)
        legacy_dir: Directory of the old location (defaults to the home dir)

    Returns:
        Path to students.txt (not created here).
    """
    target = Path(working_dir or Path.cwd()) / DATA_FILE_NAME
    legacy = Path(legacy_dir or Path.home()) / DATA_FILE_NAME

    if not target.exists() and legacy.exists() and legacy != target:
        try:
            shutil.copyfile(legacy, target)
            Log.info(f"Paths: Copied legacy data file {legacy} -> {target}")
        except OSError as e:
            Log.warning(f"Paths: Could not copy legacy data file {legacy}: {e}")

    return target

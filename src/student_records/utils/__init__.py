"""
Utils module - Logging and paths.

Contents:
- message.py: Log class for application logging
- paths.py: Platform-specific path utilities and the default data file
"""
from student_records.utils.message import Log
from student_records.utils.paths import (
    get_user_data_dir,
    get_user_config_dir,
    get_logs_dir,
    get_settings_path,
    get_default_data_file,
)

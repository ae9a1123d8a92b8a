import logging
import os
import sys
from datetime import datetime
from logging import Logger
from colorama import init, Fore, Style
init(autoreset=True)


def create_log_directory(log_folder: str = None):
    """
    Ensures that the log directory exists. If not, it creates it.

    Args:
        log_folder: Optional path to log folder. If None, uses platform-specific location.
    """
    if log_folder is None:
        from student_records.utils.paths import get_logs_dir
        log_folder = str(get_logs_dir())

    if not os.path.exists(log_folder):
        os.makedirs(log_folder)
    return log_folder

def get_log_file_path(log_folder: str = None) -> str:
    """
    Returns a log file path with a timestamp in the name.
    Format: logs/student_records_YYYY-mm-dd_HHMMSS.log
    """
    if log_folder is None:
        from student_records.utils.paths import get_logs_dir
        log_folder = str(get_logs_dir())

    timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    return os.path.join(log_folder, f"student_records_{timestamp}.log")

def purge_old_logs(log_folder: str, keep: int = 10):
    """
    Removes older log files, keeping only the most recent 'keep' files.
    Log names carry a sortable timestamp, so lexicographical order is chronological.
    """
    all_logs = [f for f in os.listdir(log_folder)
                if f.startswith("student_records_") and f.endswith(".log")]
    all_logs.sort()

    logs_to_remove = all_logs[:-keep] if keep > 0 else all_logs
    for old_file in logs_to_remove:
        os.remove(os.path.join(log_folder, old_file))


class ColorFormatter(logging.Formatter):
    """
    A formatter that colorizes log level names using colorama.
    """
    color_map = {
        logging.DEBUG: Fore.BLUE,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.LIGHTRED_EX,
    }

    def format(self, record):
        color = self.color_map.get(record.levelno, Fore.WHITE)
        # Copy so file handlers still see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def _file_handler(log_folder: str, level: int) -> logging.Handler:
    log_folder = create_log_directory(log_folder)
    purge_old_logs(log_folder, keep=10)
    file_handler = logging.FileHandler(get_log_file_path(log_folder), encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    return file_handler


def init_logger(
    name: str = "primary logger",
    log_folder: str = None,
    console_logging: bool = True,
    file_logging: bool = False,
    level: int = logging.INFO
) -> Logger:
    """
    Initializes and configures the logger with the specified settings.
    :param name: The logger's name.
    :param log_folder: The folder where log files should go. If None, uses platform-specific location.
    :param console_logging: Whether to log to the console.
    :param file_logging: Whether to log to a file.
    :param level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    :return: A configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Calling init_logger twice must not stack handlers
    if not logger.handlers:
        if file_logging:
            logger.addHandler(_file_handler(log_folder, level))

        if console_logging:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(ColorFormatter(
                fmt="%(asctime)s | %(levelname)s | %(message)s",
                datefmt="%H:%M:%S"
            ))
            logger.addHandler(console_handler)

    return logger


LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class Log:
    """
    Wrapper class exposing Log.info(...) style calls on top of Python's logging.
    """
    _logger: Logger = init_logger(name="StudentRecordsLogger", console_logging=True, file_logging=False)

    @classmethod
    def set_logger(cls, logger: Logger):
        """Replace the logger at runtime."""
        cls._logger = logger

    @classmethod
    def get_logger(cls) -> Logger:
        return cls._logger

    @classmethod
    def set_level(cls, level: str | int):
        """
        Set the logging level dynamically.

        Args:
            level: Log level as string ("DEBUG", "INFO", "WARNING", "ERROR") or int
        """
        if isinstance(level, str):
            level = LEVELS.get(level.upper(), logging.INFO)

        cls._logger.setLevel(level)
        for handler in cls._logger.handlers:
            handler.setLevel(level)

    @classmethod
    def enable_file_logging(cls, log_folder: str = None):
        """Attach a timestamped log file handler (once)."""
        if any(isinstance(h, logging.FileHandler) for h in cls._logger.handlers):
            return
        cls._logger.addHandler(_file_handler(log_folder, cls._logger.level))

    @classmethod
    def debug(cls, text: str):
        cls._logger.debug(text)

    @classmethod
    def info(cls, text: str):
        cls._logger.info(text)

    @classmethod
    def warning(cls, text: str, exc_info: bool = False):
        if exc_info:
            cls._logger.warning(text, exc_info=True)
        else:
            cls._logger.warning(text)

    @classmethod
    def error(cls, text: str):
        cls._logger.error(text)

    @classmethod
    def command(cls, text: str):
        cls._logger.info(f"[COMMAND] {text}")

    @classmethod
    def list(cls, title, list_items):
        header_length = 60
        cls._logger.info(title.center(header_length, '*'))
        for index, item in enumerate(list_items):
            cls._logger.info(f"[LIST] {index}: {str(item)[:100]}")
        cls._logger.info('*' * header_length)

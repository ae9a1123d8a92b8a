"""
Shared fixtures for the Student Records test suite.
"""
import os
from datetime import date
from pathlib import Path

import pytest
from PyQt6.QtCore import QCoreApplication

from student_records.domain.entities.student import Student


# Ensure a Qt application exists for QObject signals and QTimer
@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def data_file(tmp_path) -> Path:
    return tmp_path / "students.txt"


@pytest.fixture
def jane() -> Student:
    return Student(
        id=7,
        full_name="Jane Doe",
        age=20,
        address="1 Main St",
        course_year="BS-CS",
        birthday=date(2003, 5, 1),
        email="jane@x.com",
    )


@pytest.fixture
def write_lines():
    """Write raw lines (LF terminated) to a file."""
    def _write(path: Path, *lines: str) -> Path:
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def set_mtime_ms():
    """Force a file's modification time (milliseconds since the epoch)."""
    def _set(path: Path, ms: int) -> None:
        os.utime(path, ns=(ms * 1_000_000, ms * 1_000_000))
    return _set


@pytest.fixture
def jane_line() -> str:
    return "7|Jane Doe|20|1 Main St|BS-CS|2003-05-01|jane@x.com"

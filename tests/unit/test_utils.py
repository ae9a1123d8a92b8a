"""
Tests for logging and path helpers.
"""
import logging

from student_records.utils.message import Log, get_log_file_path, purge_old_logs
from student_records.utils.paths import DATA_FILE_NAME, get_default_data_file


class TestDefaultDataFile:

    def test_uses_working_directory(self, tmp_path):
        work, home = tmp_path / "work", tmp_path / "home"
        work.mkdir()
        home.mkdir()
        assert get_default_data_file(working_dir=work, legacy_dir=home) == work / DATA_FILE_NAME
        assert not (work / DATA_FILE_NAME).exists()

    def test_copies_legacy_file_once(self, tmp_path):
        work, home = tmp_path / "work", tmp_path / "home"
        work.mkdir()
        home.mkdir()
        (home / DATA_FILE_NAME).write_text("7|Jane|20||||\n", encoding="utf-8")

        target = get_default_data_file(working_dir=work, legacy_dir=home)

        assert target.read_text(encoding="utf-8") == "7|Jane|20||||\n"

        (home / DATA_FILE_NAME).write_text("changed\n", encoding="utf-8")
        get_default_data_file(working_dir=work, legacy_dir=home)
        assert target.read_text(encoding="utf-8") == "7|Jane|20||||\n"


class TestLog:

    def test_set_level_by_name(self):
        logger = Log.get_logger()
        previous = logger.level
        try:
            Log.set_level("debug")
            assert logger.level == logging.DEBUG
            Log.set_level("nonsense")
            assert logger.level == logging.INFO
        finally:
            Log.set_level(previous)

    def test_log_file_name(self, tmp_path):
        path = get_log_file_path(str(tmp_path))
        assert path.startswith(str(tmp_path))
        assert path.endswith(".log")
        assert "student_records_" in path

    def test_purge_old_logs_keeps_newest(self, tmp_path):
        for day in range(1, 6):
            (tmp_path / f"student_records_2024-01-0{day}_000000.log").write_text("", encoding="utf-8")
        (tmp_path / "unrelated.txt").write_text("", encoding="utf-8")

        purge_old_logs(str(tmp_path), keep=2)

        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "student_records_2024-01-04_000000.log",
            "student_records_2024-01-05_000000.log",
            "unrelated.txt",
        ]

"""
Unit tests for SyncController.

Both QTimers are swapped for FakeQTimer so debounce and poll ticks are
driven explicitly instead of by the event loop. File modification times are
forced with os.utime so the guard window can be tested without sleeping.
"""
import time
from unittest.mock import MagicMock

import pytest

from student_records.application.settings import StoreSettings
from student_records.application.sync import SyncController, describe_event
from student_records.application.events import StudentAdded, StudentRemoved, StudentUpdated
from student_records.domain.entities.student import Student
from student_records.infrastructure.persistence.base_repository import RepositoryIOError
from student_records.infrastructure.persistence.student_repository import StudentRepository


class FakeQTimer:
    """Minimal QTimer stand-in for unit tests."""

    def __init__(self):
        self._single_shot = False
        self._interval = 0
        self._active = False
        self._callback = None
        self.start_count = 0

    def setSingleShot(self, val):
        self._single_shot = val

    def setInterval(self, ms):
        self._interval = ms

    def start(self, ms=None):
        if ms is not None:
            self._interval = ms
        self._active = True
        self.start_count += 1

    def isActive(self):
        return self._active

    def stop(self):
        self._active = False

    def fire(self):
        """Simulate timer expiry."""
        if not self._single_shot:
            self._active = True
        else:
            self._active = False
        if self._callback:
            self._callback()

    @property
    def timeout(self):
        """Return an object with .connect()."""
        parent = self

        class _Sig:
            def connect(self, cb):
                parent._callback = cb

            def disconnect(self):
                parent._callback = None

        return _Sig()


# Far enough ahead that forced mtimes are always newer than real writes
FUTURE_MS = time.time_ns() // 1_000_000 + 10_000_000


@pytest.fixture
def repo(data_file, write_lines, jane_line):
    write_lines(data_file, jane_line)
    repository = StudentRepository(data_file)
    repository.load()
    return repository


@pytest.fixture
def save_spy(repo, monkeypatch):
    spy = MagicMock(wraps=repo.save)
    monkeypatch.setattr(repo, "save", spy)
    return spy


def _make_controller(repository, clock=None, settings=None):
    controller = SyncController(repository, settings=settings, clock=clock, auto_attach=False)

    save_timer = FakeQTimer()
    save_timer.setSingleShot(True)
    save_timer.timeout.connect(controller._on_save_timeout)
    controller._save_timer = save_timer

    poll_timer = FakeQTimer()
    poll_timer.timeout.connect(controller._on_poll_timeout)
    controller._poll_timer = poll_timer

    controller.attach()
    return controller


@pytest.fixture
def controller(qapp, repo):
    ctrl = _make_controller(repo, clock=lambda: FUTURE_MS)
    yield ctrl
    ctrl.shutdown()


def _capture(signal):
    messages = []
    signal.connect(lambda *args: messages.append(args if len(args) > 1 else args[0]))
    return messages


# =============================================================================
# Attach / timers
# =============================================================================

class TestAttach:

    def test_attach_records_mtime_and_starts_polling(self, controller, repo):
        assert controller.last_known_modified_ms == repo.modified_time_ms()
        assert controller.last_self_save_ms == 0
        assert controller.is_polling()
        assert not controller.has_pending_save()

    def test_attach_emits_count_and_path(self, qapp, repo):
        ctrl = SyncController(repo, auto_attach=False)
        attached = _capture(ctrl.attached)
        message = ctrl.attach()
        assert attached == [(1, str(repo.data_file))]
        assert message == f"Loaded 1 students from {repo.data_file}"
        ctrl.shutdown()

    def test_attach_twice_subscribes_once(self, controller, repo):
        controller.attach()
        repo.add(Student(id=8, full_name="Bob", age=20))
        assert controller._save_timer.start_count == 1

    def test_real_timers_use_settings(self, qapp, repo):
        settings = StoreSettings(auto_save_debounce_ms=250, auto_reload_interval_ms=5000)
        ctrl = SyncController(repo, settings=settings)
        assert ctrl._save_timer.isSingleShot()
        assert ctrl._save_timer.interval() == 250
        assert ctrl._poll_timer.interval() == 5000
        assert ctrl._poll_timer.isActive()
        assert ctrl.guard_window_ms == 400
        ctrl.shutdown()
        assert not ctrl._poll_timer.isActive()


# =============================================================================
# Debounced auto-save
# =============================================================================

class TestDebouncedSave:

    def test_burst_of_mutations_saves_once(self, controller, repo, save_spy):
        repo.add(Student(id=8, full_name="Bob", age=20))
        repo.add(Student(id=9, full_name="Cara", age=21))
        repo.delete(8)

        assert controller._save_timer.start_count == 3
        assert controller.has_pending_save()
        save_spy.assert_not_called()

        controller._save_timer.fire()

        save_spy.assert_called_once()
        assert not controller.has_pending_save()

    def test_auto_save_updates_timestamps_and_notifies(self, controller, repo):
        saved = _capture(controller.saved)
        repo.add(Student(id=8, full_name="Bob", age=20))
        controller._save_timer.fire()

        assert saved == ["Auto-saved 2 students"]
        assert controller.last_self_save_ms == FUTURE_MS
        assert controller.last_known_modified_ms == repo.modified_time_ms()
        assert "8|Bob|20" in repo.data_file.read_text(encoding="utf-8")

    def test_reload_does_not_schedule_save(self, controller, repo):
        repo.load()
        assert not controller.has_pending_save()

    def test_rejected_mutation_does_not_schedule_save(self, controller, repo):
        repo.add(Student(id=7, full_name="Dup", age=1))
        assert not controller.has_pending_save()

    def test_changed_signal_describes_mutations(self, controller, repo):
        changed = _capture(controller.changed)
        repo.add(Student(id=8, full_name="Bob", age=20))
        repo.update(8, Student(id=9, full_name="Bob", age=20))
        repo.delete(9)
        assert changed == ["Added student 8", "Updated student 8 -> 9", "Deleted student 9"]

    def test_auto_save_failure_is_reported_not_raised(self, controller, repo, monkeypatch):
        errors = _capture(controller.error_occurred)
        monkeypatch.setattr(repo, "save", MagicMock(side_effect=RepositoryIOError("write", repo.data_file)))

        repo.add(Student(id=8, full_name="Bob", age=20))
        controller._save_timer.fire()

        assert len(errors) == 1
        assert errors[0].startswith("Auto-save failed: Failed to write")
        assert controller.last_self_save_ms == 0

    def test_flush_saves_pending_edit(self, controller, repo, save_spy):
        repo.add(Student(id=8, full_name="Bob", age=20))
        assert controller.flush() is True
        save_spy.assert_called_once()
        assert not controller.has_pending_save()

    def test_flush_without_pending_edit_is_noop(self, controller, save_spy):
        assert controller.flush() is False
        save_spy.assert_not_called()


# =============================================================================
# Polled auto-reload
# =============================================================================

class TestGuardWindow:

    def test_is_external_change(self, controller):
        controller.last_known_modified_ms = 1_000
        controller.last_self_save_ms = 2_000
        assert not controller.is_external_change(1_000)
        assert not controller.is_external_change(2_400)
        assert controller.is_external_change(2_401)

    def test_poll_right_after_own_save_does_not_reload(self, controller, repo, monkeypatch):
        controller.save_now()
        load = MagicMock()
        monkeypatch.setattr(repo, "load", load)
        assert controller.poll_now() is False
        load.assert_not_called()

    def test_modification_inside_guard_is_ignored(self, controller, repo, set_mtime_ms, monkeypatch):
        controller.save_now()
        set_mtime_ms(repo.data_file, FUTURE_MS + 100)
        load = MagicMock()
        monkeypatch.setattr(repo, "load", load)
        assert controller.poll_now() is False
        load.assert_not_called()

    def test_external_change_after_guard_reloads(self, controller, repo, write_lines, set_mtime_ms):
        reloaded = _capture(controller.reloaded)
        controller.save_now()

        write_lines(repo.data_file, "9|Cara|19||||")
        set_mtime_ms(repo.data_file, FUTURE_MS + 1_000)

        assert controller.poll_now() is True
        assert [s.id for s in repo] == [9]
        assert reloaded == ["Auto-reloaded from file"]
        assert controller.last_known_modified_ms == FUTURE_MS + 1_000

        # Same mtime again is not a new change
        assert controller.poll_now() is False

    def test_poll_timer_tick_runs_poll(self, controller, repo, write_lines, set_mtime_ms):
        write_lines(repo.data_file, "9|Cara|19||||")
        set_mtime_ms(repo.data_file, FUTURE_MS + 5_000)
        controller._poll_timer.fire()
        assert [s.id for s in repo] == [9]
        assert controller.is_polling()

    def test_reload_cancels_pending_save(self, controller, repo, write_lines, set_mtime_ms, save_spy):
        repo.add(Student(id=8, full_name="Bob", age=20))
        write_lines(repo.data_file, "9|Cara|19||||")
        set_mtime_ms(repo.data_file, FUTURE_MS + 5_000)

        assert controller.poll_now() is True
        assert not controller.has_pending_save()
        save_spy.assert_not_called()

    def test_missing_file_is_not_a_change(self, controller, repo):
        repo.data_file.unlink()
        assert controller.poll_now() is False

    def test_reload_failure_is_reported(self, controller, repo, set_mtime_ms):
        errors = _capture(controller.error_occurred)
        repo.data_file.unlink()
        repo.data_file.mkdir()
        set_mtime_ms(repo.data_file, FUTURE_MS + 5_000)

        assert controller.poll_now() is False
        assert len(errors) == 1
        assert errors[0].startswith("Auto-reload failed")

    def test_failed_reload_keeps_records_for_final_save(self, controller, repo, set_mtime_ms, jane_line):
        repo.data_file.write_bytes("9|Jos\xe9|19||||\n".encode("latin-1"))
        set_mtime_ms(repo.data_file, FUTURE_MS + 5_000)

        assert controller.poll_now() is False
        assert [s.id for s in repo] == [7]

        controller.shutdown()

        assert repo.data_file.read_text(encoding="utf-8").splitlines() == [jane_line]

    def test_failed_reload_is_reported_once_per_change(self, controller, repo, set_mtime_ms):
        errors = _capture(controller.error_occurred)
        repo.data_file.write_bytes(b"\xff\xfe broken\n")
        set_mtime_ms(repo.data_file, FUTURE_MS + 5_000)

        assert controller.poll_now() is False
        assert controller.poll_now() is False
        assert len(errors) == 1

        set_mtime_ms(repo.data_file, FUTURE_MS + 9_000)
        assert controller.poll_now() is False
        assert len(errors) == 2


# =============================================================================
# Manual save / reload
# =============================================================================

class TestManualActions:

    def test_save_now(self, controller, repo, save_spy):
        saved = _capture(controller.saved)
        repo.add(Student(id=8, full_name="Bob", age=20))

        message = controller.save_now()

        assert message == f"Saved to file: {repo.data_file}"
        assert saved == [message]
        assert not controller.has_pending_save()
        assert controller.last_self_save_ms == FUTURE_MS
        save_spy.assert_called_once()

    def test_save_now_propagates_errors(self, controller, repo, monkeypatch):
        monkeypatch.setattr(repo, "save", MagicMock(side_effect=RepositoryIOError("write", repo.data_file)))
        with pytest.raises(RepositoryIOError):
            controller.save_now()

    def test_reload_now_discards_edits(self, controller, repo):
        reloaded = _capture(controller.reloaded)
        repo.add(Student(id=8, full_name="Bob", age=20))

        assert controller.reload_now() == "Reloaded from file"

        assert [s.id for s in repo] == [7]
        assert reloaded == ["Reloaded from file"]
        assert not controller.has_pending_save()
        assert controller.last_known_modified_ms == repo.modified_time_ms()

    def test_reload_now_propagates_errors(self, controller, repo):
        repo.data_file.unlink()
        repo.data_file.mkdir()
        with pytest.raises(RepositoryIOError):
            controller.reload_now()


# =============================================================================
# Shutdown
# =============================================================================

class TestShutdown:

    def test_shutdown_saves_and_stops(self, qapp, repo, save_spy):
        ctrl = _make_controller(repo)
        repo.add(Student(id=8, full_name="Bob", age=20))

        ctrl.shutdown()

        save_spy.assert_called_once()
        assert not ctrl.has_pending_save()
        assert not ctrl.is_polling()

    def test_shutdown_unsubscribes(self, qapp, repo):
        ctrl = _make_controller(repo)
        ctrl.shutdown()
        repo.add(Student(id=8, full_name="Bob", age=20))
        assert not ctrl.has_pending_save()

    def test_shutdown_is_idempotent(self, qapp, repo, save_spy):
        ctrl = _make_controller(repo)
        ctrl.shutdown()
        ctrl.shutdown()
        save_spy.assert_called_once()

    def test_shutdown_swallows_save_failure(self, qapp, repo, monkeypatch):
        ctrl = _make_controller(repo)
        monkeypatch.setattr(repo, "save", MagicMock(side_effect=RepositoryIOError("write", repo.data_file)))
        ctrl.shutdown()
        assert not ctrl.is_polling()


class TestDescribeEvent:

    def test_messages(self):
        student = Student(id=8)
        assert describe_event(StudentAdded(data={"student": student})) == "Added student 8"
        assert describe_event(StudentUpdated(data={"original_id": 7, "student": student})) == "Updated student 7 -> 8"
        assert describe_event(StudentRemoved(data={"student_id": 8})) == "Deleted student 8"

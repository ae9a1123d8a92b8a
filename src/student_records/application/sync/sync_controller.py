"""
Sync Controller

Keeps a StudentRepository and its data file consistent during a long-running
session in which the file may also be edited by another process (or another
window of this application).

Two independent QTimers run on the Qt event loop:
- a single-shot debounce timer, restarted by every add/update/delete, that
  writes the file once edits have been quiet for auto_save_debounce_ms
- a repeating poll timer that reloads the file when its modification time is
  newer than the last one we know about

Our own save also bumps the modification time. A change is only treated as
external when it is newer than the last known time AND more than
self_save_guard_ms after our last save; otherwise every auto-save would be
re-detected as an outside edit and trigger a reload.

Manual save/reload go through save_now()/reload_now() so explicit user
actions and both timers share the same timestamps.
"""
import time
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from student_records.application.events import (
    DomainEvent,
    MUTATION_EVENTS,
    StudentAdded,
    StudentRemoved,
    StudentUpdated,
)
from student_records.application.settings.store_settings import StoreSettings
from student_records.infrastructure.persistence.base_repository import RepositoryError
from student_records.infrastructure.persistence.student_repository import StudentRepository
from student_records.utils.message import Log


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


def describe_event(event: DomainEvent) -> str:
    """Human-readable status line for a repository mutation."""
    if event.name == StudentAdded.name:
        return f"Added student {event.data['student'].id}"
    if event.name == StudentUpdated.name:
        return f"Updated student {event.data['original_id']} -> {event.data['student'].id}"
    if event.name == StudentRemoved.name:
        return f"Deleted student {event.data['student_id']}"
    return event.name


class SyncController(QObject):
    """
    Debounced auto-save and polled auto-reload around a StudentRepository.

    Usage:
        controller = SyncController(repository, settings)
        controller.saved.connect(status_bar.showMessage)
        controller.reloaded.connect(refresh_table)
        ...
        controller.shutdown()
    """

    # Signals
    attached = pyqtSignal(int, str)     # record count, data file path
    saved = pyqtSignal(str)             # status message
    reloaded = pyqtSignal(str)          # status message
    changed = pyqtSignal(str)           # status message for add/update/delete
    error_occurred = pyqtSignal(str)    # background failure message

    def __init__(
        self,
        repository: StudentRepository,
        settings: Optional[StoreSettings] = None,
        clock: Optional[Callable[[], int]] = None,
        auto_attach: bool = True,
        parent=None,
    ):
        """
        Args:
            repository: Store to keep in sync (normally already loaded)
            settings: Timer intervals and guard window (defaults if None)
            clock: Milliseconds "now", must share the epoch of file mtimes
            auto_attach: Call attach() immediately; pass False to connect
                signals first and attach() afterwards
            parent: Parent QObject
        """
        super().__init__(parent)
        self._repository = repository
        self._settings = settings or StoreSettings()
        self._clock = clock or _wall_clock_ms

        self.last_known_modified_ms = 0
        self.last_self_save_ms = 0
        self._attached = False
        self._shut_down = False

        self._save_timer = QTimer(self)
        self._save_timer.setSingleShot(True)
        self._save_timer.setInterval(self._settings.auto_save_debounce_ms)
        self._save_timer.timeout.connect(self._on_save_timeout)

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(self._settings.auto_reload_interval_ms)
        self._poll_timer.timeout.connect(self._on_poll_timeout)

        if auto_attach:
            self.attach()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def repository(self) -> StudentRepository:
        return self._repository

    @property
    def guard_window_ms(self) -> int:
        return self._settings.self_save_guard_ms

    def has_pending_save(self) -> bool:
        return self._save_timer.isActive()

    def is_polling(self) -> bool:
        return self._poll_timer.isActive()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def attach(self) -> str:
        """
        Start watching: remember the file's mtime, follow repository
        mutations and start the poll timer.

        Returns:
            Status message ("Loaded N students from PATH")
        """
        message = f"Loaded {self._repository.count} students from {self._repository.data_file}"
        if self._attached:
            return message

        self.last_known_modified_ms = self._repository.modified_time_ms()
        self._repository.subscribe(self._on_repository_event)
        self._poll_timer.start()
        self._attached = True
        self._shut_down = False

        Log.info(
            f"SyncController: Attached to {self._repository.data_file} "
            f"(debounce {self._settings.auto_save_debounce_ms}ms, "
            f"poll {self._settings.auto_reload_interval_ms}ms, "
            f"guard {self._settings.self_save_guard_ms}ms)"
        )
        self.attached.emit(self._repository.count, str(self._repository.data_file))
        return message

    def shutdown(self) -> None:
        """
        End the session: best-effort final save, then stop both timers.

        Save failures are logged and swallowed. Safe to call twice.
        """
        if self._shut_down or not self._attached:
            return

        try:
            self._repository.save()
            self._mark_self_saved()
        except RepositoryError as e:
            Log.warning(f"SyncController: Final save failed: {e}")

        self._save_timer.stop()
        self._poll_timer.stop()
        self._repository.unsubscribe(self._on_repository_event)
        self._attached = False
        self._shut_down = True
        Log.info("SyncController: Shut down")

    # =========================================================================
    # Saving
    # =========================================================================

    def schedule_save(self) -> None:
        """(Re)start the debounce timer; a burst of calls yields one save."""
        self._save_timer.start()

    def save_now(self) -> str:
        """
        Manual save.

        Returns:
            Status message

        Raises:
            RepositoryIOError: If the file cannot be written
        """
        self._save_timer.stop()
        self._repository.save()
        self._mark_self_saved()
        message = f"Saved to file: {self._repository.data_file}"
        self.saved.emit(message)
        return message

    def flush(self) -> bool:
        """
        Save immediately if a debounced save is pending.

        Errors are handled like the automatic path (logged, not raised).

        Returns:
            True if a save happened and succeeded
        """
        if not self._save_timer.isActive():
            return False
        self._save_timer.stop()
        return self._auto_save()

    def _auto_save(self) -> bool:
        try:
            self._repository.save()
        except RepositoryError as e:
            Log.warning(f"SyncController: Auto-save failed: {e}")
            self.error_occurred.emit(f"Auto-save failed: {e}")
            return False
        self._mark_self_saved()
        self.saved.emit(f"Auto-saved {self._repository.count} students")
        return True

    def _mark_self_saved(self) -> None:
        self.last_self_save_ms = self._clock()
        self.last_known_modified_ms = self._repository.modified_time_ms()

    # =========================================================================
    # Reloading
    # =========================================================================

    def reload_now(self) -> str:
        """
        Manual reload; unsaved edits are discarded.

        Returns:
            Status message

        Raises:
            RepositoryIOError: If the file cannot be read
        """
        self._save_timer.stop()
        self._repository.load()
        self.last_known_modified_ms = self._repository.modified_time_ms()
        message = "Reloaded from file"
        self.reloaded.emit(message)
        return message

    def is_external_change(self, modified_ms: int) -> bool:
        """True if `modified_ms` is newer than we know and not our own write."""
        return (
            modified_ms > self.last_known_modified_ms
            and modified_ms > self.last_self_save_ms + self._settings.self_save_guard_ms
        )

    def poll_now(self) -> bool:
        """
        One poll tick: reload if the file was changed from outside.

        Returns:
            True if the repository was reloaded
        """
        modified_ms = self._repository.modified_time_ms()
        if modified_ms <= 0:
            return False
        if not self.is_external_change(modified_ms):
            return False

        try:
            self._repository.load()
        except RepositoryError as e:
            # Report each failing modification once; the next outside write retries
            self.last_known_modified_ms = modified_ms
            Log.warning(f"SyncController: Auto-reload failed: {e}")
            self.error_occurred.emit(f"Auto-reload failed: {e}")
            return False

        # The file is now the source of truth; a pending save would only echo it back
        self._save_timer.stop()
        self.last_known_modified_ms = modified_ms
        Log.info(f"SyncController: Reloaded {self._repository.count} students after external change")
        self.reloaded.emit("Auto-reloaded from file")
        return True

    # =========================================================================
    # Slots
    # =========================================================================

    def _on_repository_event(self, event: DomainEvent) -> None:
        if event.name not in MUTATION_EVENTS:
            return
        self.schedule_save()
        self.changed.emit(describe_event(event))

    def _on_save_timeout(self) -> None:
        self._auto_save()

    def _on_poll_timeout(self) -> None:
        self.poll_now()

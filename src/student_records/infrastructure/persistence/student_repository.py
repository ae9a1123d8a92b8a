"""
Student Repository

Owns the ordered in-memory student list and its backing text file.

Uniqueness (id, normalized full name, normalized email) is enforced here on
every add/update. validate_student() reports the same collisions as messages;
both sides call find_conflicts() so they cannot drift apart.

The list is mutation-notifying: subscribers registered with subscribe() are
called synchronously after every successful add/update/delete and after
every load. SyncController relies on this to schedule its debounced save.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Set, Tuple, Union

from student_records.application.events import (
    ALL_EVENTS,
    DomainEvent,
    EventBus,
    StudentAdded,
    StudentRemoved,
    StudentUpdated,
    StudentsReloaded,
)
from student_records.application.validation import ValidationResult, validate_student
from student_records.domain.entities.student import Student
from student_records.infrastructure.persistence.base_repository import (
    BaseFileRepository,
    DuplicateEntityError,
)
from student_records.infrastructure.persistence.student_codec import (
    DELIMITER,
    FIELD_COUNT,
    StudentFormat,
    decode_student,
    detect_format,
    encode_student,
)
from student_records.utils.message import Log


@dataclass(frozen=True)
class Conflicts:
    """Which unique fields of a candidate collide with stored records."""
    id: bool = False
    full_name: bool = False
    email: bool = False

    def __bool__(self) -> bool:
        return self.id or self.full_name or self.email


@dataclass
class LoadReport:
    """
    What the last load() kept and dropped.

    Duplicates are dropped silently as far as the collection is concerned
    (first occurrence wins); this report is where callers can see them.
    """
    loaded: int = 0
    skipped_lines: List[str] = field(default_factory=list)
    duplicates: List[Student] = field(default_factory=list)

    @property
    def dropped(self) -> int:
        return len(self.skipped_lines) + len(self.duplicates)


class _SeenKeys:
    """First-occurrence-wins filter used while loading."""

    def __init__(self):
        self.ids: Set[int] = set()
        self.names: Set[str] = set()
        self.emails: Set[str] = set()

    def accept(self, student: Student) -> bool:
        name_key = student.name_key
        email_key = student.email_key
        if student.id in self.ids:
            return False
        if name_key and name_key in self.names:
            return False
        if email_key and email_key in self.emails:
            return False
        self.ids.add(student.id)
        if name_key:
            self.names.add(name_key)
        if email_key:
            self.emails.add(email_key)
        return True


class StudentRepository(BaseFileRepository[Student]):
    """
    File-backed student store.

    Usage:
        repo = StudentRepository(Path("students.txt"))
        repo.load()
        if repo.add(Student(id=7, full_name="Jane Doe", age=20)):
            repo.save()
    """

    entity_name = "Student"

    def __init__(self, data_file: Union[str, Path]):
        super().__init__(data_file)
        self._students: List[Student] = []
        self._event_bus = EventBus()
        self.load_report = LoadReport()

    # =========================================================================
    # Collection access
    # =========================================================================

    @property
    def students(self) -> Tuple[Student, ...]:
        """Snapshot of the collection in file order."""
        return tuple(self._students)

    @property
    def count(self) -> int:
        return len(self._students)

    def __len__(self) -> int:
        return len(self._students)

    def __iter__(self) -> Iterator[Student]:
        return iter(tuple(self._students))

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe(self, callback: Callable[[DomainEvent], None]) -> None:
        """Call `callback(event)` after every add/update/delete/load."""
        self._event_bus.subscribe(ALL_EVENTS, callback)

    def unsubscribe(self, callback: Callable[[DomainEvent], None]) -> None:
        self._event_bus.unsubscribe(ALL_EVENTS, callback)

    # =========================================================================
    # Codec hooks
    # =========================================================================

    def _line_to_entity(self, line: str) -> Optional[Student]:
        return decode_student(line)

    def _entity_to_line(self, entity: Student) -> str:
        return encode_student(entity)

    # =========================================================================
    # Load / Save
    # =========================================================================

    def load(self) -> LoadReport:
        """
        Replace the collection with the file's contents.

        A missing file is created empty (best effort). Pipe lines decode on
        their own; other lines are either one legacy CSV record or part of a
        seven-line legacy block. Later duplicates of an id, name or email are
        dropped.

        Returns:
            LoadReport describing kept and dropped records

        Raises:
            RepositoryIOError: If the existing file cannot be read (the collection is left as it was)
        """
        if not self._data_file.exists():
            self._students.clear()
            self.load_report = LoadReport()
            self._ensure_file()
            self._publish_reloaded()
            return self.load_report

        # Read first so a failed read leaves the current collection untouched
        lines = self._read_lines()
        self._students.clear()
        report = LoadReport()
        self.load_report = report

        seen = _SeenKeys()
        legacy_buffer: List[str] = []

        def keep(text: str) -> None:
            student = self._line_to_entity(text)
            if student is None:
                report.skipped_lines.append(text)
                Log.warning(f"StudentRepository: Skipped unreadable record {text!r}")
            elif seen.accept(student):
                self._students.append(student)
            else:
                report.duplicates.append(student)
                Log.warning(f"StudentRepository: Dropped duplicate student {student.id} ({student.full_name!r})")

        def discard_buffer() -> None:
            if legacy_buffer:
                report.skipped_lines.append("\n".join(legacy_buffer))
                Log.warning(
                    f"StudentRepository: Dropped incomplete legacy record ({len(legacy_buffer)} of {FIELD_COUNT} lines)"
                )
                legacy_buffer.clear()

        for line in lines:
            if not line.strip():
                continue
            if DELIMITER in line:
                discard_buffer()
                keep(line)
            elif not legacy_buffer and detect_format(line) == StudentFormat.LEGACY_CSV and decode_student(line):
                keep(line)
            else:
                legacy_buffer.append(line)
                if len(legacy_buffer) == FIELD_COUNT:
                    keep("\n".join(legacy_buffer))
                    legacy_buffer.clear()
        discard_buffer()

        report.loaded = len(self._students)
        Log.info(
            f"StudentRepository: Loaded {report.loaded} students from {self._data_file}"
            + (f" ({report.dropped} dropped)" if report.dropped else "")
        )
        self._publish_reloaded()
        return report

    def save(self) -> None:
        """
        Rewrite the whole file in canonical format, one student per line.

        Raises:
            RepositoryIOError: If the file cannot be written
        """
        self._write_lines(self._entity_to_line(s) for s in self._students)
        Log.debug(f"StudentRepository: Saved {len(self._students)} students to {self._data_file}")

    # =========================================================================
    # Queries
    # =========================================================================

    def find_by_id(self, student_id: int) -> Optional[Student]:
        if student_id is None or student_id <= 0:
            return None
        for student in self._students:
            if student.id == student_id:
                return student
        return None

    def find_conflicts(self, student: Student, exclude_id: Optional[int] = None) -> Conflicts:
        """
        Check a candidate's unique fields against stored records.

        Args:
            student: Candidate record
            exclude_id: Stored record to ignore (the one being replaced), None for none

        Returns:
            Conflicts flags for id, full name and email
        """
        name_key = student.name_key
        email_key = student.email_key
        id_clash = name_clash = email_clash = False
        for other in self._students:
            if exclude_id is not None and other.id == exclude_id:
                continue
            if other.id == student.id:
                id_clash = True
            if name_key and other.name_key == name_key:
                name_clash = True
            if email_key and other.email_key == email_key:
                email_clash = True
        return Conflicts(id=id_clash, full_name=name_clash, email=email_clash)

    def require_unique(self, student: Student, exclude_id: Optional[int] = None) -> None:
        """
        Raise instead of returning False on a collision.

        Raises:
            DuplicateEntityError: For the first colliding field
        """
        conflicts = self.find_conflicts(student, exclude_id)
        if conflicts.id:
            raise DuplicateEntityError(self.entity_name, "id", str(student.id))
        if conflicts.full_name:
            raise DuplicateEntityError(self.entity_name, "full name", student.full_name.strip())
        if conflicts.email:
            raise DuplicateEntityError(self.entity_name, "email", student.email.strip())

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, student: Optional[Student]) -> bool:
        """
        Append a student.

        Returns:
            False (nothing changed) if the id, name or email is already taken
        """
        if student is None:
            return False
        if self.find_conflicts(student):
            return False
        self._students.append(student)
        self._log_create(student)
        self._event_bus.publish(StudentAdded(data={"student": student}))
        return True

    def update(self, original_id: int, updated: Optional[Student]) -> bool:
        """
        Replace the record stored under `original_id` in place.

        The id itself may change as long as the new id is free. Name and
        email collisions are checked against every record except the one
        stored under `original_id`.

        Returns:
            False if rejected or if no record has `original_id`
        """
        if original_id is None or original_id <= 0 or updated is None:
            return False
        if self.find_conflicts(updated, exclude_id=original_id):
            return False
        for index, student in enumerate(self._students):
            if student.id == original_id:
                self._students[index] = updated
                self._log_update(original_id, updated)
                self._event_bus.publish(StudentUpdated(data={"original_id": original_id, "student": updated}))
                return True
        return False

    def delete(self, student_id: int) -> bool:
        """
        Remove the record(s) with `student_id`.

        Returns:
            True if anything was removed
        """
        remaining = [s for s in self._students if s.id != student_id]
        if len(remaining) == len(self._students):
            return False
        self._students[:] = remaining
        self._log_delete(student_id)
        self._event_bus.publish(StudentRemoved(data={"student_id": student_id}))
        return True

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate(
        student: Student,
        check_duplicate_id: bool,
        repository: Optional["StudentRepository"] = None,
        original_id: Optional[int] = None,
    ) -> ValidationResult:
        """See validate_student()."""
        return validate_student(student, check_duplicate_id, repository, original_id)

    # =========================================================================
    # Internals
    # =========================================================================

    def _publish_reloaded(self) -> None:
        self._event_bus.publish(StudentsReloaded(data={
            "count": len(self._students),
            "path": str(self._data_file),
        }))

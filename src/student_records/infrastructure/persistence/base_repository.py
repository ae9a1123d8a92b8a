"""
Base Repository Pattern

Common plumbing for repositories backed by a single text file: one entity
per line, the whole file rewritten on every save.

Usage:
    class StudentRepository(BaseFileRepository[Student]):
        entity_name = "Student"

        def _line_to_entity(self, line) -> Optional[Student]:
            return decode_student(line)

        def _entity_to_line(self, entity: Student) -> str:
            return encode_student(entity)

Features:
- Type-safe generic base class
- Standard error handling with custom exceptions
- Common existence checking patterns
- UTF-8 line reading/writing with OSError wrapped as RepositoryIOError
- Logging integration
"""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TypeVar, Generic, Optional, List, Any, Iterable, Union

from student_records.utils.message import Log


# =============================================================================
# Custom Exceptions
# =============================================================================

class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class RepositoryIOError(RepositoryError):
    """Raised when the backing file cannot be read or written."""

    def __init__(self, operation: str, path: Path, cause: Optional[BaseException] = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        message = f"Failed to {operation} {path}"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)


class EntityNotFoundError(RepositoryError):
    """Raised when an entity is not found."""

    def __init__(self, entity_name: str, entity_id: Any, context: str = ""):
        self.entity_name = entity_name
        self.entity_id = entity_id
        self.context = context
        message = f"{entity_name} with id '{entity_id}' not found"
        if context:
            message += f" ({context})"
        super().__init__(message)


class DuplicateEntityError(RepositoryError):
    """Raised when a duplicate entity is detected."""

    def __init__(self, entity_name: str, field: str, value: str, context: str = ""):
        self.entity_name = entity_name
        self.field = field
        self.value = value
        self.context = context
        message = f"{entity_name} with {field} '{value}' already exists"
        if context:
            message += f" ({context})"
        super().__init__(message)


# =============================================================================
# Type Variables
# =============================================================================

T = TypeVar('T')


# =============================================================================
# Base Repository
# =============================================================================

class BaseFileRepository(ABC, Generic[T]):
    """
    Abstract base class for line-per-entity file repositories.

    Subclasses must implement:
    - _line_to_entity(): Convert a stored line to an entity (None to skip it)
    - _entity_to_line(): Convert an entity to its stored line
    - find_by_id(): Look an entity up in memory

    Class attributes:
    - entity_name: Human-readable name for error and log messages
    """

    entity_name: str = "Entity"

    def __init__(self, data_file: Union[str, Path]):
        """
        Args:
            data_file: Path of the backing text file
        """
        self._data_file = Path(data_file)

    @property
    def data_file(self) -> Path:
        return self._data_file

    # =========================================================================
    # Abstract Methods (must implement)
    # =========================================================================

    @abstractmethod
    def _line_to_entity(self, line: str) -> Optional[T]:
        pass

    @abstractmethod
    def _entity_to_line(self, entity: T) -> str:
        pass

    @abstractmethod
    def find_by_id(self, entity_id: int) -> Optional[T]:
        pass

    # =========================================================================
    # Common Utility Methods
    # =========================================================================

    def exists(self, entity_id: int) -> bool:
        return self.find_by_id(entity_id) is not None

    def require_exists(self, entity_id: int, context: str = "") -> T:
        """
        Get an entity by ID, raising EntityNotFoundError if not found.

        Raises:
            EntityNotFoundError: If entity not found
        """
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.entity_name, entity_id, context)
        return entity

    # =========================================================================
    # File Helpers
    # =========================================================================

    def _ensure_file(self) -> bool:
        """
        Create the backing file (and its directory) if it is missing.

        Best effort: failure is logged, not raised.

        Returns:
            True if the file was created
        """
        if self._data_file.exists():
            return False
        try:
            self._data_file.parent.mkdir(parents=True, exist_ok=True)
            self._data_file.touch()
            Log.info(f"{self.__class__.__name__}: Created empty data file {self._data_file}")
            return True
        except OSError as e:
            Log.warning(f"{self.__class__.__name__}: Could not create {self._data_file}: {e}")
            return False

    def _read_lines(self) -> List[str]:
        """
        Read the file's lines without terminators.

        Only CR, LF and CRLF end a line (str.splitlines() would also split on
        unicode separators that the codec stores unescaped).

        Raises:
            RepositoryIOError: If the file cannot be opened or read
        """
        try:
            with open(self._data_file, "r", encoding="utf-8", newline=None) as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryIOError("read", self._data_file, e) from e
        if not text:
            return []
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

    def _write_lines(self, lines: Iterable[str]) -> None:
        """
        Overwrite the file with the given lines, one per row, LF terminated.

        Raises:
            RepositoryIOError: If the file cannot be written
        """
        try:
            with open(self._data_file, "w", encoding="utf-8", newline="\n") as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
        except OSError as e:
            raise RepositoryIOError("write", self._data_file, e) from e

    def modified_time_ms(self) -> int:
        """File modification time in milliseconds, 0 if missing or unreadable."""
        try:
            return self._data_file.stat().st_mtime_ns // 1_000_000
        except OSError:
            return 0

    # =========================================================================
    # Logging Helpers
    # =========================================================================

    def _log_create(self, entity: T) -> None:
        Log.info(f"{self.__class__.__name__}: Added {self.entity_name} {self._describe(entity)}")

    def _log_update(self, original_id: Any, entity: T) -> None:
        Log.info(f"{self.__class__.__name__}: Updated {self.entity_name} {original_id} -> {self._describe(entity)}")

    def _log_delete(self, entity_id: Any) -> None:
        Log.info(f"{self.__class__.__name__}: Deleted {self.entity_name} {entity_id}")

    @staticmethod
    def _describe(entity: Any) -> str:
        return str(getattr(entity, 'id', entity))

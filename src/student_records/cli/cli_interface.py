"""
Command Line Interface for Student Records

Interactive console over a StudentRepository and its SyncController.

The loop does not run a Qt event loop, so the controller's timers never fire
here. Instead every command starts with poll_now() (pick up outside edits)
and every mutating command ends with flush() (write the pending save), which
gives the same file semantics as the timers.
"""
import argparse
import sys
from typing import Callable, List, Optional

from PyQt6.QtCore import QCoreApplication

from student_records.application.search import filter_students
from student_records.application.settings import load_store_settings, resolve_data_file
from student_records.application.sync import SyncController
from student_records.cli.student_form import read_student_form
from student_records.cli.tools import CLEAR_VALUE, InputFunc, prompt, prompt_yes_no
from student_records.domain.entities.student import Student
from student_records.infrastructure.persistence.base_repository import RepositoryError
from student_records.infrastructure.persistence.student_repository import StudentRepository
from student_records.utils.message import Log


HELP_LINES = [
    "list                 Show all students",
    "find <id>            Show one student",
    "search <text>        Students whose fields contain <text>",
    "add                  Add a student (prompts for each field)",
    "edit <id>            Edit a student (blank keeps the current value)",
    "delete <id>          Delete a student",
    "save                 Write the data file now",
    "reload               Re-read the data file, discarding unsaved edits",
    "help                 Show this help",
    "quit                 Save and exit",
]


class CLIInterface:
    """
    Command Line Interface for the student store.
    """

    def __init__(
        self,
        repository: StudentRepository,
        controller: SyncController,
        input_func: InputFunc = input,
        output: Optional[Callable[[str], None]] = None,
        error_output: Optional[Callable[[str], None]] = None,
    ):
        """
        Args:
            repository: Loaded student store
            controller: Sync controller attached to `repository`
            input_func: Line reader (input() by default)
            output: Sink for normal messages (Log.info by default)
            error_output: Sink for error messages (Log.error by default)
        """
        self.repository = repository
        self.controller = controller
        self.input_func = input_func
        self.output = output or Log.info
        self.error_output = error_output or Log.error
        self.running = True

        self.controller.changed.connect(self.output)
        self.controller.saved.connect(self.output)
        self.controller.reloaded.connect(self.output)
        self.controller.error_occurred.connect(self.error_output)

        self._handlers = {
            "list": self._cmd_list,
            "ls": self._cmd_list,
            "find": self._cmd_find,
            "search": self._cmd_search,
            "add": self._cmd_add,
            "edit": self._cmd_edit,
            "update": self._cmd_edit,
            "delete": self._cmd_delete,
            "rm": self._cmd_delete,
            "save": self._cmd_save,
            "reload": self._cmd_reload,
            "help": self._cmd_help,
            "h": self._cmd_help,
        }

    def run(self):
        """Main CLI loop"""
        self.output("Student Records CLI")
        self.output("Type 'help' for available commands, 'quit' to exit")

        while self.running:
            try:
                user_input = self.input_func("SR> ")
            except (KeyboardInterrupt, EOFError):
                self.output("Exiting...")
                break
            if not user_input or not user_input.strip():
                continue
            try:
                self.process_command(user_input)
            except KeyboardInterrupt:
                self.output("Cancelled")
            except Exception as e:
                Log.warning(f"CLIInterface: Command failed: {user_input!r}", exc_info=True)
                self.error_output(f"Unexpected error: {e}")

    def process_command(self, command: str) -> None:
        """Process one command line"""
        parts = command.strip().split(maxsplit=1)
        if not parts:
            return

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd in ['quit', 'exit', 'q']:
            self.running = False
            return

        handler = self._handlers.get(cmd)
        if handler is None:
            self.error_output(f"Unknown command: {cmd} (type 'help')")
            return

        Log.command(command.strip())
        self.controller.poll_now()
        handler(arg)
        if handler in (self._cmd_add, self._cmd_edit, self._cmd_delete):
            self.controller.flush()

    # =========================================================================
    # Commands
    # =========================================================================

    def _cmd_help(self, arg: str) -> None:
        self.output("Available commands:")
        for line in HELP_LINES:
            self.output(f"  {line}")

    def _cmd_list(self, arg: str) -> None:
        self._show(list(self.repository), empty_message="No students")

    def _cmd_find(self, arg: str) -> None:
        student_id = self._parse_id(arg, "find")
        if student_id is None:
            return
        student = self.repository.find_by_id(student_id)
        if student is None:
            self.error_output(f"Student not found: {student_id}")
            return
        self.output(str(student))

    def _cmd_search(self, arg: str) -> None:
        matches = filter_students(self.repository, arg)
        self._show(matches, empty_message=f"No matches for '{arg}'")

    def _cmd_add(self, arg: str) -> None:
        form = read_student_form(self.input_func)
        if form is None:
            self.output("Cancelled")
            return
        student, errors = form
        errors = errors + self.repository.validate(student, True, self.repository, None).errors
        if errors:
            self.error_output("; ".join(errors))
            return
        if not self.repository.add(student):
            self.error_output("Student with same ID already exists")

    def _cmd_edit(self, arg: str) -> None:
        original_id = self._parse_id(arg, "edit")
        if original_id is None:
            return
        current = self.repository.find_by_id(original_id)
        if current is None:
            self.error_output(f"Student not found: {original_id}")
            return

        self.output(f"Editing {current} (blank keeps a value, '{CLEAR_VALUE}' clears it)")
        form = read_student_form(self.input_func, initial=current)
        if form is None:
            self.output("Cancelled")
            return
        updated, errors = form
        errors = errors + self.repository.validate(updated, True, self.repository, original_id).errors
        if errors:
            self.error_output("; ".join(errors))
            return
        if not self.repository.update(original_id, updated):
            self.error_output("Failed to update student")

    def _cmd_delete(self, arg: str) -> None:
        student_id = self._parse_id(arg, "delete")
        if student_id is None:
            return
        student = self.repository.find_by_id(student_id)
        if student is None:
            self.error_output(f"Student not found: {student_id}")
            return
        if not prompt_yes_no(f"Delete {student}?", self.input_func):
            self.output("Cancelled")
            return
        self.repository.delete(student_id)

    def _cmd_save(self, arg: str) -> None:
        try:
            self.controller.save_now()
        except RepositoryError as e:
            self.error_output(f"Save failed: {e}")

    def _cmd_reload(self, arg: str) -> None:
        try:
            self.controller.reload_now()
        except RepositoryError as e:
            self.error_output(f"Reload failed: {e}")

    # =========================================================================
    # Helpers
    # =========================================================================

    def _show(self, students: List[Student], empty_message: str) -> None:
        if not students:
            self.output(empty_message)
            return
        self.output(f"Students ({len(students)}):")
        for student in students:
            self.output(f"  {student}")

    def _parse_id(self, arg: str, command: str) -> Optional[int]:
        if not arg:
            arg = prompt("ID number: ", self.input_func) or ""
        try:
            return int(arg.strip())
        except ValueError:
            self.error_output(f"Usage: {command} <id> (id must be a number)")
            return None


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="student-records",
        description="Manage student records stored in a plain text file.",
    )
    parser.add_argument("--data-file", help="Student data file (default: ./students.txt)")
    parser.add_argument("--settings", help="Settings JSON file (default: user config settings.json)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override the configured log level",
    )
    parser.add_argument("--no-file-log", action="store_true", help="Do not write a log file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    settings = load_store_settings(args.settings)
    if args.data_file:
        settings.data_file = args.data_file
    Log.set_level(args.log_level or settings.log_level)
    if not args.no_file_log:
        Log.enable_file_logging()

    # QObject timers need an application instance even though the loop is ours
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    repository = StudentRepository(resolve_data_file(settings))
    try:
        repository.load()
    except RepositoryError as e:
        Log.error(f"Failed to load {repository.data_file}: {e}")
        return 1

    controller = SyncController(repository, settings=settings, parent=app)
    Log.info(f"Loaded {repository.count} students from {repository.data_file}")
    try:
        CLIInterface(repository, controller).run()
    finally:
        controller.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())

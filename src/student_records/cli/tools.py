from typing import Callable, Optional

from student_records.utils.message import Log


InputFunc = Callable[[str], str]

# Answer that empties a field instead of keeping its current value
CLEAR_VALUE = "-"


def prompt(prompt_message: str, input_func: InputFunc = input) -> Optional[str]:
    """Prompt user for input via terminal; 'e'/'exit' cancels (returns None)."""
    response = input_func(prompt_message)
    if response is None or response.strip().lower() in ['e', 'exit']:
        Log.info("Selection exited by user.")
        return None
    return response


def prompt_with_default(label: str, current: str = "", input_func: InputFunc = input) -> Optional[str]:
    """
    Prompt for a field, showing the current value.

    An empty answer keeps `current` and CLEAR_VALUE empties the field.
    None means the user cancelled.
    """
    suffix = f" [{current}]" if current else ""
    response = prompt(f"{label}{suffix}: ", input_func)
    if response is None:
        return None
    response = response.strip()
    if response == CLEAR_VALUE:
        return ""
    return response if response else current


def prompt_yes_no(prompt_text: str, input_func: InputFunc = input) -> bool:
    """Prompt user for yes/no via terminal"""
    while True:
        response = input_func(f"{prompt_text} (y/n): ").strip().lower()
        if response in ['y', 'yes']:
            return True
        if response in ['n', 'no']:
            return False
        Log.error("Invalid selection. Please enter 'y' for yes or 'n' for no.")

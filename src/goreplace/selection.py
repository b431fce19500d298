"""
Interactive selection of a matched module and confirmation of the choice.

Prompting is injected as a callable so the validation rules can be exercised
without a terminal.
"""

import re
from typing import Callable, Optional, Sequence

from .error_handling import (
    ErrorCategory,
    InputTooLongError,
    InvalidSelectionError,
    get_error_handler,
)
from .reporting import ReplaceReporter

PromptFunc = Callable[[str], str]

# Optional sign and ASCII digits only: no "1_0", no non-ASCII digits
_SELECTION_NUMBER = re.compile(r"[+-]?[0-9]+")


def parse_selection(raw_value: str, count: int, max_input_length: int) -> int:
    """
    Convert a 1-based numeric answer into a 0-based index.

    Raises:
        InputTooLongError: If the answer exceeds max_input_length
        InvalidSelectionError: If it is not an integer between 1 and count
    """
    value = raw_value.strip()
    if len(value) > max_input_length:
        raise InputTooLongError(max_input_length, "input too long")

    index = int(value) if _SELECTION_NUMBER.fullmatch(value) else 0

    if index < 1 or index > count:
        get_error_handler().warning(
            ErrorCategory.VALIDATION,
            "Rejected package selection",
            "selection",
            "parse_selection",
            details={"choices": count, "input_length": len(value)},
        )
        raise InvalidSelectionError(value)

    return index - 1


def select_dependency(
    matched: Sequence[str],
    prompt: PromptFunc,
    max_input_length: int,
    reporter: Optional[ReplaceReporter] = None,
) -> str:
    """
    Pick one module path out of the matches.

    A single match is returned without asking; otherwise the matches are
    listed and the operator is prompted once for a number.
    """
    if len(matched) == 1:
        return matched[0]

    reporter = reporter or ReplaceReporter()
    reporter.print_matches(matched)
    answer = prompt("Enter the number of the desired package:")
    return matched[parse_selection(answer, len(matched), max_input_length)]


def confirm_selection(
    selected: str, prompt: PromptFunc, reporter: Optional[ReplaceReporter] = None
) -> bool:
    """Ask the operator to confirm; only an empty answer proceeds."""
    reporter = reporter or ReplaceReporter()
    reporter.print_selected(selected)
    answer = prompt(
        "Confirm selection (press Enter to continue, any other key to cancel):"
    )
    return answer.strip() == ""

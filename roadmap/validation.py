"""
Name, progress and quarter-range rules shared by the command engine and the
import pipeline.

Checks raise typed errors from roadmap.errors and never mutate anything.
"""

import re
from collections.abc import Iterable

from roadmap.errors import DuplicateNameError, RangeError, RequiredFieldError
from roadmap.quarters import Quarter, coerce_quarter, format_label, to_index

_WHITESPACE_RUN = re.compile(r"\s+")

MIN_PROGRESS = 0
MAX_PROGRESS = 100


def normalize_name(text: str) -> str:
    """Trim and collapse internal whitespace runs to a single space."""
    return _WHITESPACE_RUN.sub(" ", text.strip())


def name_key(text: str) -> str:
    """Comparison key for uniqueness checks: normalized and case-folded."""
    return normalize_name(text).casefold()


def ensure_name_present(candidate: str, label: str) -> str:
    if not isinstance(candidate, str):
        raise RequiredFieldError(label)
    normalized = normalize_name(candidate)
    if not normalized:
        raise RequiredFieldError(label)
    return normalized


def ensure_unique_name(candidate: str, existing_names: Iterable[str], label: str) -> None:
    key = name_key(candidate)
    for name in existing_names:
        if name_key(name) == key:
            raise DuplicateNameError(label)


def ensure_progress_in_range(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RangeError(
            f"Progress must be an integer between {MIN_PROGRESS} and {MAX_PROGRESS}",
            field="progress",
        )
    if value < MIN_PROGRESS or value > MAX_PROGRESS:
        raise RangeError(
            f"Progress must be between {MIN_PROGRESS} and {MAX_PROGRESS}, got {value}",
            field="progress",
        )


def ensure_quarter_order(start: Quarter, end: Quarter) -> None:
    if to_index(start) > to_index(end):
        raise RangeError(
            f"End quarter {format_label(end)} must be on or after "
            f"start quarter {format_label(start)}",
            field="quarter_range",
        )


def validate_task_fields(
    name: str,
    existing_names: Iterable[str],
    progress: int,
    start: Quarter | str,
    end: Quarter | str,
) -> str:
    """
    Validate task fields in order: name, progress, quarter range.

    Labels are parsed after the name and progress checks.

    Returns:
        The normalized task name.

    Raises:
        RequiredFieldError, DuplicateNameError, RangeError, FormatError: first
            failing check.
    """
    normalized = ensure_name_present(name, "Task")
    ensure_unique_name(normalized, existing_names, "Task")
    ensure_progress_in_range(progress)
    ensure_quarter_order(coerce_quarter(start), coerce_quarter(end))
    return normalized


def validate_timeline_name(name: str, existing_names: Iterable[str]) -> str:
    normalized = ensure_name_present(name, "Timeline")
    ensure_unique_name(normalized, existing_names, "Timeline")
    return normalized


def validate_team_name(name: str, existing_names: Iterable[str]) -> str:
    normalized = ensure_name_present(name, "Team")
    ensure_unique_name(normalized, existing_names, "Team")
    return normalized

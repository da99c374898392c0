"""
Quarter calendar arithmetic.

A Quarter is an immutable (year, quarter_number) value. Every quarter maps to a
linear integer index relative to config.BASE_YEAR, which gives the total order
used for comparison, range checks and lane packing:

    index = (year - BASE_YEAR) * 4 + (quarter_number - 1)

Labels have the canonical form "Q<n> <yyyy>".
"""

import re
from dataclasses import dataclass

from roadmap import config
from roadmap.errors import FormatError, RangeError

QUARTERS_PER_YEAR = config.QUARTERS_PER_YEAR

# Labels carry exactly four year digits
MIN_YEAR = 1000
MAX_YEAR = 9999

_LABEL_PATTERN = re.compile(r"^Q([1-4])\s+([0-9]{4})$", re.IGNORECASE)


@dataclass(frozen=True)
class Quarter:
    year: int
    quarter_number: int

    def __post_init__(self):
        if isinstance(self.year, bool) or not isinstance(self.year, int):
            raise FormatError(f"Quarter year must be an integer, got {self.year!r}")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise FormatError(
                f"Quarter year must be between {MIN_YEAR} and {MAX_YEAR}, got {self.year}"
            )
        if isinstance(self.quarter_number, bool) or self.quarter_number not in (1, 2, 3, 4):
            raise FormatError(f"Quarter number must be 1-4, got {self.quarter_number!r}")

    @property
    def index(self) -> int:
        return to_index(self)

    def __str__(self) -> str:
        return format_label(self)


def parse_label(text: str) -> Quarter:
    """Parse "Q3 2025" (case-insensitive, surrounding whitespace ignored)."""
    if not isinstance(text, str):
        raise FormatError(f"Invalid quarter label: {text!r}")
    match = _LABEL_PATTERN.match(text.strip())
    if not match:
        raise FormatError(f'Invalid quarter label: "{text}"')
    return Quarter(year=int(match.group(2)), quarter_number=int(match.group(1)))


def format_label(quarter: Quarter) -> str:
    return f"Q{quarter.quarter_number} {quarter.year}"


def to_index(quarter: Quarter) -> int:
    return (quarter.year - config.BASE_YEAR) * QUARTERS_PER_YEAR + (quarter.quarter_number - 1)


def from_index(index: int) -> Quarter:
    """
    Inverse of to_index. Negative indices fall before BASE_YEAR.

    Raises:
        FormatError: If index is not an integer or lands outside MIN_YEAR..MAX_YEAR
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise FormatError(f"Quarter index must be an integer, got {index!r}")
    year_offset, quarter_offset = divmod(index, QUARTERS_PER_YEAR)
    return Quarter(year=config.BASE_YEAR + year_offset, quarter_number=quarter_offset + 1)


def coerce_quarter(value: Quarter | str) -> Quarter:
    """Accept a Quarter as-is or parse a label."""
    if isinstance(value, Quarter):
        return value
    return parse_label(value)


def compare(a: Quarter, b: Quarter) -> int:
    """Return -1, 0 or 1 as a is before, equal to or after b."""
    diff = to_index(a) - to_index(b)
    return (diff > 0) - (diff < 0)


def quarter_range(start: Quarter, end: Quarter) -> list[Quarter]:
    """All quarters from start to end inclusive, ascending."""
    start_index = to_index(start)
    end_index = to_index(end)
    if start_index > end_index:
        raise RangeError(
            f"Start quarter {format_label(start)} is after end quarter {format_label(end)}"
        )
    return [from_index(i) for i in range(start_index, end_index + 1)]


def span_length(start: Quarter, end: Quarter) -> int:
    """Number of quarters covered by [start, end], inclusive."""
    start_index = to_index(start)
    end_index = to_index(end)
    if start_index > end_index:
        raise RangeError(
            f"End quarter precedes start quarter: {format_label(start)} > {format_label(end)}"
        )
    return end_index - start_index + 1


def display_quarters() -> list[Quarter]:
    """Default axis: Q1 of FIRST_YEAR through Q4 of LAST_YEAR."""
    return quarter_range(Quarter(config.FIRST_YEAR, 1), Quarter(config.LAST_YEAR, 4))


def year_boundaries(quarters: list[Quarter]) -> list[int]:
    """Positions in `quarters` where a new year starts (axis separators)."""
    boundaries = []
    previous_year = None
    for position, quarter in enumerate(quarters):
        if quarter.year != previous_year:
            boundaries.append(position)
            previous_year = quarter.year
    return boundaries

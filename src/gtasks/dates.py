"""Due date parsing and formatting.

Google Tasks only keeps the date part of ``due``. Dates are sent as noon UTC
so that the calendar day survives conversion to any local timezone, and read
back as the UTC calendar date.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

INPUT_FORMAT = "dd/mm/yyyy"
DISPLAY_FORMAT = "%d %B %Y"
NO_DUE_DATE = "No Due Date"


class InvalidDateError(ValueError):
    """Raised when a due date typed by the user is malformed."""

    pass


def parse_due_input(text: str, today: date | None = None) -> date | None:
    """Parse a ``dd/mm/yyyy`` due date typed by the user.

    Args:
        text: Raw input. Blank means no due date.
        today: Reference date for the year check. Defaults to today.

    Returns:
        The due date, or None if the input is blank.

    Raises:
        InvalidDateError: If the input is not a valid date in the current
            year or later.
    """
    text = text.strip()
    if not text:
        return None

    parts = [p.strip() for p in text.split("/")]
    if len(parts) != 3:
        raise InvalidDateError(f"Date format incorrect, expected {INPUT_FORMAT}: {text!r}")
    if not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidDateError(f"Date must contain only numbers, expected {INPUT_FORMAT}: {text!r}")

    day, month, year = (int(p) for p in parts)
    today = today or date.today()
    if year < today.year:
        raise InvalidDateError(f"Please enter a valid year ({today.year} or later)")

    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidDateError(f"Invalid date {text!r}: {e}") from e


def to_rfc3339(due: date) -> str:
    """Serialize a due date as an RFC 3339 timestamp at noon UTC."""
    noon = datetime(due.year, due.month, due.day, 12, 0, 0, tzinfo=timezone.utc)
    return noon.strftime("%Y-%m-%dT%H:%M:%S.000Z")


def from_rfc3339(value: str) -> date:
    """Read the calendar date of an RFC 3339 timestamp.

    Raises:
        ValueError: If the value is not a timestamp.
    """
    dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).date()


def format_due(due: date | None) -> str:
    """Format a due date for display."""
    if due is None:
        return NO_DUE_DATE
    return due.strftime(DISPLAY_FORMAT)

"""Plain-text rendering of task tables."""

from __future__ import annotations

from collections.abc import Sequence

from gtasks.dates import format_due
from gtasks.tasks import Task

HEADERS = ("No", "Title", "Description", "Status", "Due")
DONE_GLYPH = "✔"


def task_rows(tasks: Sequence[Task]) -> list[tuple[str, ...]]:
    """Build display rows, numbered from 1 in listing order."""
    return [
        (
            str(number),
            task.title,
            " ".join(task.notes.split()),
            DONE_GLYPH if task.is_completed else "",
            format_due(task.due),
        )
        for number, task in enumerate(tasks, start=1)
    ]


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Lay out rows in left-aligned columns separated by ``|``."""
    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    def line(cells: Sequence[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    separator = "|" + "|".join("-" * (w + 2) for w in widths) + "|"
    return "\n".join([line(headers), separator, *(line(r) for r in rows)])


def format_task_table(tasks: Sequence[Task]) -> str:
    return format_table(HEADERS, task_rows(tasks))

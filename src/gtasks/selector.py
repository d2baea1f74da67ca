"""Interactive choice of one item from an ordered list."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TextIO

# (label, items) -> 0-based index; raises SelectionAborted on cancel.
Prompt = Callable[[str, Sequence[str]], int]


class SelectionAborted(Exception):
    """Raised when the user cancels a choice. Not an error."""

    pass


def prompt_choice(
    label: str,
    items: Sequence[str],
    read: Callable[[str], str] = input,
    out: TextIO | None = None,
) -> int:
    """Print a numbered menu and read a 1-based choice.

    A blank answer, ``q``, end of input or Ctrl-C cancels. Anything else
    that is not a listed number asks again.

    Returns:
        The 0-based index of the chosen item.

    Raises:
        SelectionAborted: If the user cancels.
    """
    for number, item in enumerate(items, start=1):
        print(f"  {number:>3}. {item}", file=out)

    while True:
        try:
            answer = read(f"{label} [1-{len(items)}, q to cancel]: ").strip()
        except (EOFError, KeyboardInterrupt) as e:
            print(file=out)
            raise SelectionAborted() from e

        if answer == "" or answer.lower() == "q":
            raise SelectionAborted()
        if answer.isascii() and answer.isdigit() and 1 <= int(answer) <= len(items):
            return int(answer) - 1
        print(f"Please enter a number between 1 and {len(items)}", file=out)


def choose(labels: Sequence[str], prompt: Prompt = prompt_choice, label: str = "Select") -> int:
    """Map a user's pick back to an index into ``labels``.

    Returns:
        An index in ``[0, len(labels))``.

    Raises:
        SelectionAborted: If there is nothing to choose, the user cancels, or
            the prompt answers with something that is not a valid index.
    """
    if not labels:
        raise SelectionAborted()

    index = prompt(label, list(labels))
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(labels):
        raise SelectionAborted()
    return index

"""Google Tasks API exceptions."""

from __future__ import annotations


class TasksAPIError(Exception):
    """Raised when the Tasks API fails or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def is_not_found(self) -> bool:
        """True if the referenced task or task list does not exist."""
        return self.status_code == 404

"""Google Tasks API client implementation."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

import httplib2
from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from gtasks.dates import from_rfc3339, to_rfc3339
from gtasks.google.exceptions import TokenError
from gtasks.tasks.exceptions import TasksAPIError

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


class TaskStatus(str, Enum):
    """Status of a task as stored by Google Tasks."""

    NEEDS_ACTION = "needsAction"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | None) -> TaskStatus:
        """Map a remote status string, treating unknown values as needsAction."""
        try:
            return cls(value or cls.NEEDS_ACTION.value)
        except ValueError:
            logger.warning(f"Unknown task status {value!r}, treating as {cls.NEEDS_ACTION.value}")
            return cls.NEEDS_ACTION


@dataclass(frozen=True)
class TaskList:
    """Represents a Google Tasks list."""

    id: str
    title: str


@dataclass
class Task:
    """Represents a Google Task."""

    title: str
    notes: str = ""
    status: TaskStatus = TaskStatus.NEEDS_ACTION
    due: date | None = None
    id: str | None = None
    # Full resource as last returned by the server, re-sent on update.
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def is_completed(self) -> bool:
        """Check if task is completed."""
        return self.status is TaskStatus.COMPLETED

    def completed(self) -> Task:
        """Return a copy of this task marked as completed."""
        return dataclasses.replace(self, status=TaskStatus.COMPLETED)

    def to_resource(self) -> dict[str, Any]:
        """Build the request body, starting from the last known server record."""
        body = dict(self.raw)
        if self.id:
            body["id"] = self.id
        body["title"] = self.title
        body["status"] = self.status.value
        if self.notes:
            body["notes"] = self.notes
        else:
            body.pop("notes", None)
        if self.due:
            body["due"] = to_rfc3339(self.due)
        else:
            body.pop("due", None)
        if self.status is TaskStatus.NEEDS_ACTION:
            body.pop("completed", None)
        return body


class TasksClient:
    """Google Tasks API client.

    Wraps a Tasks v1 service built by ``gtasks.google.build_tasks_service``
    and turns its paginated dict responses into ``TaskList`` and ``Task``
    objects. Requests are never retried.

    Usage:
        client = TasksClient(build_tasks_service(credential))

        # List task lists
        lists = client.list_task_lists()

        # List pending tasks
        tasks = client.list_tasks(lists[0].id)

        # Complete a task
        client.update_task(lists[0].id, tasks[0].completed())
    """

    def __init__(self, service: Any) -> None:
        self._service = service

    def _execute(self, request: Any, action: str) -> Any:
        """Run one API request, translating failures."""
        try:
            return request.execute(num_retries=0)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            reason = getattr(e, "reason", None) or str(e)
            raise TasksAPIError(f"{action} failed: {reason}", status_code=status) from e
        except RefreshError as e:
            raise TokenError(f"Access token was rejected: {e}") from e
        except (httplib2.HttpLib2Error, OSError) as e:
            raise TasksAPIError(f"{action} failed: {e}") from e

    def _paginate(self, make_request: Callable[[str | None], Any], action: str) -> Iterator[dict]:
        """Yield items across all pages, in server order."""
        page_token: str | None = None
        page_count = 0
        while True:
            page_count += 1
            results = self._execute(make_request(page_token), action)
            items = results.get("items", [])
            logger.debug(f"{action}: page {page_count} returned {len(items)} items")
            yield from items
            page_token = results.get("nextPageToken")
            if not page_token:
                break

    # =========================================================================
    # Task Lists
    # =========================================================================

    def list_task_lists(self) -> list[TaskList]:
        """List all task lists.

        Returns:
            List of TaskList objects, in server order.
        """
        tasklists = self._service.tasklists()
        items = self._paginate(
            lambda token: tasklists.list(maxResults=PAGE_SIZE, pageToken=token),
            "Listing task lists",
        )
        return [self._parse_task_list(item) for item in items]

    def _parse_task_list(self, data: dict) -> TaskList:
        """Parse task list from API response."""
        return TaskList(id=data["id"], title=data.get("title", ""))

    # =========================================================================
    # Tasks
    # =========================================================================

    def list_tasks(self, tasklist_id: str, include_completed: bool = False) -> list[Task]:
        """List tasks in a task list.

        Follows the pagination cursor until exhausted. Completed tasks are
        dropped client-side unless ``include_completed`` is set.

        Args:
            tasklist_id: Task list ID.
            include_completed: Include completed tasks.

        Returns:
            List of Task objects, in server order.

        Raises:
            TasksAPIError: If the list does not exist or the request fails.
        """
        tasks_resource = self._service.tasks()
        items = self._paginate(
            lambda token: tasks_resource.list(
                tasklist=tasklist_id,
                showCompleted=include_completed,
                showHidden=include_completed,
                maxResults=PAGE_SIZE,
                pageToken=token,
            ),
            "Listing tasks",
        )
        tasks = [self._parse_task(item) for item in items]

        if not include_completed:
            tasks = [t for t in tasks if not t.is_completed]
        return tasks

    def create_task(self, tasklist_id: str, task: Task) -> Task:
        """Create a new task.

        Args:
            tasklist_id: Task list ID.
            task: Task to create. Its ``id`` is ignored.

        Returns:
            Created Task with the server-assigned id.
        """
        body = task.to_resource()
        body.pop("id", None)
        request = self._service.tasks().insert(tasklist=tasklist_id, body=body)
        return self._parse_task(self._execute(request, "Creating task"))

    def update_task(self, tasklist_id: str, task: Task) -> Task:
        """Replace a task with the given record.

        The task must come from ``list_tasks`` so the full record is sent.

        Returns:
            Updated Task.
        """
        if not task.id:
            raise ValueError("Cannot update a task without an id")
        request = self._service.tasks().update(
            tasklist=tasklist_id, task=task.id, body=task.to_resource()
        )
        return self._parse_task(self._execute(request, "Updating task"))

    def delete_task(self, tasklist_id: str, task_id: str) -> None:
        """Delete a task.

        Raises:
            TasksAPIError: If the task does not exist or the request fails.
        """
        request = self._service.tasks().delete(tasklist=tasklist_id, task=task_id)
        self._execute(request, "Deleting task")

    def _parse_task(self, data: dict) -> Task:
        """Parse task from API response."""
        due = None
        if data.get("due"):
            try:
                due = from_rfc3339(data["due"])
            except ValueError:
                logger.debug(f"Ignoring unparseable due date {data['due']!r} on task {data.get('id')}")

        return Task(
            id=data["id"],
            title=data.get("title", ""),
            notes=data.get("notes", ""),
            status=TaskStatus.parse(data.get("status")),
            due=due,
            raw=data,
        )

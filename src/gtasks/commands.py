"""Task commands: view, add, done and rm.

Each command loads a fresh credential, builds a client for this invocation
only, lets the user pick a task list (and a task), then makes at most one
mutating call. Everything a command needs travels in a ``CommandContext``.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from functools import partial
from typing import TextIO

from gtasks.dates import INPUT_FORMAT, InvalidDateError, parse_due_input
from gtasks.google import Credential, CredentialStore, GoogleAuthError, build_tasks_service
from gtasks.render import format_task_table
from gtasks.selector import Prompt, SelectionAborted, choose, prompt_choice
from gtasks.tasks import Task, TaskList, TasksAPIError, TasksClient

logger = logging.getLogger(__name__)


def default_client_factory(timeout: float) -> Callable[[Credential], TasksClient]:
    """Build TasksClients over the real Google API."""

    def make_client(credential: Credential) -> TasksClient:
        return TasksClient(build_tasks_service(credential, timeout=timeout))

    return make_client


@dataclass
class CommandContext:
    """Collaborators for one command invocation."""

    store: CredentialStore
    make_client: Callable[[Credential], TasksClient]
    read_line: Callable[[str], str] = input
    prompt: Prompt | None = None
    out: TextIO = field(default_factory=lambda: sys.stdout)
    err: TextIO = field(default_factory=lambda: sys.stderr)
    today: Callable[[], date] = date.today

    def __post_init__(self) -> None:
        if self.prompt is None:
            self.prompt = partial(prompt_choice, read=self.read_line, out=self.out)

    def print(self, message: str = "") -> None:
        print(message, file=self.out)

    def error(self, message: str) -> None:
        print(message, file=self.err)


def _connect(ctx: CommandContext) -> TasksClient:
    credential = ctx.store.ensure_fresh(ctx.store.load())
    return ctx.make_client(credential)


def _ask(ctx: CommandContext, label: str) -> str:
    try:
        return ctx.read_line(label).strip()
    except (EOFError, KeyboardInterrupt) as e:
        ctx.print()
        raise SelectionAborted() from e


def _choose_task_list(ctx: CommandContext, client: TasksClient) -> TaskList | None:
    task_lists = client.list_task_lists()
    if not task_lists:
        ctx.print("No task lists found.")
        return None

    ctx.print("Choose a Tasklist:")
    index = choose([tl.title for tl in task_lists], ctx.prompt, "Select Tasklist")
    return task_lists[index]


def _choose_pending_task(
    ctx: CommandContext, client: TasksClient, tasklist: TaskList
) -> Task | None:
    tasks = client.list_tasks(tasklist.id, include_completed=False)
    if not tasks:
        ctx.print(f"No pending tasks in {tasklist.title}.")
        return None

    ctx.print(f"Tasks in {tasklist.title}:")
    index = choose([t.title for t in tasks], ctx.prompt, "Select Task")
    return tasks[index]


def _run(ctx: CommandContext, action: str, body: Callable[[TasksClient], int]) -> int:
    """Run a command body, translating failures into messages and exit codes."""
    try:
        return body(_connect(ctx))
    except SelectionAborted:
        logger.debug(f"Selection cancelled while trying to {action}")
        return 0
    except GoogleAuthError as e:
        ctx.error(f"Error: {e}")
        ctx.error("Run 'gtasks login' to authorize again.")
        return 1
    except InvalidDateError as e:
        ctx.error(f"Error: {e}")
        return 1
    except TasksAPIError as e:
        ctx.error(f"Unable to {action}: {e}")
        return 1


def list_task_lists(ctx: CommandContext) -> int:
    """Print the task lists in server order."""

    def body(client: TasksClient) -> int:
        task_lists = client.list_task_lists()
        if not task_lists:
            ctx.print("No task lists found.")
            return 0
        for number, tasklist in enumerate(task_lists, start=1):
            ctx.print(f"[{number}] {tasklist.title}")
        return 0

    return _run(ctx, "list task lists", body)


def view_tasks(ctx: CommandContext, include_completed: bool = False) -> int:
    """Show the tasks of a chosen task list."""

    def body(client: TasksClient) -> int:
        tasklist = _choose_task_list(ctx, client)
        if tasklist is None:
            return 0

        tasks = client.list_tasks(tasklist.id, include_completed=include_completed)
        ctx.print(f"Tasks in {tasklist.title}:")
        if not tasks:
            ctx.print("No tasks.")
            return 0
        ctx.print(format_task_table(tasks))
        return 0

    return _run(ctx, "list tasks", body)


def add_task(ctx: CommandContext) -> int:
    """Create a task in a chosen task list from prompted fields."""

    def body(client: TasksClient) -> int:
        tasklist = _choose_task_list(ctx, client)
        if tasklist is None:
            return 0

        ctx.print(f"Creating task in {tasklist.title}")
        title = _ask(ctx, "Title: ")
        notes = _ask(ctx, "Note: ")
        due = parse_due_input(_ask(ctx, f"Due Date ({INPUT_FORMAT}): "), today=ctx.today())

        created = client.create_task(tasklist.id, Task(title=title, notes=notes, due=due))
        logger.info(f"Created task {created.id} in list {tasklist.id}")
        ctx.print("Task created")
        return 0

    return _run(ctx, "create task", body)


def complete_task(ctx: CommandContext) -> int:
    """Mark a chosen pending task as completed."""

    def body(client: TasksClient) -> int:
        tasklist = _choose_task_list(ctx, client)
        if tasklist is None:
            return 0
        task = _choose_pending_task(ctx, client, tasklist)
        if task is None:
            return 0

        client.update_task(tasklist.id, task.completed())
        ctx.print(f"Marked as complete: {task.title}")
        return 0

    return _run(ctx, "mark task as completed", body)


def remove_task(ctx: CommandContext) -> int:
    """Delete a chosen pending task."""

    def body(client: TasksClient) -> int:
        tasklist = _choose_task_list(ctx, client)
        if tasklist is None:
            return 0
        task = _choose_pending_task(ctx, client, tasklist)
        if task is None:
            return 0

        client.delete_task(tasklist.id, task.id)
        ctx.print(f"Deleted: {task.title}")
        return 0

    return _run(ctx, "delete task", body)

"""Google Tasks API client.

Usage:
    from gtasks.google import CredentialStore, build_tasks_service
    from gtasks.tasks import Task, TasksClient

    credential = store.ensure_fresh(store.load())
    client = TasksClient(build_tasks_service(credential))

    # List task lists
    lists = client.list_task_lists()

    # List pending tasks in the first list
    tasks = client.list_tasks(lists[0].id)

    # Create a task
    task = client.create_task(lists[0].id, Task(title="Review PR"))
"""

from __future__ import annotations

from gtasks.tasks.client import Task, TaskList, TasksClient, TaskStatus
from gtasks.tasks.exceptions import TasksAPIError

__all__ = ["TasksClient", "Task", "TaskList", "TaskStatus", "TasksAPIError"]

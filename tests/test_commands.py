"""Tests for the view, add, done and rm commands."""

from __future__ import annotations

import io
from datetime import date

import pytest

from gtasks import commands
from gtasks.google import CredentialStore
from gtasks.selector import SelectionAborted
from gtasks.tasks import Task, TaskList, TaskStatus

from .fakes import FakeTasksClient

GROCERIES = TaskList(id="l1", title="Groceries")
WORK = TaskList(id="l2", title="Work")


def pick(*indexes):
    """Prompt that answers with the given 0-based indexes in turn."""
    answers = list(indexes)
    seen = []

    def prompt(label, items):
        seen.append((label, list(items)))
        answer = answers.pop(0)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    prompt.seen = seen
    return prompt


def lines(*answers):
    replies = list(answers)
    return lambda _label: replies.pop(0)


@pytest.fixture
def fake():
    return FakeTasksClient(
        task_lists=[GROCERIES, WORK],
        tasks={
            "l1": [
                Task(id="g1", title="Milk", status=TaskStatus.COMPLETED),
                Task(id="g2", title="Eggs", notes="a dozen", due=date(2099, 5, 13)),
            ],
            "l2": [Task(id="w1", title="Report")],
        },
    )


@pytest.fixture
def make_ctx(write_token, fake):
    """Build a CommandContext over a fresh stored token and the fake client."""

    def _make(prompt=None, read_line=None, store=None):
        built = []

        def make_client(credential):
            built.append(credential)
            return fake

        ctx = commands.CommandContext(
            store=store or CredentialStore(write_token()),
            make_client=make_client,
            prompt=prompt or pick(0),
            read_line=read_line or lines(),
            out=io.StringIO(),
            err=io.StringIO(),
            today=lambda: date(2026, 10, 19),
        )
        ctx.built = built
        return ctx

    return _make


class TestView:
    """Test viewing tasks."""

    def test_single_pending_task_without_due_date(self, make_ctx):
        """Should render exactly one row with 'No Due Date' for the Work list."""
        ctx = make_ctx(prompt=pick(1))

        assert commands.view_tasks(ctx, include_completed=False) == 0

        output = ctx.out.getvalue()
        rows = [line for line in output.splitlines() if line.startswith("| 1 ")]
        assert len(rows) == 1
        assert "Report" in rows[0]
        assert "No Due Date" in rows[0]
        assert "| 2 " not in output
        assert "Tasks in Work:" in output

    def test_lists_offered_in_server_order(self, make_ctx):
        prompt = pick(0)
        commands.view_tasks(make_ctx(prompt=prompt))
        assert prompt.seen == [("Select Tasklist", ["Groceries", "Work"])]

    def test_hides_completed_by_default(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(0))
        commands.view_tasks(ctx)
        output = ctx.out.getvalue()
        assert "Milk" not in output
        assert "Eggs" in output
        assert "13 May 2099" in output
        assert fake.list_calls == [("l1", False)]

    def test_include_completed(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(0))
        commands.view_tasks(ctx, include_completed=True)
        output = ctx.out.getvalue()
        assert "Milk" in output
        assert "✔" in output
        assert fake.list_calls == [("l1", True)]

    def test_no_task_lists(self, make_ctx, fake):
        """Should report an empty account instead of prompting."""
        fake.task_lists = []
        prompt = pick()
        ctx = make_ctx(prompt=prompt)

        assert commands.view_tasks(ctx) == 0
        assert "No task lists found." in ctx.out.getvalue()
        assert prompt.seen == []

    def test_empty_task_list(self, make_ctx, fake):
        fake.tasks["l2"] = []
        ctx = make_ctx(prompt=pick(1))
        assert commands.view_tasks(ctx) == 0
        assert "No tasks." in ctx.out.getvalue()

    def test_cancelled_selection_is_silent(self, make_ctx):
        ctx = make_ctx(prompt=pick(SelectionAborted()))
        assert commands.view_tasks(ctx) == 0
        assert ctx.err.getvalue() == ""

    def test_missing_list_reports_failure(self, make_ctx, fake):
        fake.task_lists = [TaskList(id="gone", title="Gone")]
        ctx = make_ctx(prompt=pick(0))
        assert commands.view_tasks(ctx) == 1
        assert "Unable to list tasks" in ctx.err.getvalue()


class TestAuth:
    """Test credential handling shared by every command."""

    def test_missing_token_is_fatal(self, make_ctx, tmp_path):
        ctx = make_ctx(store=CredentialStore(tmp_path / "absent.json"))

        assert commands.view_tasks(ctx) == 1
        assert "gtasks login" in ctx.err.getvalue()
        assert ctx.built == []

    def test_client_built_from_loaded_credential(self, make_ctx):
        ctx = make_ctx()
        commands.list_task_lists(ctx)
        assert [c.access_token for c in ctx.built] == ["test-access-token"]


class TestAdd:
    """Test adding tasks."""

    def test_creates_task_with_due_date(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(1), read_line=lines("Write summary", "for Monday", "13/05/2099"))

        assert commands.add_task(ctx) == 0

        assert fake.created == [
            ("l2", Task(title="Write summary", notes="for Monday", due=date(2099, 5, 13)))
        ]
        assert "Task created" in ctx.out.getvalue()

    def test_blank_due_date(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(0), read_line=lines("Bread", "", ""))
        assert commands.add_task(ctx) == 0
        assert fake.created[0][1].due is None

    def test_invalid_date_never_creates(self, make_ctx, fake):
        """Should fail validation for month 13 without calling create."""
        ctx = make_ctx(prompt=pick(1), read_line=lines("Report", "", "05/13/2099"))

        assert commands.add_task(ctx) == 1

        assert fake.created == []
        assert "Invalid date" in ctx.err.getvalue()

    def test_past_year_never_creates(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(1), read_line=lines("Report", "", "01/01/2020"))
        assert commands.add_task(ctx) == 1
        assert fake.created == []

    def test_end_of_input_cancels(self, make_ctx, fake):
        def closed(_label):
            raise EOFError

        ctx = make_ctx(prompt=pick(0), read_line=closed)
        assert commands.add_task(ctx) == 0
        assert fake.created == []


class TestDone:
    """Test completing tasks."""

    def test_marks_chosen_task_completed(self, make_ctx, fake):
        prompt = pick(0, 0)
        ctx = make_ctx(prompt=prompt)

        assert commands.complete_task(ctx) == 0

        (tasklist_id, task), = fake.updated
        assert tasklist_id == "l1"
        assert task.id == "g2"
        assert task.status is TaskStatus.COMPLETED
        assert prompt.seen[1] == ("Select Task", ["Eggs"])
        assert "Marked as complete: Eggs" in ctx.out.getvalue()

    def test_only_pending_tasks_offered(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(0, 0))
        commands.complete_task(ctx)
        assert fake.list_calls == [("l1", False)]

    def test_nothing_pending(self, make_ctx, fake):
        fake.tasks["l1"] = [Task(id="g1", title="Milk", status=TaskStatus.COMPLETED)]
        ctx = make_ctx(prompt=pick(0))
        assert commands.complete_task(ctx) == 0
        assert "No pending tasks in Groceries." in ctx.out.getvalue()
        assert fake.updated == []


class TestRemove:
    """Test removing tasks."""

    def test_deletes_without_touching_status(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(1, 0))

        assert commands.remove_task(ctx) == 0

        assert fake.deleted == [("l2", "w1")]
        assert fake.updated == []
        assert "Deleted: Report" in ctx.out.getvalue()

    def test_already_deleted_task_reports_failure(self, make_ctx, fake):
        """Should report a not-found error on a task deleted elsewhere."""
        stale = Task(id="w9", title="Old report")
        fake.tasks["l2"] = [stale]
        original_delete = fake.delete_task

        def delete_elsewhere_first(tasklist_id, task_id):
            fake.tasks["l2"] = []
            return original_delete(tasklist_id, task_id)

        fake.delete_task = delete_elsewhere_first
        ctx = make_ctx(prompt=pick(1, 0))

        assert commands.remove_task(ctx) == 1
        assert "Unable to delete task" in ctx.err.getvalue()
        assert "Not Found" in ctx.err.getvalue()

    def test_cancelled_task_choice(self, make_ctx, fake):
        ctx = make_ctx(prompt=pick(1, SelectionAborted()))
        assert commands.remove_task(ctx) == 0
        assert fake.deleted == []


class TestLists:
    def test_prints_numbered_lists(self, make_ctx):
        ctx = make_ctx()
        assert commands.list_task_lists(ctx) == 0
        assert ctx.out.getvalue().splitlines() == ["[1] Groceries", "[2] Work"]

"""Tests for task completion classification."""

from datetime import timedelta

import pytest

from legate.core.readiness.categories import classify_task_completion, score_tasks
from legate.core.readiness.types import TaskStatus


@pytest.mark.parametrize(
    "task",
    [
        {"completed": True},
        {"is_complete": True},
        {"isComplete": True},
        {"status": "COMPLETED"},
        {"status": " done "},
        {"completed_at": "2025-01-01T00:00:00Z"},
        {"completedAt": "2025-01-01"},
    ],
)
def test_completion_markers(task, now):
    assert classify_task_completion(task, now) is TaskStatus.COMPLETED


def test_completed_wins_over_past_due(now):
    task = {"status": "done", "due_date": (now - timedelta(days=30)).isoformat()}

    assert classify_task_completion(task, now) is TaskStatus.COMPLETED


def test_past_due_is_overdue(now):
    task = {"completed": False, "due_date": (now - timedelta(minutes=1)).isoformat()}

    assert classify_task_completion(task, now) is TaskStatus.OVERDUE


def test_future_due_is_pending(now):
    task = {"due_date": (now + timedelta(days=1)).isoformat()}

    assert classify_task_completion(task, now) is TaskStatus.PENDING


@pytest.mark.parametrize("due", [None, "", "not-a-date", 12345])
def test_unparseable_due_date_is_pending(due, now):
    assert classify_task_completion({"due_date": due}, now) is TaskStatus.PENDING


def test_truthy_non_boolean_completed_is_not_completed(now):
    # Only a literal True counts for the boolean flags
    assert classify_task_completion({"completed": "yes"}, now) is TaskStatus.PENDING


def test_naive_due_date_treated_as_utc(now):
    naive = (now - timedelta(hours=2)).replace(tzinfo=None)

    assert classify_task_completion({"due_date": naive}, now) is TaskStatus.OVERDUE


def test_camel_case_flag_checked_when_snake_case_is_false(now):
    task = {"is_complete": False, "isComplete": True}

    assert classify_task_completion(task, now) is TaskStatus.COMPLETED


def test_naive_now_is_read_as_utc(now):
    naive_now = now.replace(tzinfo=None)
    task = {"due_date": (now - timedelta(hours=1)).isoformat()}

    assert classify_task_completion(task, naive_now) is TaskStatus.OVERDUE
    assert classify_task_completion({"dueDate": (now + timedelta(hours=1)).isoformat()}, naive_now) is TaskStatus.PENDING


def test_score_tasks_accepts_naive_now(now):
    naive_now = now.replace(tzinfo=None)
    tasks = [{"completed": True}, {"due_date": (now - timedelta(days=1)).isoformat()}]

    result = score_tasks(tasks, now=naive_now)

    # round(0.5 * 25) = 13, minus 5 for one overdue task
    assert result.score == 8
    assert result.at_risk[0].label == "1 task is overdue"

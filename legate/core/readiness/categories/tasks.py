"""Tasks category scoring (25 points).

Key question: "Is the administration work moving, and is anything late?"

Score is the completion ratio scaled to 25, minus a flat overdue penalty:
5 points for 1-2 overdue tasks, 10 points for 3 or more (the 10 replaces
the 5). The penalty does not scale with estate size.
"""

from datetime import UTC, datetime
from typing import Optional

from legate.core.readiness.records import parse_datetime, record_value, round_half_up
from legate.core.readiness.types import (
    CATEGORY_MAX_POINTS,
    CategoryResult,
    ReadinessSignal,
    TaskStatus,
)

COMPLETED_STATUSES = {"completed", "done"}

OVERDUE_PENALTY = 5
HEAVY_OVERDUE_PENALTY = 10
HEAVY_OVERDUE_THRESHOLD = 3


def classify_task_completion(task: dict, now: datetime) -> TaskStatus:
    """
    Classify a task record.

    Precedence:
    1. COMPLETED if any of: `completed` is True, `is_complete` is True,
       `status` is "completed"/"done" (case-insensitive), `completed_at` is set
    2. OVERDUE if not completed and a parseable `due_date` is before `now`
    3. PENDING otherwise (including unparseable or missing due dates)

    Args:
        task: Task record (snake_case or camelCase fields)
        now: Reference time; naive values are read as UTC

    Returns:
        TaskStatus
    """
    if _is_completed(task):
        return TaskStatus.COMPLETED

    now = parse_datetime(now) or datetime.now(UTC)

    due = parse_datetime(record_value(task, "due_date", "dueDate"))
    if due is not None and due < now:
        return TaskStatus.OVERDUE

    return TaskStatus.PENDING


def score_tasks(tasks: list[dict], now: Optional[datetime] = None) -> CategoryResult:
    """
    Score the Tasks category.

    Args:
        tasks: Task records
        now: Reference time for overdue checks (defaults to current UTC time)

    Returns:
        CategoryResult with score, raw counters and signals
    """
    max_points = CATEGORY_MAX_POINTS["tasks"]
    now = parse_datetime(now) or datetime.now(UTC)
    total = len(tasks)

    if total == 0:
        return CategoryResult(
            score=0,
            raw={
                "total_tasks": 0,
                "completed_tasks": 0,
                "incomplete_tasks": 0,
                "overdue_tasks": 0,
            },
            missing=[
                ReadinessSignal(
                    key="no_tasks",
                    label="Create your first tasks",
                    reason="Start with inventory, notify banks, secure property, and track deadlines.",
                    severity="medium",
                    count=1,
                )
            ],
        )

    statuses = [classify_task_completion(t, now) for t in tasks]
    completed = statuses.count(TaskStatus.COMPLETED)
    overdue = statuses.count(TaskStatus.OVERDUE)

    score = round_half_up((completed / total) * max_points)
    if overdue >= HEAVY_OVERDUE_THRESHOLD:
        score -= HEAVY_OVERDUE_PENALTY
    elif overdue >= 1:
        score -= OVERDUE_PENALTY
    score = max(score, 0)

    at_risk: list[ReadinessSignal] = []
    if overdue > 0:
        label = "1 task is overdue" if overdue == 1 else f"{overdue} tasks are overdue"
        at_risk.append(
            ReadinessSignal(
                key="tasksOverdue",
                label=label,
                severity="high" if overdue >= HEAVY_OVERDUE_THRESHOLD else "medium",
            )
        )

    return CategoryResult(
        score=score,
        raw={
            "total_tasks": total,
            "completed_tasks": completed,
            "incomplete_tasks": total - completed,
            "overdue_tasks": overdue,
        },
        at_risk=at_risk,
    )


def _is_completed(task: dict) -> bool:
    if record_value(task, "completed") is True:
        return True
    if any(record_value(task, name) is True for name in ("is_complete", "isComplete")):
        return True

    status = record_value(task, "status")
    if isinstance(status, str) and status.strip().lower() in COMPLETED_STATUSES:
        return True

    return bool(record_value(task, "completed_at", "completedAt"))

"""Plan diffing against a previous plan snapshot.

Step identity is the step `id` only. A step whose title or severity changed
but kept its id is the same step; a step with a new id is a new step even
if its title matches an old one.
"""

from typing import Optional

from legate.core.readiness.types import (
    PlanDiff,
    PlanSnapshot,
    PlanStepSnapshot,
    ReadinessPlan,
    SeverityChange,
    severity_rank,
)


def snapshot_from_plan(plan: ReadinessPlan) -> PlanSnapshot:
    """Project a plan to the lighter snapshot kept for future diffs."""
    return PlanSnapshot(
        estate_id=plan.estate_id,
        generated_at=plan.generated_at,
        steps=[
            PlanStepSnapshot(
                id=step.id,
                title=step.title,
                severity=step.severity,
                href=step.href,
                kind=step.kind,
            )
            for step in plan.steps
        ],
    )


def _by_severity_then_title(step: PlanStepSnapshot) -> tuple:
    return (-severity_rank(step.severity), step.title.casefold(), step.title)


def diff_plans(
    current: Optional[ReadinessPlan],
    previous: Optional[PlanSnapshot],
) -> PlanDiff:
    """
    Compare the current plan with the previous snapshot.

    Args:
        current: Newly generated plan, or None when no plan is loaded yet
        previous: Snapshot of the prior plan, or None on first generation

    Returns:
        PlanDiff with added, removed (resolved) and severity-changed steps
    """
    if current is None:
        return PlanDiff(has_previous=previous is not None)

    current_steps = snapshot_from_plan(current).steps
    previous_steps = previous.steps if previous is not None else []

    current_by_id = {step.id: step for step in current_steps}
    previous_by_id = {step.id: step for step in previous_steps}

    added: list[PlanStepSnapshot] = []
    severity_changed: list[SeverityChange] = []

    for step in current_steps:
        before = previous_by_id.get(step.id)
        if before is None:
            added.append(step)
        elif before.severity != step.severity:
            severity_changed.append(
                SeverityChange(
                    id=step.id,
                    title=step.title,
                    from_severity=before.severity,
                    to=step.severity,
                    href=step.href,
                )
            )

    # Steps that dropped out of the plan were resolved since the last one
    removed = [step for step in previous_steps if step.id not in current_by_id]

    added.sort(key=_by_severity_then_title)
    removed.sort(key=_by_severity_then_title)
    severity_changed.sort(key=lambda c: (-severity_rank(c.to), c.title.casefold(), c.title))

    return PlanDiff(
        has_previous=previous is not None,
        added=added,
        removed=removed,
        severity_changed=severity_changed,
        total_changes=len(added) + len(removed) + len(severity_changed),
    )

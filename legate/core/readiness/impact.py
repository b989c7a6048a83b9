"""Impact estimation and ranking of plan steps.

Each step gets a rough "how many readiness points would this move" estimate
and a priority used to order the plan for display:

    priority = severity*100 + new*20 + increased*10 + module_boost*6
               + kind*5 + min(9, count)

The module boost favours steps that land on the same pages as the estate's
most urgent current signals.
"""

from typing import Optional

from legate.core.readiness.signals import rank_top_actions
from legate.core.readiness.types import (
    ActionModule,
    ImpactEstimate,
    PlanDiff,
    PlanStep,
    RankedPlanStep,
    ReadinessPlan,
    ReadinessResult,
    kind_rank,
    severity_rank,
)

# =============================================================================
# Module Inference
# =============================================================================

DEFAULT_MODULE: ActionModule = "documents"

HREF_MODULES: list[tuple[str, ActionModule]] = [
    ("/documents", "documents"),
    ("/tasks", "tasks"),
    ("/properties", "properties"),
    ("/contacts", "contacts"),
    ("/invoices", "invoices"),
]

TITLE_KEYWORDS: list[tuple[ActionModule, tuple[str, ...]]] = [
    ("documents", ("document", "upload", "will", "trust")),
    ("tasks", ("task", "checklist", "todo")),
    ("properties", ("property", "home", "house", "deed")),
    ("contacts", ("contact", "beneficiar", "heir", "attorney", "lawyer")),
    ("invoices", ("invoice", "expense", "bill", "payment", "finance")),
]

SIGNAL_KEY_KEYWORDS: list[tuple[ActionModule, tuple[str, ...]]] = [
    ("documents", ("document", "docs")),
    ("tasks", ("task",)),
    ("properties", ("property", "properties")),
    ("contacts", ("contact",)),
    ("invoices", ("invoice", "expense", "finance")),
]

SEVERITY_BASE_POINTS = {"high": 8, "medium": 5, "low": 3}
KIND_BOOST_POINTS = {"missing": 2, "risk": 1, "general": 0}

MIN_SCORE_DELTA = 1
MAX_SCORE_DELTA = 15


def module_for_title(title: str) -> ActionModule:
    t = title.lower()
    for module, keywords in TITLE_KEYWORDS:
        if any(word in t for word in keywords):
            return module
    return DEFAULT_MODULE


def infer_step_module(step: PlanStep) -> ActionModule:
    """Map a step to the estate page it acts on: href first, then title keywords."""
    href = (step.href or "").lower()
    for fragment, module in HREF_MODULES:
        if fragment in href:
            return module
    return module_for_title(step.title)


def module_for_signal_key(key: str) -> ActionModule:
    k = key.lower()
    for module, keywords in SIGNAL_KEY_KEYWORDS:
        if any(word in k for word in keywords):
            return module
    return DEFAULT_MODULE


def preferred_modules(readiness: Optional[ReadinessResult], limit: int = 5) -> list[ActionModule]:
    """
    Modules of the estate's top-ranked signals, most urgent first, without repeats.

    Args:
        readiness: Current readiness (None yields no preference)
        limit: Number of top signals considered

    Returns:
        Ordered, de-duplicated module list
    """
    if readiness is None:
        return []

    ranked = rank_top_actions(readiness.signals.missing, readiness.signals.at_risk)[:limit]

    modules: list[ActionModule] = []
    for action in ranked:
        module = module_for_signal_key(action.signal.key)
        if module not in modules:
            modules.append(module)
    return modules


# =============================================================================
# Impact Estimation
# =============================================================================


def _count_boost(count: int) -> int:
    if count >= 10:
        return 3
    if count >= 5:
        return 2
    if count >= 2:
        return 1
    return 0


def estimate_impact(
    step: PlanStep,
    *,
    is_new: bool = False,
    severity_delta_up: bool = False,
    preferred_module_index: Optional[int] = None,
) -> ImpactEstimate:
    """
    Estimate how much completing a step would raise the readiness score.

    The estimate is additive (severity base, kind, count, preferred module,
    novelty, severity increase) and clamped to [1, 15].

    Args:
        step: Plan step to estimate
        is_new: Step was not in the previous snapshot
        severity_delta_up: Step's severity rose since the previous snapshot
        preferred_module_index: Position of the step's module in the preferred
            module list, or None when it is not preferred

    Returns:
        ImpactEstimate
    """
    count = step.count or 0

    delta = SEVERITY_BASE_POINTS.get(step.severity, 0)
    delta += KIND_BOOST_POINTS.get(step.kind, 0)
    delta += _count_boost(count)
    if preferred_module_index is not None and preferred_module_index >= 0:
        delta += max(0, 2 - preferred_module_index)
    if is_new:
        delta += 1
    if severity_delta_up:
        delta += 1

    delta = max(MIN_SCORE_DELTA, min(MAX_SCORE_DELTA, delta))

    if step.kind == "general":
        confidence = "low"
    elif count > 1:
        confidence = "high"
    else:
        confidence = "medium"

    return ImpactEstimate(
        estimated_score_delta=delta,
        affected_signals=step.count,
        confidence=confidence,
    )


# =============================================================================
# Ranking
# =============================================================================


def ranked_plan_steps(
    plan: Optional[ReadinessPlan],
    diff: Optional[PlanDiff],
    preferred: list[ActionModule],
) -> list[RankedPlanStep]:
    """
    Order plan steps by priority, most important first.

    Ties are broken by severity, then kind, then title.

    Args:
        plan: Current plan (None yields an empty list)
        diff: Diff against the previous snapshot; novelty and severity
            increases only count when it has a previous side
        preferred: Preferred module ordering from `preferred_modules`

    Returns:
        List of RankedPlanStep
    """
    if plan is None:
        return []

    added_ids: set[str] = set()
    increased_ids: set[str] = set()
    if diff is not None and diff.has_previous:
        added_ids = {s.id for s in diff.added}
        increased_ids = {
            c.id for c in diff.severity_changed
            if severity_rank(c.to) > severity_rank(c.from_severity)
        }

    ranked: list[RankedPlanStep] = []
    for step in plan.steps:
        module = infer_step_module(step)
        module_index = preferred.index(module) if module in preferred else None
        module_boost = max(0, 5 - module_index) if module_index is not None else 0

        is_new = step.id in added_ids
        increased = step.id in increased_ids

        priority = (
            severity_rank(step.severity) * 100
            + (20 if is_new else 0)
            + (10 if increased else 0)
            + module_boost * 6
            + kind_rank(step.kind) * 5
            + min(9, step.count or 0)
        )

        ranked.append(
            RankedPlanStep(
                step=step,
                module=module,
                priority=priority,
                is_new=is_new,
                severity_increased=increased,
                impact=estimate_impact(
                    step,
                    is_new=is_new,
                    severity_delta_up=increased,
                    preferred_module_index=module_index,
                ),
            )
        )

    ranked.sort(
        key=lambda r: (
            -r.priority,
            -severity_rank(r.step.severity),
            -kind_rank(r.step.kind),
            r.step.title,
        )
    )
    return ranked

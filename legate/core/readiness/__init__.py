"""Estate readiness scoring system.

Scores an estate's records across 5 categories (100 points total):
- Documents (30): Legal, banking and property paperwork on file
- Tasks (25): Completion ratio, with an overdue penalty
- Properties (15): Always full credit
- Contacts (15): At least one contact recorded
- Finances (15): At least one invoice or expense recorded

Also builds rule-based plans from the resulting signals, diffs plans
against previous snapshots, and ranks plan steps by estimated impact.

Usage:
    from legate.core.readiness import compute_readiness, diff_plans

    result = compute_readiness(documents, tasks, properties, contacts, invoices, expenses)
    print(f"Readiness: {result.score}/100")
"""

from legate.core.readiness.impact import (
    estimate_impact,
    infer_step_module,
    module_for_signal_key,
    preferred_modules,
    ranked_plan_steps,
)
from legate.core.readiness.plan_builder import (
    build_plan_from_readiness,
    normalize_cached_plan,
    step_href_for_signal,
)
from legate.core.readiness.plan_diff import diff_plans, snapshot_from_plan
from legate.core.readiness.score import compute_readiness, get_estate_readiness
from legate.core.readiness.signals import hash_signals, rank_signals, rank_top_actions
from legate.core.readiness.snapshots import (
    KeyValueSnapshotStore,
    SnapshotStore,
    SnapshotStoreError,
    load_previous_snapshot,
    record_generated_plan,
)
from legate.core.readiness.staleness import (
    AutoPlanGuard,
    AutoRefreshGuard,
    is_fresh_within_ttl,
    is_plan_outdated,
    is_plan_stale,
)
from legate.core.readiness.types import (
    CATEGORY_MAX_POINTS,
    HEURISTIC_GENERATOR,
    ImpactEstimate,
    PlanDiff,
    PlanSnapshot,
    PlanStep,
    RankedPlanStep,
    ReadinessPlan,
    ReadinessResult,
    ReadinessSignal,
)

__all__ = [
    "compute_readiness",
    "get_estate_readiness",
    "build_plan_from_readiness",
    "normalize_cached_plan",
    "step_href_for_signal",
    "diff_plans",
    "snapshot_from_plan",
    "estimate_impact",
    "infer_step_module",
    "module_for_signal_key",
    "preferred_modules",
    "ranked_plan_steps",
    "hash_signals",
    "rank_signals",
    "rank_top_actions",
    "KeyValueSnapshotStore",
    "SnapshotStore",
    "SnapshotStoreError",
    "load_previous_snapshot",
    "record_generated_plan",
    "AutoPlanGuard",
    "AutoRefreshGuard",
    "is_fresh_within_ttl",
    "is_plan_outdated",
    "is_plan_stale",
    "ReadinessResult",
    "ReadinessSignal",
    "ReadinessPlan",
    "PlanStep",
    "PlanSnapshot",
    "PlanDiff",
    "ImpactEstimate",
    "RankedPlanStep",
    "CATEGORY_MAX_POINTS",
    "HEURISTIC_GENERATOR",
]

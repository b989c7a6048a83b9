"""Signal ordering and fingerprinting.

The scorer emits signals in category order. Presentation layers and the
plan generator want them ranked by urgency instead, and the plan cache needs
a stable fingerprint of the signal set.
"""

import hashlib
import json
from typing import NamedTuple

from legate.core.readiness.types import (
    ReadinessResult,
    ReadinessSignal,
    ReadinessSignals,
    StepKind,
    severity_rank,
)


class ActionSignal(NamedTuple):
    """A signal tagged with the kind of plan step it would become."""

    signal: ReadinessSignal
    kind: StepKind


def rank_signals(signals: list[ReadinessSignal]) -> list[ReadinessSignal]:
    """Sort by severity (desc), count (desc), then label."""
    return sorted(
        signals,
        key=lambda s: (-severity_rank(s.severity), -(s.count or 0), s.label.casefold(), s.label),
    )


def rank_top_actions(
    missing: list[ReadinessSignal],
    at_risk: list[ReadinessSignal],
) -> list[ActionSignal]:
    """
    Merge missing and at-risk signals into one action list.

    Ordering: severity (desc), count (desc), missing before risk, then label.
    """
    merged = [ActionSignal(s, "missing") for s in missing]
    merged += [ActionSignal(s, "risk") for s in at_risk]

    return sorted(
        merged,
        key=lambda a: (
            -severity_rank(a.signal.severity),
            -(a.signal.count or 0),
            0 if a.kind == "missing" else 1,
            a.signal.label.casefold(),
            a.signal.label,
        ),
    )


def top_actions(readiness: ReadinessResult, limit: int = 5) -> list[ActionSignal]:
    return rank_top_actions(readiness.signals.missing, readiness.signals.at_risk)[:limit]


def order_readiness_signals(readiness: ReadinessResult) -> ReadinessResult:
    """Copy of `readiness` with both signal lists ranked for display."""
    return readiness.model_copy(
        update={
            "signals": ReadinessSignals(
                missing=rank_signals(readiness.signals.missing),
                at_risk=rank_signals(readiness.signals.at_risk),
            )
        }
    )


def hash_signals(signals: ReadinessSignals) -> str:
    """Stable sha256 of a signal set (order-insensitive; sorted by key)."""
    stable = {
        "missing": [s.to_wire() for s in sorted(signals.missing, key=lambda s: s.key)],
        "atRisk": [s.to_wire() for s in sorted(signals.at_risk, key=lambda s: s.key)],
    }
    payload = json.dumps(stable, separators=(",", ":"), sort_keys=True)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

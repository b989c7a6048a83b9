"""Rule-based readiness plan generation and plan normalization.

Turns readiness signals into a short, prioritized list of next steps, and
repairs plans read back from storage or returned by an LLM so every step
has a usable id, href, kind and severity.
"""

import hashlib
import re
from datetime import UTC, datetime
from typing import Any, Optional
from urllib.parse import quote

from legate.core.logging import get_logger
from legate.core.readiness.records import record_value
from legate.core.readiness.signals import rank_top_actions
from legate.core.readiness.types import (
    HEURISTIC_GENERATOR,
    PlanMeta,
    PlanStep,
    ReadinessPlan,
    ReadinessResult,
)

logger = get_logger(__name__)

DEFAULT_MAX_STEPS = 5

VALID_KINDS = ("missing", "risk", "general")
VALID_SEVERITIES = ("low", "medium", "high")

_MISSING_KEY_MARKERS = ("missing_", "_missing", "no_", "none_", "empty_", "requires_", "need_")


def estate_base_path(estate_id: str) -> str:
    return f"/app/estates/{quote(str(estate_id), safe='')}"


def looks_missing_key(key: str) -> bool:
    """Whether a signal key describes something absent (vs. something at risk)."""
    k = key.lower()
    return k.startswith("missing") or any(marker in k for marker in _MISSING_KEY_MARKERS)


def step_href_for_signal(estate_id: str, signal_key: str) -> str:
    """
    Route a signal key to the estate page that fixes it.

    Missing-looking keys jump to the page's "add" anchor.
    """
    key = signal_key.lower()
    base = estate_base_path(estate_id)
    is_missing = looks_missing_key(key)

    if "document" in key or key.startswith("docs"):
        return f"{base}/documents#add-document" if is_missing else f"{base}/documents"
    if "task" in key:
        return f"{base}/tasks#add-task" if is_missing else f"{base}/tasks"
    if "property" in key or key.startswith("properties"):
        return f"{base}/properties#add-property" if is_missing else f"{base}/properties"
    if "contact" in key:
        return f"{base}/contacts#add-contact" if is_missing else f"{base}/contacts"
    if "invoice" in key:
        return f"{base}/invoices#add-invoice" if is_missing else f"{base}/invoices"
    # Expenses live on the invoices page
    if "expense" in key:
        return f"{base}/invoices#add-expense"
    if "finance" in key:
        return f"{base}/invoices#add-invoice" if is_missing else f"{base}/invoices"

    # Documents usually improve readiness fastest
    return f"{base}/documents#add-document" if is_missing else f"{base}/documents"


def normalize_title(value: Any) -> str:
    """Collapse whitespace and drop trailing punctuation; never empty."""
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        return "Next step"
    collapsed = re.sub(r"\s+", " ", text)
    return re.sub(r"[\s.:;-]+$", "", collapsed) or "Next step"


def normalize_details(value: Any) -> Optional[str]:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        return None
    text = re.sub(r"[ \t]+\n", "\n", text)
    return re.sub(r"\n{3,}", "\n\n", text)


def build_plan_from_readiness(
    estate_id: str,
    readiness: ReadinessResult,
    *,
    now: Optional[datetime] = None,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> ReadinessPlan:
    """
    Build a rule-based plan from readiness signals.

    Steps are the top-ranked signals (severity, count, missing before risk,
    label). Step ids are the signal keys, so the same gap keeps the same id
    across regenerations. With no signals, two general review steps are
    returned.

    Args:
        estate_id: Estate identifier
        readiness: Current readiness result
        now: Generation time (defaults to current UTC time)
        max_steps: Maximum number of signal-derived steps

    Returns:
        ReadinessPlan generated by "heuristic-v1"
    """
    ranked = rank_top_actions(readiness.signals.missing, readiness.signals.at_risk)

    steps = [
        PlanStep(
            id=action.signal.key,
            title=normalize_title(action.signal.label),
            details=normalize_details(action.signal.reason),
            href=step_href_for_signal(estate_id, action.signal.key),
            kind=action.kind,
            severity=action.signal.severity,
            count=action.signal.count,
        )
        for action in ranked[:max_steps]
    ]

    if not steps:
        steps = [
            PlanStep(
                id="general:review-documents",
                title="Review your document index",
                details="Confirm you have court letters, IDs, banking statements, and property docs recorded.",
                href=step_href_for_signal(estate_id, "documents"),
                kind="general",
                severity="low",
            ),
            PlanStep(
                id="general:review-tasks",
                title="Confirm your next deadlines",
                details="Make sure key tasks are created and assigned: inventory, notices, and property security.",
                href=step_href_for_signal(estate_id, "tasks"),
                kind="general",
                severity="low",
            ),
        ]

    generated_at = (now or datetime.now(UTC)).isoformat()
    return ReadinessPlan(
        estate_id=str(estate_id),
        generated_at=generated_at,
        generator=HEURISTIC_GENERATOR,
        steps=steps,
    )


def has_plan_shape(raw: Any) -> bool:
    """Whether a stored value looks like a serialized plan."""
    if not isinstance(raw, dict):
        return False
    return (
        isinstance(record_value(raw, "estateId", "estate_id"), str)
        and isinstance(record_value(raw, "generatedAt", "generated_at"), str)
        and isinstance(raw.get("generator"), str)
        and isinstance(raw.get("steps"), list)
    )


def normalize_step(estate_id: str, raw: Any, index: int, id_prefix: str) -> PlanStep:
    """
    Repair one loosely-shaped step.

    Unknown kinds become "general", unknown severities "medium"; a missing
    href is inferred from the title and a missing id derived from the title hash.
    """
    step = raw if isinstance(raw, dict) else {}

    title = normalize_title(step.get("title"))
    details = normalize_details(step.get("details"))

    href = step.get("href")
    if not isinstance(href, str) or not href.strip():
        href = step_href_for_signal(estate_id, title)

    kind = step.get("kind") if step.get("kind") in VALID_KINDS else "general"
    severity = step.get("severity") if step.get("severity") in VALID_SEVERITIES else "medium"

    count = step.get("count")
    count = int(count) if isinstance(count, (int, float)) and not isinstance(count, bool) else None

    step_id = step.get("id")
    if not isinstance(step_id, str) or not step_id.strip():
        digest = hashlib.sha1(title.encode("utf-8")).hexdigest()[:8]
        step_id = f"{id_prefix}:{index}:{digest}"

    return PlanStep(
        id=step_id,
        title=title,
        details=details,
        href=href,
        kind=kind,
        severity=severity,
        count=count,
    )


def normalize_cached_plan(estate_id: str, raw: Any) -> Optional[ReadinessPlan]:
    """
    Rebuild a plan read back from the estate row.

    The requested estate id always wins over the stored one.

    Returns:
        ReadinessPlan, or None if `raw` is not a dict
    """
    if not isinstance(raw, dict):
        return None

    generated_at = record_value(raw, "generatedAt", "generated_at")
    if not isinstance(generated_at, str) or not generated_at.strip():
        generated_at = datetime.now(UTC).isoformat()

    generator = raw.get("generator")
    if not isinstance(generator, str) or not generator.strip():
        generator = "unknown"

    steps_raw = raw.get("steps") if isinstance(raw.get("steps"), list) else []
    steps = [normalize_step(estate_id, s, idx, "cached") for idx, s in enumerate(steps_raw)]

    meta = None
    if isinstance(raw.get("meta"), dict):
        try:
            meta = PlanMeta.model_validate(raw["meta"])
        except ValueError:
            logger.debug(f"Dropping unreadable plan meta for estate {estate_id}")

    return ReadinessPlan(
        estate_id=str(estate_id),
        generated_at=generated_at,
        generator=generator,
        steps=steps,
        meta=meta,
    )

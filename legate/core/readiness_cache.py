"""Cached readiness summaries and readiness plans on the estates table.

The readiness score itself is always computed fresh. Two derived values are
cached on the estate row:

1. `readiness_summary` - score and signal counts for list badges, written
   whenever readiness is computed through the API
2. `readiness_plan` - the last generated plan, reused while it is within the
   TTL and the readiness signals it was built from have not changed
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from legate.chains.generate_readiness_plan import generate_plan_with_ai
from legate.core.config import Settings
from legate.core.logging import get_logger
from legate.core.readiness.plan_builder import (
    build_plan_from_readiness,
    has_plan_shape,
    normalize_cached_plan,
)
from legate.core.readiness.score import get_estate_readiness
from legate.core.readiness.signals import hash_signals
from legate.core.readiness.staleness import is_fresh_within_ttl
from legate.core.readiness.types import PlanMeta, ReadinessPlan, ReadinessResult
from legate.db import estates as estates_db
from legate.db.estate_records import EstateRecordsRepository

logger = get_logger(__name__)


def update_readiness_summary(estate_id: UUID, readiness: ReadinessResult) -> bool:
    """
    Persist the readiness summary for list badges.

    Failures are logged and swallowed; the caller still serves the live result.

    Args:
        estate_id: Estate UUID
        readiness: Freshly computed readiness

    Returns:
        True if the summary was written
    """
    try:
        estates_db.update_readiness_summary(
            estate_id,
            score=readiness.score,
            missing_count=len(readiness.signals.missing),
            at_risk_count=len(readiness.signals.at_risk),
        )
        logger.debug(
            f"Updated readiness summary for estate {estate_id}: {readiness.score}/100",
            extra={"estate_id": str(estate_id)},
        )
        return True

    except Exception as e:
        logger.warning(
            f"Failed to persist readiness summary for {estate_id}, serving live result: {e}",
            extra={"estate_id": str(estate_id)},
        )
        return False


def invalidate_readiness_summary(estate_id: UUID) -> None:
    """
    Clear an estate's readiness summary so list views stop showing it.

    Call this when estate records change outside the readiness endpoint.

    Args:
        estate_id: Estate UUID
    """
    try:
        estates_db.clear_readiness_summary(estate_id)
        logger.debug(f"Invalidated readiness summary for estate {estate_id}")

    except Exception as e:
        logger.error(f"Failed to invalidate readiness summary for {estate_id}: {e}")
        # Don't raise - this is a non-critical operation


def update_all_readiness_summaries(
    repository: EstateRecordsRepository,
    status: Optional[str] = None,
) -> dict:
    """
    Recompute and persist readiness summaries for every estate.

    Args:
        repository: Records repository used for scoring
        status: Optional estate status filter

    Returns:
        Dict with count of updated estates and any errors
    """
    estate_ids = estates_db.list_estate_ids(status=status)
    updated = 0
    errors = []

    for estate_id in estate_ids:
        try:
            readiness = get_estate_readiness(estate_id, repository)
            if update_readiness_summary(estate_id, readiness):
                updated += 1
            else:
                errors.append({"estate_id": str(estate_id), "error": "summary write failed"})
        except Exception as e:
            errors.append({"estate_id": str(estate_id), "error": str(e)})

    logger.info(
        f"Bulk updated readiness summaries: {updated} estates, {len(errors)} errors",
        extra={"extra_data": {"updated": updated, "errors": len(errors)}},
    )

    return {"updated": updated, "errors": errors}


def load_reusable_plan(
    estate_id: UUID,
    repository: EstateRecordsRepository,
    settings: Settings,
    *,
    now: Optional[datetime] = None,
) -> tuple[Optional[ReadinessPlan], Optional[ReadinessResult]]:
    """
    Return the stored plan if it can be served as-is.

    A stored plan is reused when it has a plan shape, is within the TTL and,
    if it carries an input hash, that hash matches the current signals.

    Returns:
        (plan, readiness) where plan is None on a miss; readiness is set when
        it had to be computed for the hash check, so the caller can reuse it
    """
    stored = estates_db.get_readiness_plan(estate_id)
    if not has_plan_shape(stored):
        return None, None

    ttl = timedelta(hours=settings.READINESS_PLAN_TTL_HOURS)
    generated_at = stored.get("generatedAt", stored.get("generated_at"))
    if not is_fresh_within_ttl(generated_at, now, ttl):
        logger.debug(f"Stored plan for estate {estate_id} is past its TTL")
        return None, None

    meta = stored.get("meta") if isinstance(stored.get("meta"), dict) else {}
    cached_hash = meta.get("inputHash", meta.get("input_hash"))
    if not isinstance(cached_hash, str):
        return normalize_cached_plan(str(estate_id), stored), None

    readiness = get_estate_readiness(estate_id, repository, now=now)
    if hash_signals(readiness.signals) != cached_hash:
        logger.info(
            f"Readiness inputs changed since the stored plan for estate {estate_id}",
            extra={"estate_id": str(estate_id)},
        )
        return None, readiness

    return normalize_cached_plan(str(estate_id), stored), readiness


def get_or_generate_plan(
    estate_id: UUID,
    repository: EstateRecordsRepository,
    settings: Settings,
    *,
    refresh: bool = False,
    now: Optional[datetime] = None,
) -> ReadinessPlan:
    """
    Serve the estate's readiness plan, regenerating it when needed.

    Generation tries the LLM first and falls back to the rule-based plan.
    The new plan is stored on the estate row with a `meta` block holding the
    input hash and the signals it was built from.

    Args:
        estate_id: Estate UUID
        repository: Records repository used for scoring
        settings: Application settings
        refresh: Skip the stored plan and always regenerate
        now: Reference time for TTL and overdue checks

    Returns:
        ReadinessPlan
    """
    readiness = None

    if not refresh:
        cached, readiness = load_reusable_plan(estate_id, repository, settings, now=now)
        if cached is not None:
            logger.info(
                f"Reusing stored readiness plan for estate {estate_id}",
                extra={"estate_id": str(estate_id)},
            )
            return cached

    if readiness is None:
        readiness = get_estate_readiness(estate_id, repository, now=now)

    plan = generate_plan_with_ai(str(estate_id), readiness, settings)
    if plan is None:
        plan = build_plan_from_readiness(
            str(estate_id),
            readiness,
            now=now,
            max_steps=settings.READINESS_PLAN_MAX_STEPS,
        )

    plan = plan.model_copy(
        update={
            "meta": PlanMeta(
                input_hash=hash_signals(readiness.signals),
                signals=readiness.signals,
            )
        }
    )

    estates_db.save_readiness_plan(estate_id, plan.to_wire())

    logger.info(
        f"Generated readiness plan for estate {estate_id} with {plan.generator}",
        extra={
            "estate_id": str(estate_id),
            "extra_data": {"steps": len(plan.steps), "refresh": refresh},
        },
    )
    return plan

"""Main readiness score computation.

This module orchestrates the readiness scoring by:
1. Running each category scorer over in-memory records
2. Summing category scores (capped at 100)
3. Concatenating signals in category emission order

`compute_readiness` is pure. `get_estate_readiness` adds the fetch step
through an injected records repository.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional
from uuid import UUID

from legate.core.logging import get_logger
from legate.core.readiness.categories import (
    score_contacts,
    score_documents,
    score_finances,
    score_properties,
    score_tasks,
)
from legate.core.readiness.types import (
    CATEGORY_MAX_POINTS,
    MAX_READINESS_SCORE,
    CategoryScore,
    ReadinessBreakdown,
    ReadinessRaw,
    ReadinessResult,
    ReadinessSignals,
)
from legate.db.estate_records import EstateRecordsRepository

logger = get_logger(__name__)


def compute_readiness(
    documents: Iterable[dict],
    tasks: Iterable[dict],
    properties: Iterable,
    contacts: Iterable,
    invoices: Iterable,
    expenses: Iterable,
    *,
    now: Optional[datetime] = None,
) -> ReadinessResult:
    """
    Compute the readiness score for one estate's records.

    Never raises for empty collections or unexpected record shapes; every
    category degrades to a defined signal instead.

    Args:
        documents: Document records
        tasks: Task records
        properties: Property records (existence only)
        contacts: Contact records (existence only)
        invoices: Invoice records (existence only)
        expenses: Expense records (existence only)
        now: Reference time for overdue checks (defaults to current UTC time)

    Returns:
        ReadinessResult with score, breakdown, raw counters and signals
    """
    docs = score_documents(list(documents))
    task_result = score_tasks(list(tasks), now=now)
    props = score_properties(list(properties))
    people = score_contacts(list(contacts))
    money = score_finances(list(invoices), list(expenses))

    total = docs.score + task_result.score + props.score + people.score + money.score
    total = min(total, MAX_READINESS_SCORE)

    return ReadinessResult(
        score=total,
        breakdown=ReadinessBreakdown(
            documents=CategoryScore(score=docs.score, max=CATEGORY_MAX_POINTS["documents"]),
            tasks=CategoryScore(score=task_result.score, max=CATEGORY_MAX_POINTS["tasks"]),
            properties=CategoryScore(score=props.score, max=CATEGORY_MAX_POINTS["properties"]),
            contacts=CategoryScore(score=people.score, max=CATEGORY_MAX_POINTS["contacts"]),
            finances=CategoryScore(score=money.score, max=CATEGORY_MAX_POINTS["finances"]),
        ),
        raw=ReadinessRaw(**docs.raw, **task_result.raw, **props.raw, **people.raw, **money.raw),
        signals=ReadinessSignals(
            # Properties never emit a missing signal
            missing=[*docs.missing, *task_result.missing, *people.missing, *money.missing],
            at_risk=[
                *docs.at_risk,
                *task_result.at_risk,
                *props.at_risk,
                *people.at_risk,
                *money.at_risk,
            ],
        ),
    )


def get_estate_readiness(
    estate_id: UUID,
    repository: EstateRecordsRepository,
    *,
    now: Optional[datetime] = None,
) -> ReadinessResult:
    """
    Fetch an estate's records and compute its readiness.

    Always computed fresh from current state (no caching).

    Args:
        estate_id: Estate UUID (validated by the caller)
        repository: Data-access handle for the category collections
        now: Reference time for overdue checks

    Returns:
        ReadinessResult
    """
    records = repository.fetch_all(estate_id)

    result = compute_readiness(
        records.documents,
        records.tasks,
        records.properties,
        records.contacts,
        records.invoices,
        records.expenses,
        now=now,
    )

    logger.info(
        f"Computed readiness for estate {estate_id}: {result.score}/100",
        extra={
            "estate_id": str(estate_id),
            "extra_data": {
                "missing": len(result.signals.missing),
                "at_risk": len(result.signals.at_risk),
            },
        },
    )
    return result

"""Documents category scoring (30 points).

Key question: "Could we assemble a court packet today?"

Three document subjects are required. Each present subject earns an equal
share of the category; each missing one produces a "missing" signal.
"""

from legate.core.readiness.records import record_value, round_half_up
from legate.core.readiness.types import (
    CATEGORY_MAX_POINTS,
    CategoryResult,
    ReadinessSignal,
)

REQUIRED_DOCUMENT_SUBJECTS = ["LEGAL", "BANKING", "PROPERTY"]

DOCUMENT_SUBJECT_METADATA = {
    "LEGAL": {
        "short_label": "Legal docs",
        "label": "Legal documents",
        "examples": "Will/trust, Letters of Authority/Administration, court orders, attorney filings",
        "severity": "high",
    },
    "BANKING": {
        "short_label": "Banking docs",
        "label": "Banking information",
        "examples": "Account statements, beneficiary forms, bank correspondence, estate account setup docs",
        "severity": "medium",
    },
    "PROPERTY": {
        "short_label": "Property docs",
        "label": "Property ownership",
        "examples": "Deeds, titles, insurance, mortgage statements, tax bills, HOA docs",
        "severity": "medium",
    },
}

GENERIC_DOCUMENT_REASON = (
    "Add at least one document for this category so it's easy to assemble a court packet later."
)


def score_documents(documents: list[dict]) -> CategoryResult:
    """
    Score the Documents category.

    Args:
        documents: Document records carrying `subject_type`, `subject` or `type`

    Returns:
        CategoryResult with score, raw counters and missing signals
    """
    max_points = CATEGORY_MAX_POINTS["documents"]

    present: list[str] = []
    for doc in documents:
        subject = document_subject(doc)
        if subject and subject not in present:
            present.append(subject)

    missing_subjects = [s for s in REQUIRED_DOCUMENT_SUBJECTS if s not in present]

    score = 0
    if REQUIRED_DOCUMENT_SUBJECTS:
        points_per_subject = max_points / len(REQUIRED_DOCUMENT_SUBJECTS)
        count_present = len(REQUIRED_DOCUMENT_SUBJECTS) - len(missing_subjects)
        score = min(round_half_up(count_present * points_per_subject), max_points)

    return CategoryResult(
        score=score,
        raw={
            "total_documents": len(documents),
            "present_document_subjects": present,
            "missing_document_subjects": missing_subjects,
        },
        missing=[_missing_subject_signal(s) for s in missing_subjects],
    )


def document_subject(doc: dict) -> str | None:
    """Normalized (uppercase) subject of a document, if any."""
    for names in (("subject_type", "subjectType"), ("subject",), ("type",)):
        value = record_value(doc, *names)
        if isinstance(value, str) and value.strip():
            return value.strip().upper()
    return None


def _missing_subject_signal(subject: str) -> ReadinessSignal:
    key = f"missing_{subject.lower()}_documents"
    meta = DOCUMENT_SUBJECT_METADATA.get(subject)

    if meta:
        return ReadinessSignal(
            key=key,
            label=f"Add {meta['label']}",
            reason=meta["examples"],
            severity=meta["severity"],
            count=1,
        )

    return ReadinessSignal(
        key=key,
        label=f"Add {subject.capitalize()} documents",
        reason=GENERIC_DOCUMENT_REASON,
        severity="medium",
        count=1,
    )

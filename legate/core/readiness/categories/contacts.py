"""Contacts category scoring (15 points, all or nothing)."""

from legate.core.readiness.types import CATEGORY_MAX_POINTS, CategoryResult, ReadinessSignal


def score_contacts(contacts: list) -> CategoryResult:
    """
    Score the Contacts category.

    Args:
        contacts: Contact records (only existence matters)

    Returns:
        CategoryResult; zero contacts yields 0 points and a high-severity signal
    """
    total = len(contacts)

    if total == 0:
        return CategoryResult(
            score=0,
            raw={"total_contacts": 0},
            missing=[
                ReadinessSignal(
                    key="no_contacts",
                    label="Add key contacts",
                    reason="Add heirs, attorneys, banks, creditors, and vendors so you can link tasks and payments.",
                    severity="high",
                    count=1,
                )
            ],
        )

    return CategoryResult(score=CATEGORY_MAX_POINTS["contacts"], raw={"total_contacts": total})

"""Finances category scoring (15 points, all or nothing).

Any invoice or expense counts as financial record-keeping having started.
"""

from legate.core.readiness.types import CATEGORY_MAX_POINTS, CategoryResult, ReadinessSignal


def score_finances(invoices: list, expenses: list) -> CategoryResult:
    total_invoices = len(invoices)
    total_expenses = len(expenses)
    raw = {"total_invoices": total_invoices, "total_expenses": total_expenses}

    if total_invoices + total_expenses == 0:
        return CategoryResult(
            score=0,
            raw=raw,
            missing=[
                ReadinessSignal(
                    key="no_finances",
                    label="Add an invoice or expense",
                    reason="Track bills, reimbursements, and estate payments so your final accounting is faster.",
                    severity="medium",
                    count=1,
                )
            ],
        )

    return CategoryResult(score=CATEGORY_MAX_POINTS["finances"], raw=raw)

"""Properties category scoring (15 points).

Owning property is optional for an estate, so a zero-property estate keeps
full points and no signal is raised.
"""

from legate.core.readiness.types import CATEGORY_MAX_POINTS, CategoryResult


def score_properties(properties: list) -> CategoryResult:
    return CategoryResult(
        score=CATEGORY_MAX_POINTS["properties"],
        raw={"total_properties": len(properties)},
    )

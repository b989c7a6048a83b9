"""Readiness category scorers."""

from legate.core.readiness.categories.contacts import score_contacts
from legate.core.readiness.categories.documents import score_documents
from legate.core.readiness.categories.finances import score_finances
from legate.core.readiness.categories.properties import score_properties
from legate.core.readiness.categories.tasks import classify_task_completion, score_tasks

__all__ = [
    "score_documents",
    "score_tasks",
    "score_properties",
    "score_contacts",
    "score_finances",
    "classify_task_completion",
]

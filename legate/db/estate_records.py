"""Read access to the per-estate category collections used for readiness.

The repository wraps an explicitly constructed Supabase client so callers
(routes, scripts, tests) decide which handle is used.
"""

from dataclasses import dataclass, field
from uuid import UUID

from supabase import Client

from legate.core.logging import get_logger
from legate.db.supabase_client import get_supabase, select_for_estate

logger = get_logger(__name__)

# table -> minimal column projection needed for scoring
DOCUMENTS_TABLE = "estate_documents"
TASKS_TABLE = "estate_tasks"
PROPERTIES_TABLE = "estate_properties"
CONTACTS_TABLE = "contacts"
INVOICES_TABLE = "invoices"
EXPENSES_TABLE = "expenses"

DOCUMENT_COLUMNS = "id, subject, subject_type, type"
TASK_COLUMNS = "id, completed, is_complete, status, completed_at, due_date"


@dataclass
class EstateRecords:
    """The six collections the readiness scorer consumes."""

    documents: list[dict] = field(default_factory=list)
    tasks: list[dict] = field(default_factory=list)
    properties: list[dict] = field(default_factory=list)
    contacts: list[dict] = field(default_factory=list)
    invoices: list[dict] = field(default_factory=list)
    expenses: list[dict] = field(default_factory=list)


class EstateRecordsRepository:
    """Fetches estate-scoped rows with the smallest projection that scoring needs."""

    def __init__(self, client: Client):
        self.client = client

    def list_documents(self, estate_id: UUID) -> list[dict]:
        return self._select(DOCUMENTS_TABLE, estate_id, DOCUMENT_COLUMNS)

    def list_tasks(self, estate_id: UUID) -> list[dict]:
        return self._select(TASKS_TABLE, estate_id, TASK_COLUMNS)

    def list_properties(self, estate_id: UUID) -> list[dict]:
        return self._select(PROPERTIES_TABLE, estate_id, "id")

    def list_contacts(self, estate_id: UUID) -> list[dict]:
        return self._select(CONTACTS_TABLE, estate_id, "id")

    def list_invoices(self, estate_id: UUID) -> list[dict]:
        return self._select(INVOICES_TABLE, estate_id, "id")

    def list_expenses(self, estate_id: UUID) -> list[dict]:
        return self._select(EXPENSES_TABLE, estate_id, "id")

    def fetch_all(self, estate_id: UUID) -> EstateRecords:
        """
        Fetch every collection needed for readiness scoring.

        Args:
            estate_id: Estate UUID

        Returns:
            EstateRecords with all six collections
        """
        records = EstateRecords(
            documents=self.list_documents(estate_id),
            tasks=self.list_tasks(estate_id),
            properties=self.list_properties(estate_id),
            contacts=self.list_contacts(estate_id),
            invoices=self.list_invoices(estate_id),
            expenses=self.list_expenses(estate_id),
        )

        logger.debug(
            f"Fetched readiness records for estate {estate_id}: "
            f"docs={len(records.documents)}, tasks={len(records.tasks)}, "
            f"properties={len(records.properties)}, contacts={len(records.contacts)}, "
            f"invoices={len(records.invoices)}, expenses={len(records.expenses)}"
        )
        return records

    def _select(self, table: str, estate_id: UUID, columns: str) -> list[dict]:
        return select_for_estate(self.client, table, estate_id, columns)


def get_estate_records_repository() -> EstateRecordsRepository:
    """FastAPI dependency for the records repository."""
    return EstateRecordsRepository(get_supabase())

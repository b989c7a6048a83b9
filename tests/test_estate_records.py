"""Tests for the estate records repository with a mocked Supabase client."""

import uuid
from unittest.mock import MagicMock

from legate.db.estate_records import EstateRecordsRepository

ESTATE_ID = uuid.UUID("7d3f0a52-2a4e-4a7c-9f3b-0c2a6a1f5e11")


def make_client(rows_by_table):
    client = MagicMock()

    def table(name):
        query = MagicMock()
        query.select.return_value.eq.return_value.execute.return_value = MagicMock(
            data=rows_by_table.get(name)
        )
        return query

    client.table.side_effect = table
    return client


def test_fetch_all_reads_every_collection():
    client = make_client({
        "estate_documents": [{"id": "d1", "subject": "LEGAL"}],
        "estate_tasks": [{"id": "t1", "completed": True}],
        "contacts": [{"id": "c1"}],
        "expenses": [{"id": "e1"}],
    })

    records = EstateRecordsRepository(client).fetch_all(ESTATE_ID)

    assert records.documents == [{"id": "d1", "subject": "LEGAL"}]
    assert records.tasks == [{"id": "t1", "completed": True}]
    assert records.properties == []
    assert records.contacts == [{"id": "c1"}]
    assert records.invoices == []
    assert records.expenses == [{"id": "e1"}]

    queried = [c.args[0] for c in client.table.call_args_list]
    assert queried == [
        "estate_documents",
        "estate_tasks",
        "estate_properties",
        "contacts",
        "invoices",
        "expenses",
    ]


def test_queries_are_scoped_to_the_estate():
    client = MagicMock()
    query = client.table.return_value
    query.select.return_value.eq.return_value.execute.return_value = MagicMock(data=None)

    assert EstateRecordsRepository(client).list_tasks(ESTATE_ID) == []

    query.select.assert_called_once_with("id, completed, is_complete, status, completed_at, due_date")
    query.select.return_value.eq.assert_called_once_with("estate_id", str(ESTATE_ID))

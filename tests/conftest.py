"""Pytest configuration and fixtures."""

import os
from datetime import UTC, datetime

import pytest


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-key"
    os.environ["OPENAI_API_KEY"] = "test-openai-key"
    os.environ["LEGATE_ENV"] = "test"


@pytest.fixture
def now():
    return datetime(2025, 6, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def complete_records():
    """Records for an estate with every category satisfied."""
    return {
        "documents": [
            {"subject": "legal"},
            {"subject_type": "BANKING"},
            {"type": "Property"},
        ],
        "tasks": [
            {"completed": True},
            {"status": "Done"},
        ],
        "properties": [{"id": "p1"}],
        "contacts": [{"id": "c1"}],
        "invoices": [{"id": "i1"}],
        "expenses": [],
    }

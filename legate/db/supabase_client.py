"""Supabase client and estate-scoped query helpers."""

from functools import lru_cache
from uuid import UUID

from supabase import Client, create_client

from legate.core.config import get_settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """
    Service-role Supabase client shared by the data-access modules.

    Raises:
        RuntimeError: If the URL or key is empty, or the client cannot be built
    """
    settings = get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

    try:
        return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e


def select_for_estate(client: Client, table: str, estate_id: UUID, columns: str) -> list[dict]:
    """Rows of `table` belonging to one estate, projected to `columns`."""
    result = (
        client.table(table)
        .select(columns)
        .eq("estate_id", str(estate_id))
        .execute()
    )
    return result.data or []

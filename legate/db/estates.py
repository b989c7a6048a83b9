"""Database operations for estates (access, cached plan, readiness summary)."""

from datetime import UTC, datetime
from typing import Any, Optional
from uuid import UUID

from legate.core.logging import get_logger
from legate.db.supabase_client import get_supabase

logger = get_logger(__name__)

ESTATES_TABLE = "estates"


def get_estate_access_row(estate_id: UUID) -> Optional[dict]:
    """Get the ownership fields of an estate (owner_id, collaborators)."""
    supabase = get_supabase()
    result = (
        supabase.table(ESTATES_TABLE)
        .select("id, owner_id, collaborators")
        .eq("id", str(estate_id))
        .limit(1)
        .execute()
    )
    return result.data[0] if result.data else None


def get_readiness_plan(estate_id: UUID) -> Optional[dict]:
    """Get the plan cached on the estate row, if any."""
    supabase = get_supabase()
    result = (
        supabase.table(ESTATES_TABLE)
        .select("readiness_plan")
        .eq("id", str(estate_id))
        .limit(1)
        .execute()
    )
    if not result.data:
        return None
    return result.data[0].get("readiness_plan")


def save_readiness_plan(estate_id: UUID, plan: dict[str, Any]) -> None:
    """Persist a generated plan (wire format) on the estate row."""
    supabase = get_supabase()
    supabase.table(ESTATES_TABLE).update({"readiness_plan": plan}).eq(
        "id", str(estate_id)
    ).execute()


def update_readiness_summary(
    estate_id: UUID,
    score: int,
    missing_count: int,
    at_risk_count: int,
) -> None:
    """Persist the lightweight readiness summary used by list badges."""
    supabase = get_supabase()
    supabase.table(ESTATES_TABLE).update({
        "readiness_summary": {
            "score": score,
            "missing_count": missing_count,
            "at_risk_count": at_risk_count,
            "updated_at": datetime.now(UTC).isoformat(),
        },
    }).eq("id", str(estate_id)).execute()


def clear_readiness_summary(estate_id: UUID) -> None:
    supabase = get_supabase()
    supabase.table(ESTATES_TABLE).update({"readiness_summary": None}).eq(
        "id", str(estate_id)
    ).execute()


def list_estate_ids(status: Optional[str] = None) -> list[UUID]:
    """List estate ids, optionally filtered by status."""
    supabase = get_supabase()
    query = supabase.table(ESTATES_TABLE).select("id")
    if status:
        query = query.eq("status", status)
    result = query.execute()
    return [UUID(row["id"]) for row in result.data or []]

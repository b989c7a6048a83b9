"""API endpoints for estate readiness scoring and readiness plans."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from legate.core.auth_middleware import AuthContext, get_current_user
from legate.core.config import Settings, get_settings
from legate.core.estate_access import (
    EstateAccessDeniedError,
    EstateNotFoundError,
    InvalidEstateIdError,
    parse_estate_id,
    require_estate_access,
)
from legate.core.logging import get_logger
from legate.core.readiness.score import get_estate_readiness
from legate.core.readiness.signals import order_readiness_signals
from legate.core.readiness_cache import get_or_generate_plan, update_readiness_summary
from legate.db.estate_records import EstateRecordsRepository, get_estate_records_repository

logger = get_logger(__name__)

router = APIRouter()

NO_STORE_HEADERS = {"Cache-Control": "no-store"}


def _ok(**payload: Any) -> JSONResponse:
    return JSONResponse(content={"ok": True, **payload}, status_code=200, headers=NO_STORE_HEADERS)


def _error(status_code: int, code: str, message: Optional[str] = None) -> JSONResponse:
    content: dict[str, Any] = {"ok": False, "error": code}
    if message:
        content["message"] = message
    return JSONResponse(content=content, status_code=status_code, headers=NO_STORE_HEADERS)


def _error_for_exception(exc: Exception, estate_id: str, settings: Settings) -> JSONResponse:
    if isinstance(exc, EstateAccessDeniedError):
        return _error(403, "forbidden")
    if isinstance(exc, EstateNotFoundError):
        return _error(404, "not_found")

    logger.exception(f"Readiness request failed for estate {estate_id}")
    return _error(500, "server_error", str(exc) if settings.is_dev else None)


@router.get("/estates/{estate_id}/readiness")
async def get_readiness(
    estate_id: str,
    auth: Optional[AuthContext] = Depends(get_current_user),  # noqa: B008
    repository: EstateRecordsRepository = Depends(get_estate_records_repository),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> JSONResponse:
    """
    Compute an estate's readiness score.

    Always computed fresh. Signals are ordered by severity, count, then
    label, and a lightweight summary is written to the estate row.

    Args:
        estate_id: Estate UUID

    Returns:
        {ok: true, readiness} or {ok: false, error}
    """
    try:
        estate_uuid = parse_estate_id(estate_id)
    except InvalidEstateIdError:
        return _error(400, "invalid_estate_id")

    if auth is None:
        return _error(401, "unauthorized")

    try:
        require_estate_access(estate_uuid, auth.user_id)

        readiness = order_readiness_signals(get_estate_readiness(estate_uuid, repository))
        update_readiness_summary(estate_uuid, readiness)

        return _ok(readiness=readiness.to_wire())

    except Exception as e:
        return _error_for_exception(e, estate_id, settings)


@router.get("/estates/{estate_id}/readiness/plan")
async def get_readiness_plan(
    estate_id: str,
    refresh: bool = Query(False, description="Regenerate instead of reusing the stored plan"),
    auth: Optional[AuthContext] = Depends(get_current_user),  # noqa: B008
    repository: EstateRecordsRepository = Depends(get_estate_records_repository),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> JSONResponse:
    """
    Get the estate's readiness plan.

    Reuses the stored plan while it is fresh and its readiness inputs are
    unchanged. Pass refresh=1 to force regeneration.

    Args:
        estate_id: Estate UUID
        refresh: If true, skip the stored plan

    Returns:
        {ok: true, plan} or {ok: false, error}
    """
    try:
        estate_uuid = parse_estate_id(estate_id)
    except InvalidEstateIdError:
        return _error(400, "invalid_estate_id")

    if auth is None:
        return _error(401, "unauthorized")

    try:
        require_estate_access(estate_uuid, auth.user_id)

        plan = get_or_generate_plan(estate_uuid, repository, settings, refresh=refresh)

        return _ok(plan=plan.to_wire())

    except Exception as e:
        return _error_for_exception(e, estate_id, settings)

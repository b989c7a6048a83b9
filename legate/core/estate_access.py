"""Estate access checks: owner or collaborator, with a role."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from legate.core.logging import get_logger
from legate.core.readiness.records import record_value
from legate.db import estates as estates_db

logger = get_logger(__name__)


class InvalidEstateIdError(ValueError):
    """Raised when an estate id is not a well-formed UUID."""


class EstateNotFoundError(Exception):
    """Raised when the estate row does not exist."""


class EstateAccessDeniedError(Exception):
    """Raised when the user is neither owner nor collaborator."""


class EstateRole(str, Enum):
    OWNER = "OWNER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"


ROLE_RANK = {
    EstateRole.OWNER: 3,
    EstateRole.EDITOR: 2,
    EstateRole.VIEWER: 1,
}


def has_role(actual: EstateRole, at_least: EstateRole) -> bool:
    return ROLE_RANK[actual] >= ROLE_RANK[at_least]


def normalize_role(value: Any) -> EstateRole:
    """Unknown or missing collaborator roles read as VIEWER."""
    try:
        return EstateRole(str(value).upper())
    except ValueError:
        return EstateRole.VIEWER


@dataclass
class EstateAccess:
    estate_id: str
    user_id: str
    role: EstateRole
    is_owner: bool

    @property
    def can_edit(self) -> bool:
        return has_role(self.role, EstateRole.EDITOR)

    @property
    def can_view_sensitive(self) -> bool:
        # Owners only for now
        return self.role == EstateRole.OWNER


def parse_estate_id(value: Any) -> UUID:
    """
    Validate an estate id from a request path.

    Raises:
        InvalidEstateIdError: If `value` is empty or not a UUID
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidEstateIdError("Estate id is required")
    try:
        return UUID(value.strip())
    except ValueError as e:
        raise InvalidEstateIdError(f"Invalid estate id: {value!r}") from e


def resolve_access(row: dict, user_id: str) -> Optional[EstateAccess]:
    """Work out a user's access from an estate row (owner_id + collaborators)."""
    estate_id = str(row.get("id", ""))
    owner_id = record_value(row, "owner_id", "ownerId")

    if owner_id is not None and str(owner_id) == user_id:
        return EstateAccess(estate_id=estate_id, user_id=user_id, role=EstateRole.OWNER, is_owner=True)

    for collaborator in row.get("collaborators") or []:
        if not isinstance(collaborator, dict):
            continue
        collaborator_id = record_value(collaborator, "user_id", "userId")
        if collaborator_id is not None and str(collaborator_id) == user_id:
            return EstateAccess(
                estate_id=estate_id,
                user_id=user_id,
                role=normalize_role(collaborator.get("role")),
                is_owner=False,
            )

    return None


def get_estate_access(estate_id: UUID, user_id: str) -> Optional[EstateAccess]:
    """
    Look up a user's access to an estate.

    Returns:
        EstateAccess, or None when the user is not owner or collaborator

    Raises:
        EstateNotFoundError: If the estate does not exist
    """
    row = estates_db.get_estate_access_row(estate_id)
    if row is None:
        raise EstateNotFoundError(f"Estate {estate_id} not found")
    return resolve_access(row, str(user_id))


def require_estate_access(
    estate_id: UUID,
    user_id: str,
    at_least: EstateRole = EstateRole.VIEWER,
) -> EstateAccess:
    """
    Require that a user can see an estate with at least the given role.

    Raises:
        EstateNotFoundError: If the estate does not exist
        EstateAccessDeniedError: If access is missing or the role is too low
    """
    access = get_estate_access(estate_id, user_id)
    if access is None or not has_role(access.role, at_least):
        logger.info(
            f"Estate access denied for user {user_id}",
            extra={"estate_id": str(estate_id)},
        )
        raise EstateAccessDeniedError(f"User {user_id} cannot access estate {estate_id}")
    return access

"""Plan snapshot persistence for diffing.

Snapshots live in a string key/value store (a browser-like local storage,
a Redis hash, or a plain dict in tests). Keys are scoped by estate id so
diffs for one estate never see another estate's history.
"""

import json
from collections.abc import MutableMapping
from typing import Optional, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from legate.core.config import Settings
from legate.core.logging import get_logger
from legate.core.readiness.plan_diff import snapshot_from_plan
from legate.core.readiness.types import PlanSnapshot, ReadinessPlan

logger = get_logger(__name__)

DEFAULT_SNAPSHOT_PREFIX = "legatepro:readinessPlanSnapshot:"
DEFAULT_HISTORY_PREFIX = "legatepro:readinessPlanHistory:"
DEFAULT_HISTORY_LIMIT = 5


class SnapshotStoreError(Exception):
    """Raised when a snapshot cannot be written."""


class SnapshotStore(Protocol):
    """Storage seam between plan diffing and wherever snapshots are kept."""

    def get(self, estate_id: str) -> Optional[PlanSnapshot]: ...

    def put(self, estate_id: str, snapshot: PlanSnapshot) -> None: ...

    def history(self, estate_id: str) -> list[PlanSnapshot]: ...


class KeyValueSnapshotStore:
    """
    SnapshotStore over a MutableMapping[str, str].

    Keeps the latest snapshot under `prefix + estate_id` and a rolling,
    most-recent-first history under `history_prefix + estate_id`, capped at
    `history_limit` entries and deduplicated by `generated_at`.
    """

    def __init__(
        self,
        storage: MutableMapping[str, str],
        prefix: str = DEFAULT_SNAPSHOT_PREFIX,
        history_prefix: str = DEFAULT_HISTORY_PREFIX,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.storage = storage
        self.prefix = prefix
        self.history_prefix = history_prefix
        self.history_limit = max(1, history_limit)

    @classmethod
    def from_settings(cls, storage: MutableMapping[str, str], settings: Settings) -> "KeyValueSnapshotStore":
        return cls(
            storage,
            prefix=settings.PLAN_SNAPSHOT_STORAGE_PREFIX,
            history_prefix=settings.PLAN_HISTORY_STORAGE_PREFIX,
            history_limit=settings.PLAN_HISTORY_LIMIT,
        )

    def snapshot_key(self, estate_id: str) -> str:
        return f"{self.prefix}{quote(str(estate_id), safe='')}"

    def history_key(self, estate_id: str) -> str:
        return f"{self.history_prefix}{quote(str(estate_id), safe='')}"

    def get(self, estate_id: str) -> Optional[PlanSnapshot]:
        raw = self._read_json(self.snapshot_key(estate_id))
        return self._parse_snapshot(raw, estate_id)

    def history(self, estate_id: str) -> list[PlanSnapshot]:
        raw = self._read_json(self.history_key(estate_id))
        if not isinstance(raw, list):
            return []

        snapshots = []
        for entry in raw:
            snapshot = self._parse_snapshot(entry, estate_id)
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def put(self, estate_id: str, snapshot: PlanSnapshot) -> None:
        """
        Write the latest snapshot and rotate history.

        Raises:
            SnapshotStoreError: If the underlying storage rejects the write
        """
        rotated = [snapshot] + [
            s for s in self.history(estate_id) if s.generated_at != snapshot.generated_at
        ]
        rotated = rotated[: self.history_limit]

        try:
            self.storage[self.snapshot_key(estate_id)] = json.dumps(snapshot.to_wire())
            self.storage[self.history_key(estate_id)] = json.dumps([s.to_wire() for s in rotated])
        except Exception as e:
            logger.error(
                f"Failed to persist plan snapshot for estate {estate_id}: {e}",
                extra={"estate_id": str(estate_id)},
            )
            raise SnapshotStoreError(f"Failed to persist plan snapshot: {e}") from e

    def clear(self, estate_id: str) -> None:
        self.storage.pop(self.snapshot_key(estate_id), None)
        self.storage.pop(self.history_key(estate_id), None)

    def _read_json(self, key: str) -> object:
        text = self.storage.get(key)
        if not text:
            return None
        try:
            return json.loads(text)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Ignoring malformed snapshot data at {key}")
            return None

    @staticmethod
    def _parse_snapshot(raw: object, estate_id: str) -> Optional[PlanSnapshot]:
        if not isinstance(raw, dict):
            return None
        try:
            snapshot = PlanSnapshot.model_validate(raw)
        except ValidationError:
            return None
        # Never diff against another estate's plan
        if snapshot.estate_id != str(estate_id):
            return None
        return snapshot


def load_previous_snapshot(
    store: SnapshotStore,
    estate_id: str,
    current_generated_at: Optional[str] = None,
) -> Optional[PlanSnapshot]:
    """
    Most relevant previous snapshot for an estate.

    Walks history (most recent first), then the latest slot, skipping any
    snapshot of the plan version identified by `current_generated_at`. A
    cached plan served again on reload therefore still diffs against the
    version before it.
    """
    for snapshot in store.history(estate_id):
        if snapshot.generated_at != current_generated_at:
            return snapshot

    latest = store.get(estate_id)
    if latest is not None and latest.generated_at != current_generated_at:
        return latest
    return None


def record_generated_plan(store: SnapshotStore, plan: ReadinessPlan) -> Optional[PlanSnapshot]:
    """
    Store a freshly generated plan's snapshot.

    Only call this after generation succeeded, so a failed request never
    overwrites history.

    Args:
        store: Snapshot store
        plan: The plan that was just generated

    Returns:
        The snapshot that was "previous" before this write (None if none)

    Raises:
        SnapshotStoreError: If the write fails
    """
    previous = load_previous_snapshot(store, plan.estate_id, current_generated_at=plan.generated_at)
    store.put(plan.estate_id, snapshot_from_plan(plan))
    return previous

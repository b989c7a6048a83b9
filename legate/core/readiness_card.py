"""Readiness card controller.

Client-side state for an estate's readiness card: fetches readiness and
the plan from the API, keeps plan snapshots for diffing, and decides when
to auto-request or auto-refresh a plan.
"""

import asyncio
import contextlib
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal, Optional
from urllib.parse import quote

import httpx

from legate.core.logging import get_logger
from legate.core.readiness.impact import preferred_modules, ranked_plan_steps
from legate.core.readiness.plan_diff import diff_plans, snapshot_from_plan
from legate.core.readiness.signals import ActionSignal, top_actions
from legate.core.readiness.snapshots import (
    SnapshotStore,
    SnapshotStoreError,
    load_previous_snapshot,
)
from legate.core.readiness.staleness import (
    AutoPlanGuard,
    AutoRefreshGuard,
    is_plan_outdated,
    is_plan_stale,
)
from legate.core.readiness.types import (
    PlanDiff,
    PlanSnapshot,
    RankedPlanStep,
    ReadinessPlan,
    ReadinessResult,
)

logger = get_logger(__name__)

READINESS_UNAVAILABLE = "readiness_unavailable"
PLAN_UNAVAILABLE = "plan_unavailable"

PlanRequestReason = Literal["manual", "auto"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _error_code(data: Any, default: str) -> str:
    if isinstance(data, dict) and data.get("ok") is False and isinstance(data.get("error"), str):
        return data["error"]
    return default


class ReadinessCardController:
    """
    State holder for one estate's readiness card.

    Network failures never raise out of the load methods; they land in
    `error` / `plan_error` instead.
    """

    def __init__(
        self,
        estate_id: str,
        http_client: httpx.AsyncClient,
        snapshot_store: SnapshotStore,
        base_url: str = "",
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.estate_id = str(estate_id)
        self.http_client = http_client
        self.snapshot_store = snapshot_store
        self.base_url = base_url.rstrip("/")
        self.clock = clock

        # Readiness state
        self.readiness: Optional[ReadinessResult] = None
        self.error: Optional[str] = None
        self.loading = True
        self.is_refreshing = False
        self.last_updated_at: Optional[datetime] = None

        # Plan state
        self.plan: Optional[ReadinessPlan] = None
        self.plan_error: Optional[str] = None
        self.is_plan_loading = False
        self.is_plan_auto_refreshing = False
        self.previous_snapshot: Optional[PlanSnapshot] = None

        self._auto_plan_guard = AutoPlanGuard()
        self._auto_refresh_guard = AutoRefreshGuard()
        self._readiness_task: Optional[asyncio.Task] = None

    @property
    def readiness_url(self) -> str:
        return f"{self.base_url}/v1/estates/{quote(self.estate_id, safe='')}/readiness"

    @property
    def plan_url(self) -> str:
        return f"{self.readiness_url}/plan"

    # =========================================================================
    # Loading
    # =========================================================================

    async def load_readiness(self, silent: bool = False) -> None:
        """Fetch readiness. `silent` refreshes without the loading skeleton."""
        if not silent:
            self.loading = True
        self.is_refreshing = silent
        self.error = None

        try:
            response = await self.http_client.get(
                self.readiness_url, headers={"accept": "application/json"}
            )
            data = response.json()

            if not response.is_success or not isinstance(data, dict) or data.get("ok") is not True:
                self.readiness = None
                self.error = _error_code(data, READINESS_UNAVAILABLE)
                return

            payload = data.get("readiness", data.get("result"))
            self.readiness = ReadinessResult.model_validate(payload)
            self.last_updated_at = self.clock()

        except (httpx.HTTPError, ValueError) as e:
            logger.warning(
                f"Readiness fetch failed: {e}",
                extra={"estate_id": self.estate_id},
            )
            self.readiness = None
            self.error = str(e) or READINESS_UNAVAILABLE

        finally:
            if not silent:
                self.loading = False
            self.is_refreshing = False

    def start_readiness_fetch(self, silent: bool = False) -> asyncio.Task:
        """Run `load_readiness` as a task, replacing any fetch in flight."""
        if self._readiness_task is not None and not self._readiness_task.done():
            self._readiness_task.cancel()
        self._readiness_task = asyncio.create_task(self.load_readiness(silent=silent))
        return self._readiness_task

    async def cancel_readiness_fetch(self) -> None:
        task = self._readiness_task
        self._readiness_task = None
        if task is None or task.done():
            return
        task.cancel()
        # Cancellation is expected here (estate change or close)
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def load_plan(self, refresh: bool = False, reason: PlanRequestReason = "manual") -> None:
        """
        Fetch the plan and record its snapshot.

        The snapshot store is only touched after a plan was received, so a
        failed request leaves stored history as it was. A response that
        arrives after the card switched estates is dropped.
        """
        estate_id = self.estate_id
        self.is_plan_loading = True
        self.is_plan_auto_refreshing = reason == "auto"
        self.plan_error = None

        url = f"{self.plan_url}?refresh=1" if refresh else self.plan_url

        try:
            response = await self.http_client.get(url, headers={"accept": "application/json"})
            if self.estate_id != estate_id:
                logger.info(
                    "Dropping plan response for a previous estate",
                    extra={"estate_id": estate_id},
                )
                return

            data = response.json()

            if not response.is_success or not isinstance(data, dict) or data.get("ok") is False:
                self.plan = None
                self.plan_error = _error_code(data, PLAN_UNAVAILABLE)
                return

            if not data.get("plan"):
                self.plan = None
                self.plan_error = PLAN_UNAVAILABLE
                return

            plan = ReadinessPlan.model_validate(data["plan"])
            if plan.estate_id != estate_id:
                self.plan = None
                self.plan_error = PLAN_UNAVAILABLE
                return

            self.plan = plan
            self.previous_snapshot = load_previous_snapshot(
                self.snapshot_store, estate_id, current_generated_at=plan.generated_at
            )

            try:
                self.snapshot_store.put(estate_id, snapshot_from_plan(plan))
            except SnapshotStoreError as e:
                logger.warning(
                    f"Plan snapshot not saved: {e}",
                    extra={"estate_id": estate_id},
                )

        except (httpx.HTTPError, ValueError) as e:
            if self.estate_id != estate_id:
                return
            logger.warning(
                f"Plan fetch failed: {e}",
                extra={"estate_id": estate_id},
            )
            self.plan = None
            self.plan_error = str(e) or PLAN_UNAVAILABLE

        finally:
            if self.estate_id == estate_id:
                self.is_plan_loading = False
                self.is_plan_auto_refreshing = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> asyncio.Task:
        """Initial load: previous snapshot plus a readiness fetch."""
        self.previous_snapshot = load_previous_snapshot(self.snapshot_store, self.estate_id)
        return self.start_readiness_fetch()

    async def switch_estate(self, estate_id: str) -> asyncio.Task:
        """
        Point the card at another estate.

        Cancels the in-flight readiness fetch, clears plan state, resets the
        auto-plan guard and loads the new estate's previous snapshot. A plan
        request still in flight for the old estate is ignored when it lands.
        """
        await self.cancel_readiness_fetch()

        self.estate_id = str(estate_id)
        self.readiness = None
        self.error = None
        self.plan = None
        self.plan_error = None
        self.is_plan_loading = False
        self.is_plan_auto_refreshing = False
        self._auto_plan_guard.reset()

        return self.open()

    def on_focus(self) -> asyncio.Task:
        """Silent refresh when the view regains focus."""
        self.plan = None
        self.plan_error = None
        return self.start_readiness_fetch(silent=True)

    async def close(self) -> None:
        await self.cancel_readiness_fetch()

    # =========================================================================
    # Auto triggers
    # =========================================================================

    async def maybe_auto_plan(self) -> bool:
        """Request a plan once per estate after readiness has loaded."""
        if self.loading or self.readiness is None:
            return False
        if self.is_plan_loading or self.plan is not None:
            return False
        if not self._auto_plan_guard.try_acquire(self.estate_id):
            return False

        await self.load_plan(reason="auto")
        return True

    async def maybe_auto_refresh(self) -> bool:
        """Regenerate a stale plan once per plan version."""
        if self.plan is None or self.is_plan_loading:
            return False
        if not self.plan_is_stale:
            return False
        if not self._auto_refresh_guard.try_acquire(self.estate_id, self.plan.generated_at):
            return False

        await self.load_plan(refresh=True, reason="auto")
        return True

    # =========================================================================
    # Derived state
    # =========================================================================

    @property
    def score(self) -> int:
        if self.readiness is None:
            return 0
        return max(0, min(100, self.readiness.score))

    @property
    def plan_is_stale(self) -> bool:
        if self.plan is None:
            return False
        return is_plan_stale(self.plan.generated_at, self.clock())

    @property
    def plan_is_outdated(self) -> bool:
        if self.plan is None or self.last_updated_at is None:
            return False
        return is_plan_outdated(self.plan.generated_at, self.last_updated_at)

    @property
    def plan_diff(self) -> PlanDiff:
        return diff_plans(self.plan, self.previous_snapshot)

    @property
    def ranked_steps(self) -> list[RankedPlanStep]:
        return ranked_plan_steps(self.plan, self.plan_diff, preferred_modules(self.readiness))

    @property
    def top_actions(self) -> list[ActionSignal]:
        if self.readiness is None:
            return []
        return top_actions(self.readiness)

"""Plan staleness checks and auto-refresh guards.

A plan is *outdated* when readiness changed after it was generated, and
*stale* when it is older than the TTL. Both are advisory; the guards keep
automatic triggers from firing twice for the same plan version or estate.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Optional, Union

from legate.core.readiness.records import parse_datetime

PLAN_TTL = timedelta(hours=24)

Timestamp = Union[datetime, str, None]


def is_plan_outdated(plan_generated_at: Timestamp, readiness_updated_at: Timestamp) -> bool:
    """True when readiness was updated strictly after the plan was generated."""
    generated = parse_datetime(plan_generated_at)
    updated = parse_datetime(readiness_updated_at)
    if generated is None or updated is None:
        return False
    return updated > generated


def is_plan_stale(
    generated_at: Timestamp,
    now: Optional[datetime] = None,
    ttl: timedelta = PLAN_TTL,
) -> bool:
    """True when the plan is older than `ttl`. Unparseable timestamps are not stale."""
    generated = parse_datetime(generated_at)
    if generated is None:
        return False
    current = parse_datetime(now) if now is not None else datetime.now(UTC)
    return current - generated > ttl


def is_fresh_within_ttl(
    generated_at: Timestamp,
    now: Optional[datetime] = None,
    ttl: timedelta = PLAN_TTL,
) -> bool:
    """
    True when a cached plan may be reused: age is non-negative and at most `ttl`.

    Unlike `is_plan_stale`, an unparseable or future timestamp is never fresh.
    """
    generated = parse_datetime(generated_at)
    if generated is None:
        return False
    current = parse_datetime(now) if now is not None else datetime.now(UTC)
    age = current - generated
    return timedelta(0) <= age <= ttl


@dataclass
class AutoRefreshGuard:
    """Remembers the last plan version that was auto-refreshed."""

    last_key: Optional[tuple[str, str]] = None

    def should_refresh(self, estate_id: str, generated_at: str) -> bool:
        return self.last_key != (estate_id, generated_at)

    def mark(self, estate_id: str, generated_at: str) -> None:
        self.last_key = (estate_id, generated_at)

    def try_acquire(self, estate_id: str, generated_at: str) -> bool:
        """Mark and return True if this plan version was not handled yet."""
        if not self.should_refresh(estate_id, generated_at):
            return False
        self.mark(estate_id, generated_at)
        return True


@dataclass
class AutoPlanGuard:
    """Allows one automatic plan request per estate until the estate changes."""

    requested_for: Optional[str] = None

    def try_acquire(self, estate_id: str) -> bool:
        if self.requested_for == estate_id:
            return False
        self.requested_for = estate_id
        return True

    def reset(self) -> None:
        self.requested_for = None

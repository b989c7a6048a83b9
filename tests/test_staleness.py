"""Tests for plan staleness checks and auto-refresh guards."""

from datetime import timedelta

from legate.core.readiness import (
    AutoPlanGuard,
    AutoRefreshGuard,
    is_fresh_within_ttl,
    is_plan_outdated,
    is_plan_stale,
)


def test_outdated_only_when_strictly_newer(now):
    generated = now.isoformat()

    assert is_plan_outdated(generated, now + timedelta(seconds=1)) is True
    assert is_plan_outdated(generated, now) is False
    assert is_plan_outdated(generated, now - timedelta(minutes=5)) is False


def test_outdated_with_missing_timestamps(now):
    assert is_plan_outdated(None, now) is False
    assert is_plan_outdated(now, None) is False
    assert is_plan_outdated("garbage", now) is False


def test_stale_after_ttl(now):
    assert is_plan_stale((now - timedelta(hours=25)).isoformat(), now) is True
    assert is_plan_stale((now - timedelta(hours=23)).isoformat(), now) is False
    # Exactly at the TTL is not yet stale
    assert is_plan_stale((now - timedelta(hours=24)).isoformat(), now) is False


def test_stale_custom_ttl(now):
    generated = now - timedelta(minutes=10)

    assert is_plan_stale(generated, now, ttl=timedelta(minutes=5)) is True


def test_unparseable_generated_at_is_not_stale(now):
    assert is_plan_stale("not a date", now) is False


def test_fresh_within_ttl(now):
    assert is_fresh_within_ttl((now - timedelta(hours=24)).isoformat(), now) is True
    assert is_fresh_within_ttl((now - timedelta(hours=24, seconds=1)).isoformat(), now) is False
    assert is_fresh_within_ttl(None, now) is False
    assert is_fresh_within_ttl((now + timedelta(hours=1)).isoformat(), now) is False


def test_auto_refresh_guard_once_per_plan_version():
    guard = AutoRefreshGuard()

    assert guard.try_acquire("estate-1", "2025-06-14T00:00:00Z") is True
    assert guard.try_acquire("estate-1", "2025-06-14T00:00:00Z") is False
    # A new plan version may refresh again
    assert guard.try_acquire("estate-1", "2025-06-15T00:00:00Z") is True
    assert guard.try_acquire("estate-2", "2025-06-15T00:00:00Z") is True


def test_auto_plan_guard_resets_on_estate_change():
    guard = AutoPlanGuard()

    assert guard.try_acquire("estate-1") is True
    assert guard.try_acquire("estate-1") is False
    assert guard.try_acquire("estate-2") is True

    guard.reset()

    assert guard.try_acquire("estate-2") is True

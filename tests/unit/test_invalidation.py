# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the path invalidator."""

import pytest

from src.infrastructure.events import (
    DashboardPaths,
    InvalidationEvent,
    PathInvalidator,
    get_path_invalidator,
    reset_path_invalidator,
)


@pytest.fixture
def invalidator() -> PathInvalidator:
    return PathInvalidator()


class TestPathInvalidator:
    """Tests for PathInvalidator."""

    @pytest.mark.asyncio
    async def test_exact_subscription_receives_event(self, invalidator: PathInvalidator) -> None:
        received: list[InvalidationEvent] = []

        async def handler(event: InvalidationEvent) -> None:
            received.append(event)

        invalidator.subscribe(DashboardPaths.CLASSES, handler)
        scheduled = invalidator.invalidate(DashboardPaths.CLASSES, tenant="AAMAR1")
        await invalidator.drain()

        assert scheduled == 1
        assert [(e.path, e.tenant) for e in received] == [("/dashboard/classes", "AAMAR1")]

    @pytest.mark.asyncio
    async def test_pattern_subscription_matches_every_dashboard_path(
        self,
        invalidator: PathInvalidator,
    ) -> None:
        received: list[str] = []

        async def handler(event: InvalidationEvent) -> None:
            received.append(event.path)

        invalidator.subscribe(DashboardPaths.ALL, handler)
        invalidator.invalidate(DashboardPaths.STUDENTS, DashboardPaths.PARENTS)
        await invalidator.drain()

        assert sorted(received) == ["/dashboard/parents", "/dashboard/students"]

    @pytest.mark.asyncio
    async def test_no_handlers_schedules_nothing(self, invalidator: PathInvalidator) -> None:
        assert invalidator.invalidate(DashboardPaths.STAFF) == 0
        assert invalidator.get_stats()["paths_invalidated"] == 1

    @pytest.mark.asyncio
    async def test_handler_error_does_not_reach_caller(self, invalidator: PathInvalidator) -> None:
        async def failing(event: InvalidationEvent) -> None:
            raise RuntimeError("cache down")

        invalidator.subscribe(DashboardPaths.CLASSES, failing)
        invalidator.invalidate(DashboardPaths.CLASSES)
        await invalidator.drain()

        assert invalidator.get_stats()["pending"] == 0

    def test_unsubscribe(self, invalidator: PathInvalidator) -> None:
        async def handler(event: InvalidationEvent) -> None:
            return None

        invalidator.subscribe(DashboardPaths.ALL, handler)

        assert invalidator.unsubscribe(DashboardPaths.ALL, handler) is True
        assert invalidator.unsubscribe(DashboardPaths.ALL, handler) is False
        assert invalidator.get_stats()["pattern_subscriptions"] == 0


def test_singleton_reset() -> None:
    first = get_path_invalidator()
    reset_path_invalidator()

    assert get_path_invalidator() is not first
    reset_path_invalidator()

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fire-and-forget path invalidation.

After a successful mutation a service announces which display paths are now
stale. Handlers subscribe by exact path or fnmatch pattern. ``invalidate``
schedules every matching handler as a background task and returns at once:
there is no acknowledgment and no ordering guarantee relative to the
response. Handler errors are logged and never reach the caller.

Example:
    from src.infrastructure.events import get_path_invalidator, DashboardPaths

    invalidator = get_path_invalidator()

    async def on_stale(event: InvalidationEvent) -> None:
        await page_cache.drop(event.tenant, event.path)

    invalidator.subscribe("/dashboard/*", on_stale)

    invalidator.invalidate(DashboardPaths.CLASSES, tenant="AAMAR12345678ABCDEF")
"""

import asyncio
import fnmatch
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable

from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvalidationEvent:
    """A single stale-path notice.

    Attributes:
        path: Display path that went stale.
        tenant: Tenant whose data changed.
        timestamp: When the invalidation was emitted.
    """

    path: str
    tenant: str | None = None
    timestamp: datetime = field(default_factory=utc_now)


InvalidationHandler = Callable[[InvalidationEvent], Awaitable[None]]


class PathInvalidator:
    """In-process stale-path publisher with pattern subscriptions.

    Attributes:
        _handlers: Exact path -> handlers.
        _pattern_handlers: Pattern -> handlers.
        _pending: Scheduled handler tasks not yet finished.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[InvalidationHandler]] = {}
        self._pattern_handlers: dict[str, list[InvalidationHandler]] = {}
        self._pending: set[asyncio.Task[None]] = set()
        self._emitted = 0

    def subscribe(self, path: str, handler: InvalidationHandler) -> None:
        """Subscribe a handler to a path or pattern.

        Args:
            path: Exact path or fnmatch pattern ("/dashboard/*").
            handler: Async callable receiving the InvalidationEvent.
        """
        target = self._pattern_handlers if _is_pattern(path) else self._handlers
        target.setdefault(path, []).append(handler)
        logger.debug("Subscribed invalidation handler to: %s", path)

    def unsubscribe(self, path: str, handler: InvalidationHandler) -> bool:
        """Remove a handler.

        Args:
            path: Path or pattern used when subscribing.
            handler: The handler to remove.

        Returns:
            True if the handler was found and removed.
        """
        target = self._pattern_handlers if _is_pattern(path) else self._handlers
        handlers = target.get(path)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del target[path]
        return True

    def invalidate(self, *paths: str, tenant: str | None = None) -> int:
        """Announce that display paths are stale.

        Must be called from a running event loop. Returns without waiting
        for handlers.

        Args:
            paths: Stale display paths.
            tenant: Tenant whose data changed.

        Returns:
            Number of handler tasks scheduled.
        """
        scheduled = 0
        for path in paths:
            self._emitted += 1
            event = InvalidationEvent(path=path, tenant=tenant)
            for handler in self._matching(path):
                task = asyncio.get_running_loop().create_task(self._safe_call(handler, event))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
                scheduled += 1

        if scheduled == 0:
            logger.debug("No invalidation handlers for: %s", ", ".join(paths))
        return scheduled

    async def drain(self) -> None:
        """Wait for scheduled handlers to finish (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def clear(self) -> None:
        """Remove all subscriptions."""
        self._handlers.clear()
        self._pattern_handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get subscription and emission counts."""
        return {
            "exact_subscriptions": len(self._handlers),
            "pattern_subscriptions": len(self._pattern_handlers),
            "pending": len(self._pending),
            "paths_invalidated": self._emitted,
        }

    def _matching(self, path: str) -> list[InvalidationHandler]:
        handlers = list(self._handlers.get(path, []))
        for pattern, pattern_handlers in self._pattern_handlers.items():
            if fnmatch.fnmatch(path, pattern):
                handlers.extend(pattern_handlers)
        return handlers

    @staticmethod
    async def _safe_call(handler: InvalidationHandler, event: InvalidationEvent) -> None:
        try:
            await handler(event)
        except Exception as e:
            logger.error(
                "Invalidation handler error for %s: %s",
                event.path,
                str(e),
                exc_info=True,
            )


def _is_pattern(path: str) -> bool:
    return "*" in path or "?" in path


# Singleton instance
_invalidator: PathInvalidator | None = None


def get_path_invalidator() -> PathInvalidator:
    """Get the singleton path invalidator."""
    global _invalidator
    if _invalidator is None:
        _invalidator = PathInvalidator()
    return _invalidator


def reset_path_invalidator() -> None:
    """Reset the singleton. Useful for testing."""
    global _invalidator
    if _invalidator is not None:
        _invalidator.clear()
    _invalidator = None

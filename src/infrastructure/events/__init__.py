# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure.

Components:
- PathInvalidator: fire-and-forget "display path is stale" notices
- DashboardPaths: path constants used by services

Quick Start:
    from src.infrastructure.events import get_path_invalidator, DashboardPaths

    get_path_invalidator().invalidate(DashboardPaths.STUDENTS, tenant=aamar_id)
"""

from src.infrastructure.events.invalidation import (
    InvalidationEvent,
    InvalidationHandler,
    PathInvalidator,
    get_path_invalidator,
    reset_path_invalidator,
)
from src.infrastructure.events.paths import DashboardPaths

__all__ = [
    "DashboardPaths",
    "InvalidationEvent",
    "InvalidationHandler",
    "PathInvalidator",
    "get_path_invalidator",
    "reset_path_invalidator",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (mocked AsyncSession)
- Integration tests (in-memory SQLite)
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.config.settings import SchoolSettings
from src.domains.auth.context import TenantContext


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (uses a real database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Tenant Fixtures
# =============================================================================


@pytest.fixture
def tenant_context() -> TenantContext:
    """Provide an admin context for tenant AAMAR1."""
    return TenantContext(
        aamar_id="AAMAR1",
        school_id="school-1",
        branch_id="branch-1",
        role="ADMIN",
        user_id="admin-1",
    )


@pytest.fixture
def school_settings() -> SchoolSettings:
    """Business settings with defaults, independent of the environment."""
    return SchoolSettings(_env_file=None)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


@pytest.fixture
def mock_invalidator() -> MagicMock:
    """Path invalidator that records calls instead of scheduling tasks."""
    return MagicMock()


# =============================================================================
# Query Result Helpers
# =============================================================================


def scalar_result(value: Any) -> MagicMock:
    """Result whose scalar_one_or_none() and scalar() return value."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = value
    return result


def scalars_result(values: list[Any]) -> MagicMock:
    """Result whose scalars().all() returns values."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def rows_result(rows: list[Any]) -> MagicMock:
    """Result whose all() returns rows."""
    result = MagicMock()
    result.all.return_value = rows
    return result

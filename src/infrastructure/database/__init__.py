# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure.

This package provides the SQLAlchemy async engine, sessions and the
transaction helper shared by every service. Tenants share one database and
are separated by the aamar_id column carried on every row.

Example:
    from src.infrastructure.database import get_session, transaction

    async with get_session() as session:
        async with transaction(session):
            session.add(user)
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    transaction,
)

__all__ = [
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "transaction",
]

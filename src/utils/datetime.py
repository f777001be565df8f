# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities.

All timestamps are stored in UTC and every Python datetime is
timezone-aware. Calendar dates (admission date, attendance date, date of
birth) are plain ``date`` values.

Usage:
    from src.utils.datetime import utc_now

    created_at = mapped_column(DateTime(timezone=True), default=utc_now)
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def days_ago(days: int) -> datetime:
    """Get a UTC datetime N days in the past.

    Args:
        days: Number of days to go back.

    Returns:
        Timezone-aware datetime.
    """
    return utc_now() - timedelta(days=days)


def start_of_month(moment: datetime | None = None) -> datetime:
    """Get midnight UTC on the first day of the month.

    Args:
        moment: Reference time, defaults to now.

    Returns:
        Timezone-aware datetime at the start of the month.
    """
    moment = moment or utc_now()
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def epoch_millis(moment: datetime | None = None) -> int:
    """Get milliseconds since the Unix epoch.

    Args:
        moment: Reference time, defaults to now.

    Returns:
        Integer milliseconds.
    """
    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)

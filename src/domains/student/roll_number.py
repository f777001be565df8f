# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Roll number generation.

Roll numbers look like ``<year><sequence>`` with the sequence zero-padded
to three digits (2024001, 2024002, ...). The next number is derived from
the numeric maximum of the existing sequences, so 2024999 is followed by
20241000 rather than wrapping.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from sqlalchemy import select

from src.core.errors import ServiceError, service_operation
from src.core.result import ErrorKind
from src.domains.base import TenantScopedService
from src.infrastructure.database.models import Section, Student
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)

_YEAR_PREFIXED = re.compile(r"^\d{4}(\d{3,})$")
_TRAILING_DIGITS = re.compile(r"(\d+)$")


class RollSectionNotFoundError(ServiceError):
    """Raised when the section is not found in the tenant."""

    kind = ErrorKind.NOT_FOUND


def roll_sequence(roll_number: str) -> int | None:
    """Extract the sequence part of a roll number.

    Returns:
        The digits after a 4-digit year prefix, else the trailing digits,
        else None.
    """
    roll_number = roll_number.strip()
    match = _YEAR_PREFIXED.match(roll_number) or _TRAILING_DIGITS.search(roll_number)
    return int(match.group(1)) if match else None


def next_roll_number(existing: Iterable[str], year: int) -> str:
    """Compute the next roll number for a section.

    Args:
        existing: Roll numbers already used in the section.
        year: Year prefix for the new number.

    Returns:
        ``f"{year}{n:03d}"`` where n is one past the highest sequence.

    Example:
        >>> next_roll_number(["2024001", "2024009"], 2024)
        '2024010'
        >>> next_roll_number([], 2025)
        '2025001'
    """
    sequences = [seq for seq in (roll_sequence(r) for r in existing if r) if seq is not None]
    n = max(sequences, default=0) + 1
    return f"{year}{n:03d}"


class RollNumberService(TenantScopedService):
    """Suggests the next free roll number for a section."""

    @service_operation("generate roll number")
    async def generate_roll_number(self, section_id: str) -> str:
        """Generate the next roll number for a section.

        Raises:
            RollSectionNotFoundError: If the section is not in the tenant.
        """
        aamar_id = self._tenant()
        section = await self.db.execute(
            select(Section.id).where(Section.id == section_id, Section.aamar_id == aamar_id)
        )
        if section.scalar_one_or_none() is None:
            raise RollSectionNotFoundError("Section not found")

        result = await self.db.execute(
            select(Student.roll_number).where(
                Student.section_id == section_id,
                Student.aamar_id == aamar_id,
            )
        )
        roll_number = next_roll_number(result.scalars().all(), utc_now().year)
        logger.debug("Next roll number for section %s: %s", section_id, roll_number)
        return roll_number

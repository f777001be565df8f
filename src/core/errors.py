# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Service error taxonomy and the operation boundary.

Domain services raise ``ServiceError`` subclasses for expected business-rule
failures. Each subclass declares the ``ErrorKind`` it maps to. The
``service_operation`` decorator turns whatever a service method does into a
``Result``:

- a returned value becomes ``Ok(value)``
- a raised ``ServiceError`` becomes ``Err(error.kind, message, detail)``
- a unique-constraint ``IntegrityError`` becomes a ``CONFLICT`` with the same
  message the pre-check path uses
- anything else is logged and flattened to ``"Failed to <verb> <noun>"``

Example:
    class ClassNotFoundError(ClassServiceError):
        kind = ErrorKind.NOT_FOUND

    @service_operation("delete class")
    async def delete_class(self, class_id: str) -> dict:
        ...
"""

import functools
import logging
from typing import Any, Awaitable, Callable, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.core.result import Err, ErrorKind, Ok, Result

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Awaitable[Any]])

UNIQUE_VIOLATION_SQLSTATE = "23505"

# Constraint markers (postgres constraint name, sqlite "table.column") -> message
CONFLICT_MESSAGES: dict[tuple[str, ...], str] = {
    ("uq_users_email", "users.email"): "Email already exists",
    (
        "uq_students_section_roll_number",
        "students.roll_number",
    ): "Roll number already exists in this section",
    ("uq_classes_name_branch_year", "classes.academic_year"): "Class already exists",
    ("uq_sections_class_name", "sections.name"): "Section already exists for this class",
    ("uq_subjects_class_code", "subjects.code"): "Subject code already exists in this class",
    ("uq_attendance_student_date", "attendance.date"): "Attendance already recorded for this date",
    ("uq_school_settings_school", "school_settings.school_id"): "Settings already exist for this school",
    (
        "uq_class_routines_class_year",
        "class_routines.academic_year",
    ): "Routine already exists for this class and year",
}

DEFAULT_CONFLICT_MESSAGE = "Record already exists"


class ServiceError(Exception):
    """Base exception for expected service failures.

    Attributes:
        kind: Failure category reported to the caller.
        message: Short error string.
        detail: Optional longer human-oriented message.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, detail: str | None = None) -> None:
        """Initialize the service error.

        Args:
            message: Short error string.
            detail: Optional longer human-oriented message.
        """
        super().__init__(message)
        self.message = message
        self.detail = detail


class UnauthenticatedError(ServiceError):
    """Raised when no valid session backs the request."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "Authentication required", detail: str | None = None) -> None:
        super().__init__(message, detail)


def is_unique_violation(error: IntegrityError) -> bool:
    """Check whether an IntegrityError came from a unique constraint.

    Args:
        error: The wrapped DBAPI integrity error.

    Returns:
        True for unique violations on PostgreSQL or SQLite.
    """
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == UNIQUE_VIOLATION_SQLSTATE:
        return True
    text = str(orig).lower()
    return "unique constraint" in text or "duplicate key" in text


def conflict_message(error: IntegrityError) -> str:
    """Return the user-facing message for a unique violation.

    Args:
        error: The unique-violation integrity error.

    Returns:
        Message registered for the violated constraint, or a generic one.
    """
    text = str(error.orig)
    for markers, message in CONFLICT_MESSAGES.items():
        if any(marker in text for marker in markers):
            return message
    return DEFAULT_CONFLICT_MESSAGE


async def _rollback(service: Any) -> None:
    db = getattr(service, "db", None)
    if db is None:
        return
    try:
        await db.rollback()
    except SQLAlchemyError as e:
        logger.warning("Rollback failed: %s", str(e))


def service_operation(action: str, *, surface_errors: bool = False) -> Callable[[F], F]:
    """Wrap a service method so it always returns a Result.

    Args:
        action: Verb and noun used in the generic failure message,
            e.g. "create class" -> "Failed to create class".
        surface_errors: Report unexpected errors with their own message
            instead of the generic one.

    Returns:
        Decorator for async service methods.
    """
    failure = f"Failed to {action}"

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Result[Any]:
            try:
                outcome = await func(self, *args, **kwargs)
            except ServiceError as e:
                return Err(e.kind, e.message, e.detail)
            except IntegrityError as e:
                await _rollback(self)
                if is_unique_violation(e):
                    message = conflict_message(e)
                    logger.info("%s: unique violation translated to conflict (%s)", failure, message)
                    return Err(ErrorKind.CONFLICT, message)
                logger.exception(failure)
                return Err(ErrorKind.INFRASTRUCTURE, str(e.orig) if surface_errors else failure)
            except Exception as e:
                await _rollback(self)
                logger.exception(failure)
                return Err(ErrorKind.INFRASTRUCTURE, str(e) if surface_errors else failure)

            if isinstance(outcome, (Ok, Err)):
                return outcome
            return Ok(outcome)

        return wrapper  # type: ignore[return-value]

    return decorator

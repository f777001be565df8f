# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Tagged result type returned by every service operation.

A service operation either succeeds with ``Ok(data)`` or fails with
``Err(kind, error)``. Both render to the response envelope consumed by the
HTTP layer and the dashboard:

    {"success": true, "data": ..., "message": "..."}
    {"success": false, "error": "...", "kind": "not_found", "message": "..."}

A failed envelope never carries a ``data`` key.

Example:
    >>> result = Ok({"id": "c-1"}, message="Class created successfully")
    >>> result.to_envelope()["success"]
    True
    >>> Err(ErrorKind.NOT_FOUND, "Class not found").to_envelope()
    {'success': False, 'error': 'Class not found', 'kind': 'not_found'}
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    PRECONDITION = "precondition"
    UNAUTHENTICATED = "unauthenticated"
    NOT_IMPLEMENTED = "not_implemented"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome.

    Attributes:
        data: Operation payload.
        message: Optional human-oriented message.
    """

    data: T
    message: str | None = None

    @property
    def success(self) -> bool:
        return True

    def to_envelope(self) -> dict[str, Any]:
        """Render the success envelope."""
        envelope: dict[str, Any] = {"success": True, "data": self.data}
        if self.message is not None:
            envelope["message"] = self.message
        return envelope


@dataclass(frozen=True)
class Err:
    """Failed outcome.

    Attributes:
        kind: Failure category.
        error: Short machine-oriented error string.
        message: Optional human-oriented detail.
    """

    kind: ErrorKind
    error: str
    message: str | None = None

    @property
    def success(self) -> bool:
        return False

    def to_envelope(self) -> dict[str, Any]:
        """Render the failure envelope."""
        envelope: dict[str, Any] = {
            "success": False,
            "error": self.error,
            "kind": self.kind.value,
        }
        if self.message is not None:
            envelope["message"] = self.message
        return envelope


Result = Union[Ok[T], Err]

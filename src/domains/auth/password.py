# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Password hashing using bcrypt.

Accounts created by staff on someone else's behalf (students, parents,
teachers, staff) start with a role default password taken from
``SchoolSettings``. Only the bcrypt hash is stored.

Example:
    >>> hasher = PasswordHasher(rounds=4)
    >>> hashed = hasher.hash("student123")
    >>> hasher.verify("student123", hashed)
    True
"""

import logging

import bcrypt

from src.core.config.settings import SchoolSettings

logger = logging.getLogger(__name__)


class PasswordHasher:
    """bcrypt hashing with an embedded salt.

    Attributes:
        _rounds: bcrypt cost factor.
    """

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plain text password.

        Returns:
            bcrypt hash string.

        Raises:
            ValueError: If password is empty.
        """
        if not password:
            raise ValueError("Password cannot be empty")

        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against a stored hash.

        Malformed hashes verify as False.
        """
        if not password or not password_hash:
            return False

        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError as e:
            logger.warning("Password verification failed: %s", str(e))
            return False


_default_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a password with the default hasher."""
    return _default_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password with the default hasher."""
    return _default_hasher.verify(password, password_hash)


def default_password_hash(role: str, school: SchoolSettings) -> str:
    """Hash the configured initial password for a role.

    Args:
        role: One of STUDENT, PARENT, TEACHER, STAFF.
        school: Business settings holding the defaults.

    Returns:
        bcrypt hash of the role's default password.

    Raises:
        ValueError: If the role has no default password.
    """
    defaults = {
        "STUDENT": school.default_student_password,
        "PARENT": school.default_parent_password,
        "TEACHER": school.default_teacher_password,
        "STAFF": school.default_staff_password,
    }
    if role not in defaults:
        raise ValueError(f"No default password for role: {role}")
    return hash_password(defaults[role].get_secret_value())

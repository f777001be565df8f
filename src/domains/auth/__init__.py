# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Authentication domain.

Exports:
    PasswordHasher: bcrypt password hashing.
    JWTManager: JWT access token creation and validation.
    AuthService: Email/password login.
    TenantContext: Acting user and tenant for one request.
    TenantContextResolver: Builds a TenantContext from a user id.
"""

from src.domains.auth.context import TenantContext, TenantContextResolver
from src.domains.auth.jwt import JWTManager
from src.domains.auth.password import PasswordHasher
from src.domains.auth.service import AuthService

__all__ = [
    "AuthService",
    "JWTManager",
    "PasswordHasher",
    "TenantContext",
    "TenantContextResolver",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""JWT access token utilities.

Tokens carry the user id as subject plus the tenant it was issued for. The
tenant claim is informational: the authoritative tenant context is always
re-resolved from the user row on each request.

Example:
    >>> from src.core.config import get_settings
    >>> jwt_manager = JWTManager(get_settings().jwt)
    >>> token = jwt_manager.create_access_token(user_id="u-1", aamar_id="AAMAR1", role="ADMIN")
    >>> claims = jwt_manager.decode_token(token.access_token)
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError as JoseJWTError, jwt
from pydantic import BaseModel

from src.core.config.settings import JWTSettings

logger = logging.getLogger(__name__)


class TokenPayload(BaseModel):
    """Decoded access token claims.

    Attributes:
        sub: Subject (user ID).
        aamar_id: Tenant the token was issued for.
        role: User role at issue time.
        exp: Expiration timestamp.
        iat: Issued at timestamp.
        jti: JWT ID.
    """

    sub: str
    aamar_id: str | None = None
    role: str | None = None
    exp: int
    iat: int
    jti: str


class AccessToken(BaseModel):
    """Issued access token.

    Attributes:
        access_token: Encoded JWT.
        token_type: Always "Bearer".
        expires_in: Lifetime in seconds.
    """

    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class JWTError(Exception):
    """Base exception for JWT operations."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTManager:
    """JWT access token creation and validation.

    Attributes:
        _settings: JWT configuration settings.
    """

    def __init__(self, settings: JWTSettings) -> None:
        self._settings = settings

    def create_access_token(
        self,
        user_id: str,
        aamar_id: str | None = None,
        role: str | None = None,
    ) -> AccessToken:
        """Create an access token.

        Args:
            user_id: User identifier.
            aamar_id: Tenant identifier.
            role: User role.

        Returns:
            AccessToken with the encoded JWT.
        """
        now = datetime.now(timezone.utc)
        exp = now + timedelta(minutes=self._settings.access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "aamar_id": aamar_id,
            "role": role,
            "exp": int(exp.timestamp()),
            "iat": int(now.timestamp()),
            "jti": secrets.token_urlsafe(16),
        }

        encoded = jwt.encode(
            payload,
            self._settings.secret_key.get_secret_value(),
            algorithm=self._settings.algorithm,
        )
        return AccessToken(
            access_token=encoded,
            expires_in=self._settings.access_token_expire_minutes * 60,
        )

    def decode_token(self, token: str) -> TokenPayload:
        """Decode and validate a JWT token.

        Args:
            token: JWT token string.

        Returns:
            TokenPayload with decoded claims.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key.get_secret_value(),
                algorithms=[self._settings.algorithm],
            )
            return TokenPayload(
                sub=payload["sub"],
                aamar_id=payload.get("aamar_id"),
                role=payload.get("role"),
                exp=payload["exp"],
                iat=payload["iat"],
                jti=payload["jti"],
            )
        except ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except (JoseJWTError, KeyError, ValueError) as e:
            logger.warning("Token decode failed: %s", str(e))
            raise InvalidTokenError(f"Invalid token: {str(e)}")

    def verify_token(self, token: str) -> bool:
        """Check whether a token decodes and has not expired."""
        try:
            self.decode_token(token)
            return True
        except (TokenExpiredError, InvalidTokenError):
            return False

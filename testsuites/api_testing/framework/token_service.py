"""
================================================================================
Token Service
================================================================================

Issues and verifies signed identity tokens for synthetic test users.

Features:
    - HS256 JWT signing with the configured secret (PyJWT)
    - Expiration computed from JWT_EXPIRATION at call time
    - Verification that never raises (invalid tokens decode to None)
    - One-call creation of a ready-to-use authenticated identity

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import jwt
from loguru import logger

from .config_loader import Settings


JWT_ALGORITHM = "HS256"

DEFAULT_USER_ID = "test-user-id"
DEFAULT_USER = MappingProxyType({
    "id": DEFAULT_USER_ID,
    "email": "test@example.com",
    "name": "Test User",
})


class TokenError(Exception):
    """Raised when a token cannot be issued."""
    pass


def bearer(token: str) -> str:
    """Build the Authorization header value for a token."""
    return f"Bearer {token}"


@dataclass(frozen=True)
class AuthContext:
    """
    A synthetic user together with its token.

    Attributes:
        user: Merged user fields (id, email, name and any custom fields)
        token: Signed JWT for the user
        auth_header: {"Authorization": "Bearer <token>"}
    """

    user: Dict[str, Any]
    token: str
    auth_header: Dict[str, str]


class TokenService:
    """
    JWT issuer/verifier for test identities.

    Usage:
        >>> service = TokenService(settings)
        >>> ctx = service.create_test_user({"name": "Alice"})
        >>> service.verify_token(ctx.token)["userId"]
        'test-user-id'
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def generate_token(self, user: Mapping[str, Any]) -> str:
        """
        Sign a token for a user.

        Args:
            user: Mapping with an optional "id" and an "email"

        Returns:
            Encoded JWT with userId, email, iat and exp claims

        Raises:
            TokenError: If no signing secret is configured
        """
        secret = self.settings.jwt_secret
        if not secret:
            raise TokenError("Cannot sign token: JWT secret is not configured")

        issued_at = int(time.time())
        payload = {
            "userId": user.get("id") or DEFAULT_USER_ID,
            "email": user.get("email"),
            "iat": issued_at,
            "exp": issued_at + self.settings.jwt_expiration_seconds,
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a token.

        Returns:
            Decoded payload, or None when the token is malformed, tampered
            with, signed with another secret, or expired.
        """
        try:
            return jwt.decode(token, self.settings.jwt_secret, algorithms=[JWT_ALGORITHM])
        except jwt.PyJWTError as e:
            logger.error(f"Error verifying token: {e}")
            return None

    def create_test_user(
        self,
        custom_fields: Optional[Mapping[str, Any]] = None,
    ) -> AuthContext:
        """
        Create a test user with a token.

        Custom fields shallow-merge over the defaults:
        id="test-user-id", email="test@example.com", name="Test User".
        """
        user = {**DEFAULT_USER, **(custom_fields or {})}
        token = self.generate_token(user)

        logger.debug(f"Created test user: {user.get('id')} <{user.get('email')}>")
        return AuthContext(
            user=user,
            token=token,
            auth_header={"Authorization": bearer(token)},
        )


__all__ = [
    "TokenService",
    "TokenError",
    "AuthContext",
    "bearer",
    "DEFAULT_USER",
    "DEFAULT_USER_ID",
    "JWT_ALGORITHM",
]

"""
Security utilities for the application.
This module provides JWT access token creation and verification.
"""
import secrets
from typing import Optional, Union, Any, Dict
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from budgetx.core.config import settings
from budgetx.core.logging import logger


class TokenManager:
    """JWT token management."""

    @staticmethod
    def create_access_token(
        subject: Union[str, Any],
        expires_delta: Optional[timedelta] = None,
        additional_claims: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Create a JWT access token.

        Args:
            subject: The subject to encode in the token (the user ID)
            expires_delta: Optional expiration time delta
            additional_claims: Optional additional claims to include

        Returns:
            Encoded JWT token
        """
        now = datetime.now(timezone.utc)
        if expires_delta:
            expire = now + expires_delta
        else:
            expire = now + timedelta(
                minutes=settings.security.access_token_expire_minutes
            )

        to_encode = {
            "exp": expire,
            "iat": now,
            "sub": str(subject),
            "type": "access",
            "jti": secrets.token_hex(16),
        }

        if additional_claims:
            to_encode.update(additional_claims)

        encoded_jwt = jwt.encode(
            to_encode,
            settings.security.secret_key_str,
            algorithm=settings.security.algorithm
        )

        logger.debug(f"Created access token for subject: {subject}")
        return encoded_jwt

    @staticmethod
    def verify_token(token: str, token_type: str = "access") -> Optional[Dict[str, Any]]:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token to verify
            token_type: Expected token type

        Returns:
            Decoded token payload or None if invalid
        """
        try:
            payload = jwt.decode(
                token,
                settings.security.secret_key_str,
                algorithms=[settings.security.algorithm]
            )

            if payload.get("type") != token_type:
                logger.warning(f"Invalid token type: expected {token_type}, got {payload.get('type')}")
                return None

            return payload

        except JWTError as e:
            logger.warning(f"JWT verification error: {e}")
            return None


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """Shortcut for ``TokenManager.create_access_token``."""
    return TokenManager.create_access_token(subject, expires_delta)

"""
JWT token utilities for authentication.

This module issues and verifies the signed, time-limited tokens that bind
an email address to a request.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from backend.parcelpro.core.config import settings
from backend.parcelpro.db.identifiers import normalize_email


def create_access_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for an email identity.

    Args:
        email: Email address to embed in the token
        expires_delta: Optional custom lifetime (defaults to 24 hours)

    Returns:
        Encoded JWT token string

    Example payload:
        {
            "email": "sender@example.com",
            "iat": 1234560000,
            "exp": 1234646400
        }
    """
    issued_at = datetime.now(timezone.utc)

    if expires_delta is None:
        expires_delta = timedelta(hours=settings.access_token_expire_hours)

    to_encode = {
        "email": normalize_email(email),
        "iat": issued_at,
        "exp": issued_at + expires_delta,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        Decoded token payload if valid, None if malformed, expired
        or signed with a different secret
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def verify_access_token(token: Optional[str]) -> Optional[str]:
    """
    Verify a token and return the email it was issued for.

    Returns None for a missing token or one that carries no email claim.
    The email comes back lowercased so it matches stored records.
    """
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    email = payload.get("email")
    if not isinstance(email, str) or not email:
        return None
    return normalize_email(email)

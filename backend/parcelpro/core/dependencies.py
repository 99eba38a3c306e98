"""
Authentication dependencies for FastAPI.

This module provides dependencies for protecting routes with JWT authentication.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backend.parcelpro.core.exceptions import AuthenticationError
from backend.parcelpro.core.jwt import verify_access_token

# HTTP Bearer security scheme. Missing credentials are reported as 401 below
# instead of the scheme's own error.
security = HTTPBearer(auto_error=False)


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    FastAPI dependency for JWT authentication.

    Verifies the bearer token and exposes the email it was issued for.
    Authorization decisions are made by the Access Policy afterwards.

    Returns:
        Identity dict: {"email": ...}

    Raises:
        AuthenticationError (401) if the token is missing, malformed,
        expired or signed with another secret
    """
    if credentials is None:
        raise AuthenticationError("Unauthorized access: missing bearer token")

    email = verify_access_token(credentials.credentials)
    if email is None:
        raise AuthenticationError("Unauthorized access: invalid or expired token")

    return {"email": email}

"""
Authentication API endpoints.

Issues the bearer tokens every protected route expects.
"""

from fastapi import APIRouter
from backend.parcelpro.core.jwt import create_access_token
from backend.parcelpro.schemas.auth import TokenRequest, TokenResponse

router = APIRouter(tags=["Authentication"])


@router.post("/jwt", response_model=TokenResponse)
async def issue_token(payload: TokenRequest):
    """
    Issue a signed token for an email address.

    The token expires 24 hours after issuance and is sent back as
    `Authorization: Bearer <token>`.
    """
    return TokenResponse(token=create_access_token(payload.email))

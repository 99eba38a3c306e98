"""
User API Endpoints.

Signup, role lookup and admin user management.
"""

from typing import List, Optional, Union
from fastapi import APIRouter, Depends, Query, Response, status
from backend.parcelpro.core.dependencies import get_current_identity
from backend.parcelpro.core.guards import AccessPolicy, require_admin
from backend.parcelpro.models.enums import UserRole
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.base import MessageResponse
from backend.parcelpro.schemas.reporting import DeliveryPersonProfile, UserSummary
from backend.parcelpro.schemas.user import RoleUpdate, UserCreate, UserResponse, UserRoleInfo
from backend.parcelpro.services.reporting import ReportingService, get_reporting_service
from backend.parcelpro.services.users import UserService, get_user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=Union[UserResponse, MessageResponse])
async def signup(
    user_data: UserCreate,
    response: Response,
    users: UserService = Depends(get_user_service)
):
    """
    Save a user on first sign-in.

    Idempotent on email: a repeated signup returns
    `{"message": "User already exists"}` and creates nothing.
    """
    user, created = await users.signup(user_data)
    if not created:
        return MessageResponse(message="User already exists")

    response.status_code = status.HTTP_201_CREATED
    return UserResponse.model_validate(user)


@router.get("/role/{email}", response_model=UserRoleInfo)
async def get_role(
    email: str,
    identity: dict = Depends(get_current_identity),
    users: UserService = Depends(get_user_service)
):
    """Role, verification flag and ID of the calling user."""
    AccessPolicy.require_self(identity, email)
    user = await users.get_by_email(identity["email"])
    return UserRoleInfo(role=user.role, verified=user.verified, id=user.id)


@router.get("/admin", response_model=List[UserSummary])
async def list_user_summaries(
    response: Response,
    current_page: int = Query(1, ge=1, alias="currentPage", description="Page number (1-based)"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    role: Optional[UserRole] = Query(None, description="Only users with this role"),
    admin: User = Depends(require_admin),
    reporting: ReportingService = Depends(get_reporting_service)
):
    """
    Per-user parcel count and total spent (Admin only).

    Newest users first; the unpaginated total is sent in `X-Total-Count`.
    """
    summaries, total = await reporting.user_summaries(current_page, limit, role)
    response.headers["X-Total-Count"] = str(total)
    return summaries


@router.patch("/role", response_model=UserResponse)
async def change_role(
    payload: RoleUpdate,
    admin: User = Depends(require_admin),
    users: UserService = Depends(get_user_service)
):
    """Change a user's role (Admin only)."""
    user = await users.change_role(admin, payload.id, payload.role)
    return UserResponse.model_validate(user)


@router.get("/deliveryMen", response_model=List[DeliveryPersonProfile])
async def list_delivery_people(
    admin: User = Depends(require_admin),
    reporting: ReportingService = Depends(get_reporting_service)
):
    """Delivery people with delivered count and average rating (Admin only)."""
    return await reporting.delivery_people()

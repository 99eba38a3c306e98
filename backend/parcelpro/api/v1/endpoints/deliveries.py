"""
Delivery Person API Endpoints.

Profile completion, assigned parcel list and status updates.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from backend.parcelpro.core.guards import AccessPolicy, require_delivery_person
from backend.parcelpro.db.identifiers import parse_id
from backend.parcelpro.domain.booking.workflow import BookingWorkflow, get_booking_workflow
from backend.parcelpro.models.enums import BookingStatus
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.parcel import DeliveryStatusUpdate, ParcelResponse
from backend.parcelpro.schemas.user import DeliveryProfileUpdate, UserResponse
from backend.parcelpro.services.users import UserService, get_user_service

router = APIRouter(tags=["Delivery Person"])


@router.patch("/deliveryman", response_model=UserResponse)
async def complete_profile(
    payload: DeliveryProfileUpdate,
    delivery_man: User = Depends(require_delivery_person),
    users: UserService = Depends(get_user_service)
):
    """Add a phone number to the caller's profile and mark it verified."""
    AccessPolicy.require_same_user(delivery_man, parse_id(payload.id))
    user = await users.complete_delivery_profile(delivery_man, payload.phone)
    return UserResponse.model_validate(user)


@router.get("/deliveries/{delivery_man_id}", response_model=List[ParcelResponse])
async def list_deliveries(
    delivery_man_id: str = Path(..., description="Delivery person user ID"),
    status: Optional[BookingStatus] = Query(None),
    delivery_man: User = Depends(require_delivery_person),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Parcels assigned to the calling delivery person."""
    AccessPolicy.require_same_user(delivery_man, parse_id(delivery_man_id))
    parcels = await workflow.list_assigned_parcels(delivery_man.id, status)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.patch("/deliveries", response_model=ParcelResponse)
async def update_delivery_status(
    payload: DeliveryStatusUpdate,
    delivery_man: User = Depends(require_delivery_person),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """
    Move an assigned parcel to a new status.

    Delivering a parcel also bumps the caller's delivered count.
    """
    parcel = await workflow.update_status(
        delivery_man, payload.parcel_id, payload.status, payload.delivery_men_id
    )
    return ParcelResponse.model_validate(parcel)

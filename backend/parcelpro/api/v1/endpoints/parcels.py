"""
Parcel API Endpoints.

Booking, listing and editing for senders, plus admin listing and
assignment.
"""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query, status
from backend.parcelpro.core.dependencies import get_current_identity
from backend.parcelpro.core.guards import AccessPolicy, get_access_policy, require_admin
from backend.parcelpro.domain.booking.workflow import BookingWorkflow, get_booking_workflow
from backend.parcelpro.models.enums import BookingStatus, UserRole
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.base import DeleteResponse
from backend.parcelpro.schemas.parcel import ParcelAssign, ParcelCreate, ParcelResponse, ParcelUpdate

router = APIRouter(tags=["Parcels"])


@router.post("/parcels", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def book_parcel(
    parcel_data: ParcelCreate,
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """
    Book a parcel for the caller.

    The parcel starts as Pending and unpaid.
    """
    if parcel_data.sender_email is not None:
        AccessPolicy.require_self(identity, parcel_data.sender_email)

    parcel = await workflow.book(identity["email"], parcel_data)
    return ParcelResponse.model_validate(parcel)


@router.get("/parcels", response_model=List[ParcelResponse])
async def list_my_parcels(
    email: str = Query(..., description="Sender email, must be the caller"),
    status: Optional[BookingStatus] = Query(None, description="Filter by booking status"),
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """The caller's parcels, newest first."""
    AccessPolicy.require_self(identity, email)
    parcels = await workflow.list_sender_parcels(identity["email"], status)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.get("/parcels/admin", response_model=List[ParcelResponse])
async def list_all_parcels(
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    admin: User = Depends(require_admin),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """All parcels, optionally by requested delivery date range (Admin only)."""
    parcels = await workflow.list_parcels_between(from_date, to_date)
    return [ParcelResponse.model_validate(p) for p in parcels]


@router.patch("/parcels/assign", response_model=ParcelResponse)
async def assign_parcel(
    payload: ParcelAssign,
    admin: User = Depends(require_admin),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Assign a delivery person and set the parcel On The Way (Admin only)."""
    parcel = await workflow.assign(
        payload.parcel_id, payload.delivery_man_id, payload.approx_delivery_date
    )
    return ParcelResponse.model_validate(parcel)


@router.get("/parcels/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    identity: dict = Depends(get_current_identity),
    policy: AccessPolicy = Depends(get_access_policy),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """
    Get a single parcel.

    Visible to its sender, its assigned delivery person and admins.
    """
    parcel = await workflow.get_parcel(parcel_id)

    if parcel.sender_email.lower() != identity["email"].lower():
        user = await policy.require_role(identity, UserRole.ADMIN, UserRole.DELIVERY_PERSON)
        if user.role == UserRole.DELIVERY_PERSON:
            policy.require_same_user(user, parcel.delivery_man_id)

    return ParcelResponse.model_validate(parcel)


@router.put("/parcels/{parcel_id}", response_model=ParcelResponse)
async def edit_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    parcel_data: ParcelUpdate = ...,
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Edit a pending parcel. Only the sender may edit, and only supplied fields change."""
    parcel = await workflow.edit(identity["email"], parcel_id, parcel_data)
    return ParcelResponse.model_validate(parcel)


@router.delete("/parcels/{parcel_id}", response_model=DeleteResponse)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Delete a pending, unassigned, unpaid parcel owned by the caller."""
    deleted = await workflow.delete(identity["email"], parcel_id)
    return DeleteResponse(deleted_count=deleted)


@router.patch("/parcels/{parcel_id}/cancel", response_model=ParcelResponse)
async def cancel_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Cancel a pending parcel owned by the caller."""
    parcel = await workflow.cancel(identity["email"], parcel_id)
    return ParcelResponse.model_validate(parcel)


@router.patch("/parcels-paid/{parcel_id}", response_model=ParcelResponse)
async def mark_parcel_paid(
    parcel_id: str = Path(..., description="Parcel ID"),
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Flag a parcel as paid once its payment has been recorded."""
    parcel = await workflow.mark_paid(identity["email"], parcel_id)
    return ParcelResponse.model_validate(parcel)

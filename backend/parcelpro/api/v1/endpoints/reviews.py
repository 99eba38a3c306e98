"""
Review API Endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, Path, status
from backend.parcelpro.core.dependencies import get_current_identity
from backend.parcelpro.core.guards import AccessPolicy, require_delivery_person
from backend.parcelpro.db.identifiers import parse_id
from backend.parcelpro.domain.booking.workflow import BookingWorkflow, get_booking_workflow
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.review import ReviewCreate, ReviewResponse

router = APIRouter(prefix="/reviews", tags=["Reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    review_data: ReviewCreate,
    identity: dict = Depends(get_current_identity),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Rate the delivery person of one of the caller's delivered parcels."""
    review = await workflow.review(identity, review_data)
    return ReviewResponse.model_validate(review)


@router.get("/{delivery_man_id}", response_model=List[ReviewResponse])
async def list_my_reviews(
    delivery_man_id: str = Path(..., description="Delivery person user ID"),
    delivery_man: User = Depends(require_delivery_person),
    workflow: BookingWorkflow = Depends(get_booking_workflow)
):
    """Reviews received by the calling delivery person, newest first."""
    AccessPolicy.require_same_user(delivery_man, parse_id(delivery_man_id))
    reviews = await workflow.list_reviews(delivery_man.id)
    return [ReviewResponse.model_validate(r) for r in reviews]

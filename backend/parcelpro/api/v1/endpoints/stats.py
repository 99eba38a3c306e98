"""
Statistics API Endpoints.

Admin dashboard stats plus public landing page counters.
"""

from typing import List
from fastapi import APIRouter, Depends
from backend.parcelpro.core.guards import require_admin
from backend.parcelpro.models.user import User
from backend.parcelpro.schemas.reporting import AdminStats, DeliveryPersonProfile, HomeStats
from backend.parcelpro.services.reporting import ReportingService, get_reporting_service

router = APIRouter(tags=["Statistics"])


@router.get("/admin/stats", response_model=AdminStats)
async def get_admin_stats(
    admin: User = Depends(require_admin),
    reporting: ReportingService = Depends(get_reporting_service)
):
    """Platform totals, revenue and per-day booking charts (Admin only)."""
    return await reporting.admin_stats()


@router.get("/home/stats", response_model=HomeStats)
async def get_home_stats(reporting: ReportingService = Depends(get_reporting_service)):
    """Public counters for the landing page."""
    return await reporting.home_stats()


@router.get("/top-deliveryMen", response_model=List[DeliveryPersonProfile])
async def get_top_delivery_people(reporting: ReportingService = Depends(get_reporting_service)):
    """The three most productive delivery people with their average rating."""
    return await reporting.top_delivery_people()

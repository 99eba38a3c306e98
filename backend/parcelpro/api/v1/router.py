"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.parcelpro.api.v1.endpoints import (
    auth, users, deliveries, parcels, reviews, payments, stats
)

router = APIRouter()

# Token issuance
router.include_router(auth.router)

# Users and admin user management
router.include_router(users.router)

# Delivery person profile and deliveries
router.include_router(deliveries.router)

# Parcel booking and assignment
router.include_router(parcels.router)

# Reviews
router.include_router(reviews.router)

# Payments
router.include_router(payments.router)

# Dashboards
router.include_router(stats.router)

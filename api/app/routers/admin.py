"""
Admin Endpoints - catalog management, users, bookings, audit trail & analytics
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from datetime import datetime
from typing import List, Optional
import logging

from app.config import settings
from app.models import User
from app.routers.auth import get_current_admin
from app.schemas.activity_log import ActivityLogResponse
from app.schemas.analytics import AnalyticsOverview, RevenueSummary
from app.schemas.booking import BookingWithDetailsResponse
from app.schemas.destination import (
    DestinationCreate,
    DestinationResponse,
    DestinationUpdate,
    DestinationWithStatsResponse,
)
from app.schemas.user import UserResponse
from app.services.activity import log_activity
from app.storage import Storage, get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


# =========================================================================
# USERS
# =========================================================================

@router.get("/users", response_model=List[UserResponse])
async def list_users(
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """All users, newest first"""
    return await storage.users.get_all_users()


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: str,
    request: Request,
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Permanently delete a user"""
    if user_id == admin.id:
        raise HTTPException(status_code=400, detail="Admins cannot delete their own account")

    user = await storage.users.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    await storage.users.delete_user(user_id)
    await log_activity(
        storage, "delete_user",
        user_id=admin.id, entity_type="user", entity_id=user_id,
        details={"username": user.username},
        request=request,
    )
    return {"message": "User deleted successfully"}


# =========================================================================
# DESTINATIONS
# =========================================================================

@router.get("/destinations", response_model=List[DestinationWithStatsResponse])
async def list_destinations_with_stats(
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Every destination, active or not, with booking count and revenue"""
    with_stats = await storage.destinations.get_destinations_with_stats()
    return [
        DestinationWithStatsResponse(
            **DestinationResponse.model_validate(item.destination).model_dump(),
            booking_count=item.booking_count,
            revenue=item.revenue,
        )
        for item in with_stats
    ]


@router.post("/destinations", response_model=DestinationResponse, status_code=status.HTTP_201_CREATED)
async def create_destination(
    destination_data: DestinationCreate,
    request: Request,
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Add a destination to the catalog (409 if its image URL is taken)"""
    destination = await storage.destinations.create_destination(destination_data.model_dump(exclude_unset=True))
    await log_activity(
        storage, "create_destination",
        user_id=admin.id, entity_type="destination", entity_id=destination.id,
        details={"name": destination.name},
        request=request,
    )
    return destination


@router.patch("/destinations/{destination_id}", response_model=DestinationResponse)
async def update_destination(
    destination_id: int,
    updates: DestinationUpdate,
    request: Request,
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Partially update a destination (409 if the new image URL is taken)"""
    update_data = updates.model_dump(exclude_unset=True)
    destination = await storage.destinations.update_destination(destination_id, update_data)
    await log_activity(
        storage, "update_destination",
        user_id=admin.id, entity_type="destination", entity_id=destination_id,
        details={"fields": sorted(update_data)},
        request=request,
    )
    return destination


@router.delete("/destinations/{destination_id}")
async def delete_destination(
    destination_id: int,
    request: Request,
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Permanently delete a destination"""
    destination = await storage.destinations.get_destination(destination_id)
    if not destination:
        raise HTTPException(status_code=404, detail="Destination not found")

    await storage.destinations.delete_destination(destination_id)
    await log_activity(
        storage, "delete_destination",
        user_id=admin.id, entity_type="destination", entity_id=destination_id,
        details={"name": destination.name},
        request=request,
    )
    return {"message": "Destination deleted successfully"}


# =========================================================================
# BOOKINGS, AUDIT TRAIL & ANALYTICS
# =========================================================================

@router.get("/bookings", response_model=List[BookingWithDetailsResponse])
async def list_all_bookings(
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Every booking with destination and user, newest first"""
    return await storage.bookings.get_all_bookings()


@router.get("/activity-logs", response_model=List[ActivityLogResponse])
async def list_activity_logs(
    limit: int = Query(settings.ACTIVITY_LOG_DEFAULT_LIMIT, ge=1, le=500),
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Most recent audit entries"""
    return await storage.activity_logs.get_activity_logs(limit)


@router.get("/analytics/revenue", response_model=RevenueSummary)
async def get_revenue(
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    return await storage.analytics.get_revenue(start_date, end_date)


@router.get("/analytics", response_model=AnalyticsOverview)
async def get_analytics(
    admin: User = Depends(get_current_admin),
    storage: Storage = Depends(get_storage),
):
    """Dashboard summary: revenue, bookings and users"""
    return AnalyticsOverview(
        revenue=await storage.analytics.get_revenue(),
        bookings=await storage.analytics.get_booking_stats(),
        users=await storage.analytics.get_user_stats(),
    )

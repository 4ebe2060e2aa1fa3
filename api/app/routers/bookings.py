"""
Booking Endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List
import logging

from app.models import User
from app.routers.auth import get_current_user
from app.schemas.booking import (
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    BookingWithDetailsResponse,
)
from app.services.activity import log_activity
from app.storage import Storage, get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


async def _get_owned_booking(booking_id: int, current_user: User, storage: Storage):
    booking = await storage.bookings.get_booking(booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")

    if booking.user_id != current_user.id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have access to this booking"
        )
    return booking


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    request: Request,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Create a booking at checkout.

    Amounts are stored as submitted. A second live booking for the same
    destination and dates is rejected with 409.
    """
    destination = await storage.destinations.get_destination(booking_data.destination_id)
    if not destination or not destination.is_active:
        raise HTTPException(status_code=404, detail="Destination not found")

    booking = await storage.bookings.create_booking({
        **booking_data.model_dump(exclude_unset=True),
        "user_id": current_user.id,
    })
    await log_activity(
        storage, "create_booking",
        user_id=current_user.id, entity_type="booking", entity_id=booking.id,
        details={"destination_id": booking.destination_id, "total_amount": str(booking.total_amount)},
        request=request,
    )
    return booking


@router.get("", response_model=List[BookingWithDetailsResponse])
async def list_bookings(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    List the current user's bookings, newest first
    """
    return await storage.bookings.get_user_bookings(current_user.id)


@router.get("/{booking_id}", response_model=BookingWithDetailsResponse)
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Get booking details
    """
    return await _get_owned_booking(booking_id, current_user, storage)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    updates: BookingUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Update payment details or trip options of a booking
    """
    await _get_owned_booking(booking_id, current_user, storage)

    booking = await storage.bookings.update_booking(booking_id, updates.model_dump(exclude_unset=True))
    logger.info(f"Booking updated: {booking_id}")
    return booking


@router.post("/{booking_id}/cancel", response_model=BookingWithDetailsResponse)
async def cancel_booking(
    booking_id: int,
    request: Request,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Cancel a booking; the record is kept with status "cancelled"
    """
    await _get_owned_booking(booking_id, current_user, storage)

    await storage.bookings.cancel_booking(booking_id)
    await log_activity(
        storage, "cancel_booking",
        user_id=current_user.id, entity_type="booking", entity_id=booking_id,
        request=request,
    )
    return await storage.bookings.get_booking(booking_id)

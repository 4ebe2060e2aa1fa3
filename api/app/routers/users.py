"""
User Profile Endpoints
"""
from fastapi import APIRouter, Depends
from typing import List
import logging

from app.routers.auth import get_current_user
from app.models import User
from app.schemas.booking import BookingWithDetailsResponse
from app.schemas.user import UserResponse, UserUpdate
from app.storage import Storage, get_storage

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/me", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """
    Get current user profile
    """
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_profile(
    updates: UserUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Update current user profile
    """
    user = await storage.users.update_user(current_user.id, updates.model_dump(exclude_unset=True))
    logger.info(f"User profile updated: {user.id}")
    return user


@router.get("/me/bookings", response_model=List[BookingWithDetailsResponse])
async def get_my_bookings(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    """
    Get the current user's bookings, newest first
    """
    return await storage.bookings.get_user_bookings(current_user.id)

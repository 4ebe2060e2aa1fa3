"""
Review Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from app.schemas.user import UserResponse


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=255)
    comment: str = Field(..., min_length=1)
    trip_date: Optional[date] = None


class ReviewResponse(BaseModel):
    id: int
    destination_id: int
    user_id: str
    rating: int
    title: Optional[str] = None
    comment: str
    trip_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewWithUserResponse(ReviewResponse):
    user: UserResponse


class ReviewStats(BaseModel):
    average_rating: float
    total_reviews: int

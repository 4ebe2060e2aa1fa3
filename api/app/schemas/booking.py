"""
Booking Schemas
"""
from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.schemas.destination import DestinationResponse
from app.schemas.user import UserResponse


class BookingCreate(BaseModel):
    """Schema for creating a booking at checkout"""
    destination_id: int
    check_in: date
    check_out: date
    guests: int = Field(1, ge=1)
    travel_class: str = "economy"
    upgrades: List[str] = []
    total_amount: Decimal = Field(..., ge=0)
    original_amount: Optional[Decimal] = None
    applied_coupon_code: Optional[str] = None
    coupon_discount: Optional[Decimal] = None
    payment_status: str = "pending"
    stripe_payment_intent_id: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingUpdate(BaseModel):
    """Schema for partially updating a booking"""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    guests: Optional[int] = Field(None, ge=1)
    travel_class: Optional[str] = None
    upgrades: Optional[List[str]] = None
    total_amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[str] = None
    payment_status: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None


class BookingResponse(BaseModel):
    """Schema for booking response"""
    id: int
    user_id: str
    destination_id: int
    check_in: date
    check_out: date
    guests: int
    travel_class: Optional[str] = None
    upgrades: List[str] = []
    total_amount: Decimal
    original_amount: Optional[Decimal] = None
    applied_coupon_code: Optional[str] = None
    coupon_discount: Optional[Decimal] = None
    status: str
    payment_status: str
    stripe_payment_intent_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingWithDetailsResponse(BookingResponse):
    """Booking joined with its destination and user"""
    destination: DestinationResponse
    user: UserResponse

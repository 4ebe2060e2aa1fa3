"""
Destination Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class DestinationBase(BaseModel):
    """Base destination schema"""
    name: str = Field(..., min_length=1, max_length=255)
    country: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    price: Decimal
    original_price: Optional[Decimal] = None
    duration: int = Field(..., ge=1)
    max_guests: int = Field(2, ge=1)
    rating: Optional[Decimal] = None
    image_url: Optional[str] = None
    is_active: bool = True

    promo_tag: Optional[str] = None
    discount_percentage: Optional[int] = 0
    promo_expiry: Optional[datetime] = None
    seasonal_tag: Optional[str] = None
    flash_sale: Optional[bool] = False
    flash_sale_end: Optional[datetime] = None
    coupon_code: Optional[str] = None
    discount_type: Optional[str] = None
    group_discount_min: Optional[int] = 0
    loyalty_discount: Optional[int] = 0
    bundle_deal: Optional[str] = None

    class Config:
        from_attributes = True


class DestinationCreate(DestinationBase):
    """Schema for creating a destination (admin)"""
    pass


class DestinationUpdate(BaseModel):
    """Schema for partially updating a destination (admin)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    country: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = None
    original_price: Optional[Decimal] = None
    duration: Optional[int] = Field(None, ge=1)
    max_guests: Optional[int] = Field(None, ge=1)
    rating: Optional[Decimal] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None

    promo_tag: Optional[str] = None
    discount_percentage: Optional[int] = None
    promo_expiry: Optional[datetime] = None
    seasonal_tag: Optional[str] = None
    flash_sale: Optional[bool] = None
    flash_sale_end: Optional[datetime] = None
    coupon_code: Optional[str] = None
    discount_type: Optional[str] = None
    group_discount_min: Optional[int] = None
    loyalty_discount: Optional[int] = None
    bundle_deal: Optional[str] = None


class DestinationResponse(DestinationBase):
    """Schema for destination response"""
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DestinationWithStatsResponse(DestinationResponse):
    """Destination plus booking totals, used by the admin dashboard"""
    booking_count: int = 0
    revenue: str = "0"

"""
Admin Analytics Schemas
"""
from pydantic import BaseModel


class RevenueSummary(BaseModel):
    total: str
    period: str


class BookingStats(BaseModel):
    total: int
    this_month: int
    growth: int


class UserStats(BaseModel):
    total: int
    active: int
    growth: int


class AnalyticsOverview(BaseModel):
    revenue: RevenueSummary
    bookings: BookingStats
    users: UserStats

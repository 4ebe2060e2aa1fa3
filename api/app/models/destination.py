"""
Destination Model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, Boolean

from app.utils.database import Base
from app.utils.dates import utcnow


class Destination(Base):
    __tablename__ = "destinations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    country = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    price = Column(Numeric(10, 2), nullable=False)
    original_price = Column(Numeric(10, 2))
    duration = Column(Integer, nullable=False)  # days
    max_guests = Column(Integer, nullable=False, default=2)
    rating = Column(Numeric(3, 1))

    # Unique so two catalog entries can never share a hero image
    image_url = Column(Text, unique=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Promotions - each one is independent of the others
    promo_tag = Column(String(100))
    discount_percentage = Column(Integer, default=0)
    promo_expiry = Column(DateTime)
    seasonal_tag = Column(String(100))
    flash_sale = Column(Boolean, default=False)
    flash_sale_end = Column(DateTime)
    coupon_code = Column(String(50))
    discount_type = Column(String(50))  # percentage, fixed
    group_discount_min = Column(Integer, default=0)
    loyalty_discount = Column(Integer, default=0)
    bundle_deal = Column(String(255))

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Destination {self.name} ({self.country})>"

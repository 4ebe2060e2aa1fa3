"""
Booking Model
"""
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, JSON, ForeignKey, Index, text
from sqlalchemy.orm import relationship

from app.utils.database import Base
from app.utils.dates import utcnow

CANCELLED = "cancelled"

# Only one live booking per user, destination and stay
_ACTIVE_STAY = text(f"status <> '{CANCELLED}'")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            "uq_bookings_active_stay",
            "user_id", "destination_id", "check_in", "check_out",
            unique=True,
            postgresql_where=_ACTIVE_STAY,
            sqlite_where=_ACTIVE_STAY,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    destination_id = Column(Integer, ForeignKey("destinations.id"), nullable=False, index=True)

    check_in = Column(Date, nullable=False)
    check_out = Column(Date, nullable=False)
    guests = Column(Integer, nullable=False, default=1)
    travel_class = Column(String(50), default="economy")  # economy, business, first
    upgrades = Column(JSON, default=list)

    total_amount = Column(Numeric(10, 2), nullable=False)
    original_amount = Column(Numeric(10, 2))
    applied_coupon_code = Column(String(50))
    coupon_discount = Column(Numeric(10, 2))

    status = Column(String(50), nullable=False, default="confirmed")  # confirmed, cancelled
    payment_status = Column(String(50), nullable=False, default="pending")  # pending, paid, refunded
    stripe_payment_intent_id = Column(String(255))

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    destination = relationship("Destination")
    user = relationship("User")

    def __repr__(self):
        return f"<Booking {self.id} {self.user_id} -> {self.destination_id} ({self.status})>"

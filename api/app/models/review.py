"""
Review Model
"""
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.utils.database import Base
from app.utils.dates import utcnow


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, autoincrement=True)
    destination_id = Column(Integer, ForeignKey("destinations.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)

    rating = Column(Integer, nullable=False)  # 1-5
    title = Column(String(255))
    comment = Column(Text, nullable=False)
    trip_date = Column(Date)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    user = relationship("User")

    def __repr__(self):
        return f"<Review {self.rating}/5 for {self.destination_id}>"

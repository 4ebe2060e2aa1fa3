"""SQLAlchemy Models"""
from app.models.user import User
from app.models.destination import Destination
from app.models.booking import Booking
from app.models.activity_log import ActivityLog
from app.models.review import Review

__all__ = ["User", "Destination", "Booking", "ActivityLog", "Review"]

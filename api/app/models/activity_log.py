"""
Activity Log Model - append-only audit trail
"""
from sqlalchemy import Column, Integer, String, DateTime, JSON

from app.utils.database import Base
from app.utils.dates import utcnow


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), index=True)
    action = Column(String(100), nullable=False)
    entity_type = Column(String(50))
    entity_id = Column(String(100))
    details = Column(JSON, default=dict)
    ip_address = Column(String(64))

    created_at = Column(DateTime, default=utcnow, index=True)

    def __repr__(self):
        return f"<ActivityLog {self.action} by {self.user_id}>"

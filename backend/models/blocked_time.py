"""Blocked time model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from backend.database import Base


class BlockedTimeSlot(Base):
    """An ad-hoc range during which a provider takes no appointments."""
    __tablename__ = "blocked_time_slots"

    id = Column(Integer, primary_key=True)
    provider_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    reason = Column(String, nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(String, nullable=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<BlockedTimeSlot {self.provider_id} {self.start_time} - {self.end_time}>"

"""Weekly provider availability model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Time, UniqueConstraint
from sqlalchemy.sql import func

from backend.database import Base


class ProviderAvailability(Base):
    """One provider's working hours for one weekday (0 = Sunday)."""
    __tablename__ = "provider_availability"
    __table_args__ = (
        UniqueConstraint("provider_id", "day_of_week", name="uq_provider_availability_day"),
    )

    id = Column(Integer, primary_key=True)
    provider_id = Column(String, nullable=False, index=True)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    break_start_time = Column(Time, nullable=True)
    break_end_time = Column(Time, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

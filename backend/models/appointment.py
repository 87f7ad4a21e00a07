"""Appointment model definitions."""

from sqlalchemy import Column, Integer, DateTime, String
from backend.database import Base

CANCELLED_STATUS = "cancelled"


class Appointment(Base):
    """Represents a booked appointment. Read-only to the slot generator."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    provider_id = Column(String, index=True)
    patient_id = Column(String)
    start_time = Column(DateTime)
    end_time = Column(DateTime)
    status = Column(String, default="scheduled")

"""Availability model definitions."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    Time,
    UniqueConstraint,
    func,
)
from physiohome.database import Base


class WeeklyAvailabilityWindow(Base):
    """A recurring weekly working window for a therapist (0=Sunday, 6=Saturday)."""
    __tablename__ = "therapist_availability"
    __table_args__ = (
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='ck_availability_day_of_week'),
        UniqueConstraint('therapist_id', 'day_of_week', 'start_time', 'end_time', name='uq_therapist_day_time'),
    )

    id = Column(Integer, primary_key=True)
    therapist_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    day_of_week = Column(SmallInteger, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

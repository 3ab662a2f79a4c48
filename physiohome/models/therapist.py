"""Therapist profile model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from physiohome.database import Base


class TherapistProfile(Base):
    """Extended profile for therapist users."""
    __tablename__ = "therapists"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    specialization = Column(String(255), nullable=False, default='')
    license_number = Column(String(100), unique=True)
    experience_years = Column(Integer, nullable=False, default=0)
    bio = Column(Text)
    hourly_rate = Column(Numeric(10, 2), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)

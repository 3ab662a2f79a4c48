"""User model definitions."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func
from physiohome.database import Base


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255))
    first_name = Column(String(100), nullable=False, default='')
    last_name = Column(String(100), nullable=False, default='')
    phone = Column(String(20))
    role = Column(String(20), nullable=False, default='patient', index=True)  # admin/therapist/patient
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

"""Notification model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from physiohome.database import Base


class Notification(Base):
    """A message for a single recipient, usually about an appointment."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(50), nullable=False, default='info')
    is_read = Column(Boolean, nullable=False, default=False)
    related_id = Column(Integer)
    related_type = Column(String(50))
    created_at = Column(DateTime, server_default=func.now())

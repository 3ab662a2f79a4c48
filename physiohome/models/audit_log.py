"""Audit log model definitions."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, func
from physiohome.database import Base


class AuditLog(Base):
    """Append-only record of a change made to a row."""
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    action = Column(String(100), nullable=False)
    table_name = Column(String(100), nullable=False)
    record_id = Column(Integer)
    old_values = Column(JSON)
    new_values = Column(JSON)
    created_at = Column(DateTime, server_default=func.now())

"""Appointment model definitions."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    func,
    text,
)
from physiohome.database import ACTIVE_SLOT_INDEX_NAME, ACTIVE_SLOT_PREDICATE, Base


class Appointment(Base):
    """Represents a home visit booked with a therapist."""
    __tablename__ = "appointments"
    __table_args__ = (
        # One live booking per therapist slot; cancelled/completed rows free it.
        Index(
            ACTIVE_SLOT_INDEX_NAME,
            'therapist_id',
            'appointment_date',
            'appointment_time',
            unique=True,
            sqlite_where=text(ACTIVE_SLOT_PREDICATE),
            postgresql_where=text(ACTIVE_SLOT_PREDICATE),
        ),
        Index('idx_appointments_therapist_date', 'therapist_id', 'appointment_date'),
    )

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    therapist_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    service_type = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default='scheduled', index=True)
    duration_minutes = Column(Integer, nullable=False, default=60)
    notes = Column(Text)
    cancellation_reason = Column(Text)
    patient_address = Column(Text, nullable=False)
    total_cost = Column(Numeric(10, 2))
    payment_status = Column(String(20), nullable=False, default='pending')
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

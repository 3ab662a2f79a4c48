import re
from datetime import time

from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from physiohome.database import ensure_appointment_schema, ensure_availability_schema, get_db
from physiohome.scheduling.service import SchedulingService
from physiohome.scheduling.storage import SqlAlchemySchedulingStore

TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')


def parse_clock_time(value):
    """Accept ``HH:MM`` (hour may be one digit) or a ``time``."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValueError('Time must be a string in HH:MM format.')

    normalized = value.strip()
    if not TIME_PATTERN.match(normalized):
        raise ValueError('Time must be in HH:MM format.')

    hour, minute = normalized.split(':')
    return time(int(hour), int(minute))


def ensure_database_ready() -> None:
    try:
        ensure_availability_schema()
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    ensure_database_ready()
    return SchedulingService(SqlAlchemySchedulingStore(db))

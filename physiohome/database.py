import os
from dotenv import load_dotenv
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from physiohome.core import config


load_dotenv()
DATABASE_URL = os.getenv("DATABASE_URL")

engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

ACTIVE_SLOT_INDEX_NAME = 'uq_appointments_active_slot'
ACTIVE_SLOT_PREDICATE = "status NOT IN ('cancelled', 'completed')"

_schema_lock = Lock()
_availability_schema_checked = False
_appointment_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_availability_schema() -> None:
    global _availability_schema_checked

    if _availability_schema_checked:
        return

    with _schema_lock:
        if _availability_schema_checked:
            return

        inspector = inspect(engine)

        if 'therapist_availability' not in inspector.get_table_names():
            _availability_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('therapist_availability')}
        migration_steps = [
            ('is_available', 'ALTER TABLE therapist_availability ADD COLUMN is_available BOOLEAN DEFAULT TRUE'),
            ('updated_at', 'ALTER TABLE therapist_availability ADD COLUMN updated_at TIMESTAMP'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_therapist_availability_day '
                    'ON therapist_availability(therapist_id, day_of_week)'
                )
            )

        _availability_schema_checked = True


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        inspector = inspect(engine)

        if 'appointments' not in inspector.get_table_names():
            _appointment_schema_checked = True
            return

        existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
        migration_steps = [
            ('duration_minutes', 'ALTER TABLE appointments ADD COLUMN duration_minutes INTEGER DEFAULT 60'),
            ('total_cost', 'ALTER TABLE appointments ADD COLUMN total_cost NUMERIC(10, 2)'),
            ('payment_status', "ALTER TABLE appointments ADD COLUMN payment_status VARCHAR(20) DEFAULT 'pending'"),
            ('notes', 'ALTER TABLE appointments ADD COLUMN notes TEXT'),
            ('cancellation_reason', 'ALTER TABLE appointments ADD COLUMN cancellation_reason TEXT'),
        ]

        with engine.begin() as connection:
            for column_name, statement in migration_steps:
                if column_name not in existing_columns:
                    connection.execute(text(statement))
            connection.execute(
                text(
                    f'CREATE UNIQUE INDEX IF NOT EXISTS {ACTIVE_SLOT_INDEX_NAME} '
                    'ON appointments(therapist_id, appointment_date, appointment_time) '
                    f'WHERE {ACTIVE_SLOT_PREDICATE}'
                )
            )
            connection.execute(
                text(
                    'CREATE INDEX IF NOT EXISTS idx_appointments_therapist_date '
                    'ON appointments(therapist_id, appointment_date)'
                )
            )

        _appointment_schema_checked = True

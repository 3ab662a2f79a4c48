from datetime import date, time
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from physiohome.auth.policy import Actor
from physiohome.database import Base
from physiohome.models.appointment import Appointment
from physiohome.models.availability import WeeklyAvailabilityWindow
from physiohome.models.user import User
from physiohome.scheduling.errors import InternalError
from physiohome.scheduling.service import SchedulingService
from physiohome.scheduling.storage import (
    DuplicateRecordError,
    SqlAlchemySchedulingStore,
    StorageError,
    is_unique_violation,
)


def _appointment(**overrides) -> Appointment:
    fields = {
        'patient_id': 4,
        'therapist_id': 2,
        'appointment_date': date(2024, 6, 10),
        'appointment_time': time(9, 0),
        'service_type': 'Ortopedi',
        'status': 'scheduled',
        'patient_address': 'Jl. Sudirman No. 1, Jakarta',
    }
    fields.update(overrides)
    return Appointment(**fields)


@pytest.fixture
def enforcing_store():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, 'connect')
    def enable_foreign_keys(dbapi_connection, _connection_record):
        dbapi_connection.execute('PRAGMA foreign_keys=ON')

    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    session.add_all(
        [
            User(id=1, email='admin1@physiohome.test', hashed_password='', role='admin'),
            User(id=2, email='therapist2@physiohome.test', hashed_password='', role='therapist'),
            User(id=4, email='patient4@physiohome.test', hashed_password='', role='patient'),
        ]
    )
    session.commit()
    try:
        yield SqlAlchemySchedulingStore(session)
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


def test_duplicate_live_slot_raises_duplicate_record(store, people) -> None:
    store.add_appointment(_appointment())

    with pytest.raises(DuplicateRecordError):
        store.add_appointment(_appointment(patient_id=5))


def test_duplicate_window_raises_duplicate_record(store, people) -> None:
    store.save_window(WeeklyAvailabilityWindow(therapist_id=2, day_of_week=1, start_time=time(9), end_time=time(12)))

    with pytest.raises(DuplicateRecordError):
        store.save_window(
            WeeklyAvailabilityWindow(therapist_id=2, day_of_week=1, start_time=time(9), end_time=time(12))
        )


def test_not_null_violation_is_a_plain_storage_error(store, people) -> None:
    with pytest.raises(StorageError) as exception_info:
        store.add_appointment(_appointment(service_type=None))

    assert not isinstance(exception_info.value, DuplicateRecordError)


def test_foreign_key_violation_is_a_plain_storage_error(enforcing_store) -> None:
    with pytest.raises(StorageError) as exception_info:
        enforcing_store.add_appointment(_appointment(patient_id=999))

    assert not isinstance(exception_info.value, DuplicateRecordError)
    assert enforcing_store.db.query(Appointment).count() == 0


def test_foreign_key_violation_surfaces_as_internal_error(enforcing_store, monkeypatch: pytest.MonkeyPatch) -> None:
    # Skip the patient lookup so the write reaches the database constraint.
    monkeypatch.setattr(enforcing_store, 'get_active_patient', lambda _patient_id: object())
    service = SchedulingService(enforcing_store)

    with pytest.raises(InternalError):
        service.create_appointment(
            Actor(user_id=1, role='admin'),
            therapist_id=2,
            appointment_date=date(2024, 6, 10),
            appointment_time=time(9, 0),
            service_type='Ortopedi',
            address='Jl. Sudirman No. 1, Jakarta',
            patient_id=999,
        )


@pytest.mark.parametrize(
    ('orig', 'expected'),
    [
        (SimpleNamespace(sqlstate='23505'), True),
        (SimpleNamespace(sqlstate='23503'), False),
        (SimpleNamespace(pgcode='23505'), True),
        (SimpleNamespace(pgcode='23502'), False),
        ('UNIQUE constraint failed: appointments.therapist_id', True),
        ('FOREIGN KEY constraint failed', False),
        ('NOT NULL constraint failed: appointments.service_type', False),
        ("(1062, \"Duplicate entry '2-2024-06-10' for key 'uq_therapist_day_time'\")", True),
    ],
)
def test_is_unique_violation(orig, expected: bool) -> None:
    assert is_unique_violation(IntegrityError('INSERT', {}, orig)) is expected

import os
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from physiohome.auth.policy import Actor  # noqa: E402
from physiohome.database import Base  # noqa: E402
from physiohome.models import appointment, audit_log, availability, notification  # noqa: E402,F401
from physiohome.models.therapist import TherapistProfile  # noqa: E402
from physiohome.models.user import User  # noqa: E402
from physiohome.scheduling.service import SchedulingService  # noqa: E402
from physiohome.scheduling.storage import SqlAlchemySchedulingStore  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return SqlAlchemySchedulingStore(db)


@pytest.fixture
def service(store):
    return SchedulingService(store)


def add_user(db, user_id: int, role: str, *, is_active: bool = True, first_name: str = 'Test') -> User:
    user = User(
        id=user_id,
        email=f'{role}{user_id}@physiohome.test',
        hashed_password='',
        first_name=first_name,
        last_name=f'User{user_id}',
        role=role,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def people(db):
    """Admin 1, therapists 2 (rate 200000) and 3 (no profile), patients 4 and 5, inactive therapist 6."""
    admin = add_user(db, 1, 'admin')
    therapist = add_user(db, 2, 'therapist', first_name='Sarah')
    other_therapist = add_user(db, 3, 'therapist', first_name='Ahmad')
    patient = add_user(db, 4, 'patient', first_name='John')
    other_patient = add_user(db, 5, 'patient', first_name='Anna')
    inactive_therapist = add_user(db, 6, 'therapist', is_active=False)

    db.add(
        TherapistProfile(
            user_id=therapist.id,
            specialization='Ortopedi & Olahraga',
            license_number='FT001234',
            hourly_rate=Decimal('200000.00'),
        )
    )
    db.commit()

    return {
        'admin': Actor(user_id=admin.id, role='admin'),
        'therapist': Actor(user_id=therapist.id, role='therapist'),
        'other_therapist': Actor(user_id=other_therapist.id, role='therapist'),
        'patient': Actor(user_id=patient.id, role='patient'),
        'other_patient': Actor(user_id=other_patient.id, role='patient'),
        'inactive_therapist_id': inactive_therapist.id,
    }

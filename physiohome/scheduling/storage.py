"""Storage access for the scheduling core.

The core only talks to a ``SchedulingStore``. ``SqlAlchemySchedulingStore`` is
the implementation used by the API, backed by a request-scoped ``Session``.
"""

from datetime import date, time
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from physiohome.models.appointment import Appointment
from physiohome.models.audit_log import AuditLog
from physiohome.models.availability import WeeklyAvailabilityWindow
from physiohome.models.notification import Notification
from physiohome.models.therapist import TherapistProfile
from physiohome.models.user import User
from physiohome.scheduling.statuses import BLOCKING_STATUSES


class StorageError(Exception):
    """The store failed for a reason the caller cannot act on."""


class DuplicateRecordError(StorageError):
    """A uniqueness constraint rejected the write."""


UNIQUE_VIOLATION_SQLSTATE = '23505'


def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell unique violations apart from foreign key, NOT NULL and check failures."""
    orig = exc.orig
    sqlstate = getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE

    message = str(orig).lower()
    return 'unique constraint' in message or 'duplicate entry' in message


class SchedulingStore(Protocol):
    def get_active_therapist(self, therapist_id: int) -> User | None: ...

    def get_active_patient(self, patient_id: int) -> User | None: ...

    def get_therapist_profile(self, therapist_id: int) -> TherapistProfile | None: ...

    def list_active_therapists(self) -> list[tuple[User, TherapistProfile | None]]: ...

    def find_blocking_appointment(
        self, therapist_id: int, appointment_date: date, appointment_time: time
    ) -> Appointment | None: ...

    def list_blocking_times(self, therapist_id: int, appointment_date: date) -> set[time]: ...

    def add_appointment(self, appointment: Appointment) -> Appointment: ...

    def get_appointment(self, appointment_id: int) -> Appointment | None: ...

    def query_appointments(
        self,
        *,
        patient_id: int | None = None,
        therapist_id: int | None = None,
        status: str | None = None,
        appointment_date: date | None = None,
        limit: int = 50,
    ) -> list[Appointment]: ...

    def save_appointment(self, appointment: Appointment, audit_entry: AuditLog | None = None) -> Appointment: ...

    def add_notifications(self, notifications: Iterable[Notification]) -> None: ...

    def list_notifications(self, user_id: int, unread_only: bool = False) -> list[Notification]: ...

    def list_windows(self, therapist_id: int) -> list[WeeklyAvailabilityWindow]: ...

    def list_active_windows(self, therapist_id: int, day_of_week: int) -> list[WeeklyAvailabilityWindow]: ...

    def get_window(self, window_id: int) -> WeeklyAvailabilityWindow | None: ...

    def save_window(self, window: WeeklyAvailabilityWindow) -> WeeklyAvailabilityWindow: ...

    def delete_window(self, window: WeeklyAvailabilityWindow) -> None: ...


class SqlAlchemySchedulingStore:
    """``SchedulingStore`` over a SQLAlchemy session.

    Every write commits. Unique violations surface as ``DuplicateRecordError``,
    any other database failure (other integrity errors included) as
    ``StorageError``. In both cases the session is rolled back first.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if is_unique_violation(exc):
                raise DuplicateRecordError(str(exc.orig)) from exc
            raise StorageError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(str(exc)) from exc

    def _read(self, statement):
        try:
            return self.db.execute(statement)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(str(exc)) from exc

    def get_active_therapist(self, therapist_id: int) -> User | None:
        return self._read(
            select(User).where(
                User.id == therapist_id,
                User.role == 'therapist',
                User.is_active.is_(True),
            )
        ).scalars().first()

    def get_active_patient(self, patient_id: int) -> User | None:
        return self._read(
            select(User).where(
                User.id == patient_id,
                User.role == 'patient',
                User.is_active.is_(True),
            )
        ).scalars().first()

    def get_therapist_profile(self, therapist_id: int) -> TherapistProfile | None:
        return self._read(
            select(TherapistProfile).where(TherapistProfile.user_id == therapist_id)
        ).scalars().first()

    def list_active_therapists(self) -> list[tuple[User, TherapistProfile | None]]:
        rows = self._read(
            select(User, TherapistProfile)
            .outerjoin(TherapistProfile, TherapistProfile.user_id == User.id)
            .where(User.role == 'therapist', User.is_active.is_(True))
            .order_by(User.last_name.asc(), User.first_name.asc(), User.id.asc())
        ).all()
        return [(user, profile) for user, profile in rows]

    def find_blocking_appointment(
        self, therapist_id: int, appointment_date: date, appointment_time: time
    ) -> Appointment | None:
        return self._read(
            select(Appointment).where(
                Appointment.therapist_id == therapist_id,
                Appointment.appointment_date == appointment_date,
                Appointment.appointment_time == appointment_time,
                Appointment.status.in_(BLOCKING_STATUSES),
            )
        ).scalars().first()

    def list_blocking_times(self, therapist_id: int, appointment_date: date) -> set[time]:
        booked_times = self._read(
            select(Appointment.appointment_time).where(
                Appointment.therapist_id == therapist_id,
                Appointment.appointment_date == appointment_date,
                Appointment.status.in_(BLOCKING_STATUSES),
            )
        ).scalars().all()
        return set(booked_times)

    def add_appointment(self, appointment: Appointment) -> Appointment:
        self.db.add(appointment)
        self._commit()
        self.db.refresh(appointment)
        return appointment

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        try:
            return self.db.get(Appointment, appointment_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(str(exc)) from exc

    def query_appointments(
        self,
        *,
        patient_id: int | None = None,
        therapist_id: int | None = None,
        status: str | None = None,
        appointment_date: date | None = None,
        limit: int = 50,
    ) -> list[Appointment]:
        statement = select(Appointment)

        if patient_id is not None:
            statement = statement.where(Appointment.patient_id == patient_id)
        if therapist_id is not None:
            statement = statement.where(Appointment.therapist_id == therapist_id)
        if status:
            statement = statement.where(Appointment.status == status)
        if appointment_date is not None:
            statement = statement.where(Appointment.appointment_date == appointment_date)

        statement = statement.order_by(
            Appointment.appointment_date.desc(),
            Appointment.appointment_time.desc(),
            Appointment.id.desc(),
        ).limit(limit)

        return list(self._read(statement).scalars().all())

    def save_appointment(self, appointment: Appointment, audit_entry: AuditLog | None = None) -> Appointment:
        self.db.add(appointment)
        if audit_entry is not None:
            self.db.add(audit_entry)
        self._commit()
        self.db.refresh(appointment)
        return appointment

    def add_notifications(self, notifications: Iterable[Notification]) -> None:
        self.db.add_all(list(notifications))
        self._commit()

    def list_notifications(self, user_id: int, unread_only: bool = False) -> list[Notification]:
        statement = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            statement = statement.where(Notification.is_read.is_(False))
        statement = statement.order_by(Notification.created_at.desc(), Notification.id.desc())
        return list(self._read(statement).scalars().all())

    def list_windows(self, therapist_id: int) -> list[WeeklyAvailabilityWindow]:
        statement = select(WeeklyAvailabilityWindow).where(
            WeeklyAvailabilityWindow.therapist_id == therapist_id,
        ).order_by(
            WeeklyAvailabilityWindow.day_of_week.asc(),
            WeeklyAvailabilityWindow.start_time.asc(),
            WeeklyAvailabilityWindow.id.asc(),
        )
        return list(self._read(statement).scalars().all())

    def list_active_windows(self, therapist_id: int, day_of_week: int) -> list[WeeklyAvailabilityWindow]:
        statement = select(WeeklyAvailabilityWindow).where(
            WeeklyAvailabilityWindow.therapist_id == therapist_id,
            WeeklyAvailabilityWindow.day_of_week == day_of_week,
            WeeklyAvailabilityWindow.is_available.is_(True),
        ).order_by(WeeklyAvailabilityWindow.start_time.asc())
        return list(self._read(statement).scalars().all())

    def get_window(self, window_id: int) -> WeeklyAvailabilityWindow | None:
        try:
            return self.db.get(WeeklyAvailabilityWindow, window_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StorageError(str(exc)) from exc

    def save_window(self, window: WeeklyAvailabilityWindow) -> WeeklyAvailabilityWindow:
        self.db.add(window)
        self._commit()
        self.db.refresh(window)
        return window

    def delete_window(self, window: WeeklyAvailabilityWindow) -> None:
        self.db.delete(window)
        self._commit()

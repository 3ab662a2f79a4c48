"""Scheduling operations exposed to the HTTP layer.

Every operation is one unit of work over the injected store. Storage
failures are logged here and reported as ``InternalError`` so no driver
detail reaches the caller.
"""

import logging
from contextlib import contextmanager
from datetime import date, time
from decimal import Decimal

from physiohome.auth.policy import Actor
from physiohome.models.appointment import Appointment
from physiohome.models.availability import WeeklyAvailabilityWindow
from physiohome.models.notification import Notification
from physiohome.models.therapist import TherapistProfile
from physiohome.models.user import User
from physiohome.scheduling import availability, lifecycle
from physiohome.scheduling.availability import TimeSlot
from physiohome.scheduling.errors import InternalError
from physiohome.scheduling.storage import SchedulingStore, StorageError

logger = logging.getLogger(__name__)


class SchedulingService:
    def __init__(self, store: SchedulingStore):
        self.store = store

    @contextmanager
    def _unit_of_work(self, operation: str):
        try:
            yield
        except StorageError as exc:
            logger.exception('%s failed', operation)
            raise InternalError() from exc

    def create_appointment(
        self,
        actor: Actor,
        *,
        therapist_id: int,
        appointment_date: date,
        appointment_time: time,
        service_type: str,
        address: str,
        patient_id: int | None = None,
        notes: str | None = None,
        duration_minutes: int | None = None,
        total_cost: Decimal | None = None,
    ) -> Appointment:
        with self._unit_of_work('Create appointment'):
            return lifecycle.create_appointment(
                self.store,
                actor,
                therapist_id=therapist_id,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                service_type=service_type,
                address=address,
                patient_id=patient_id,
                notes=notes,
                duration_minutes=duration_minutes,
                total_cost=total_cost,
            )

    def list_appointments(
        self,
        actor: Actor,
        *,
        status: str | None = None,
        appointment_date: date | None = None,
        limit: int | None = None,
    ) -> list[Appointment]:
        with self._unit_of_work('List appointments'):
            return lifecycle.list_appointments(
                self.store,
                actor,
                status=status,
                appointment_date=appointment_date,
                limit=limit,
            )

    def update_appointment_status(
        self,
        actor: Actor,
        appointment_id: int,
        new_status: str,
        notes: str | None = None,
        cancellation_reason: str | None = None,
    ) -> Appointment:
        with self._unit_of_work('Update appointment status'):
            return lifecycle.update_status(
                self.store,
                actor,
                appointment_id,
                new_status,
                notes,
                cancellation_reason=cancellation_reason,
            )

    def get_available_slots(self, therapist_id: int, slot_date: date) -> list[TimeSlot]:
        with self._unit_of_work('Get available slots'):
            return availability.available_slots(self.store, therapist_id, slot_date)

    def list_windows(self, therapist_id: int) -> list[WeeklyAvailabilityWindow]:
        with self._unit_of_work('List availability windows'):
            return self.store.list_windows(therapist_id)

    def add_window(
        self,
        actor: Actor,
        therapist_id: int,
        day_of_week: int,
        start_time: time,
        end_time: time,
        is_available: bool = True,
    ) -> WeeklyAvailabilityWindow:
        with self._unit_of_work('Add availability window'):
            return availability.add_window(
                self.store, actor, therapist_id, day_of_week, start_time, end_time, is_available
            )

    def update_window(self, actor: Actor, window_id: int, **changes) -> WeeklyAvailabilityWindow:
        with self._unit_of_work('Update availability window'):
            return availability.update_window(self.store, actor, window_id, **changes)

    def remove_window(self, actor: Actor, window_id: int) -> None:
        with self._unit_of_work('Remove availability window'):
            availability.remove_window(self.store, actor, window_id)

    def list_therapists(self) -> list[tuple[User, TherapistProfile | None]]:
        with self._unit_of_work('List therapists'):
            return self.store.list_active_therapists()

    def list_notifications(self, actor: Actor, unread_only: bool = False) -> list[Notification]:
        with self._unit_of_work('List notifications'):
            return self.store.list_notifications(actor.user_id, unread_only=unread_only)

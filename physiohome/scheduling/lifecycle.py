"""Appointment creation, cost and status transitions.

Statuses move ``scheduled -> confirmed -> in_progress -> completed`` and any
non-terminal status may be cancelled. Any authorized actor may set any status
while the appointment is live, backwards moves included. Once an appointment
is completed or cancelled its status is final.
"""

import logging
from datetime import date, time
from decimal import ROUND_HALF_UP, Decimal

from physiohome.auth.policy import (
    CREATE_APPOINTMENT,
    CREATE_APPOINTMENT_FOR_PATIENT,
    ROLE_ADMIN,
    ROLE_PATIENT,
    ROLE_THERAPIST,
    UPDATE_APPOINTMENT_STATUS,
    Actor,
    is_authorized,
)
from physiohome.core import config
from physiohome.models.appointment import Appointment
from physiohome.scheduling.conflicts import has_conflict
from physiohome.scheduling.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from physiohome.scheduling.notifications import build_status_audit_entry, notify_appointment_created
from physiohome.scheduling.statuses import STATUS_VALUES, AppointmentStatus, is_terminal
from physiohome.scheduling.storage import DuplicateRecordError, SchedulingStore

logger = logging.getLogger(__name__)

SLOT_ALREADY_BOOKED = 'Time slot already booked'
CENTS = Decimal('0.01')


def compute_total_cost(hourly_rate: Decimal | int | float | str, duration_minutes: int) -> Decimal:
    rate = Decimal(str(hourly_rate))
    return (rate * Decimal(duration_minutes) / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_status(value: str) -> str:
    if value not in STATUS_VALUES:
        raise ValidationError(f"Status must be one of: {', '.join(STATUS_VALUES)}.")
    return value


def _require_text(value: str | None, field_name: str) -> str:
    normalized = (value or '').strip()
    if not normalized:
        raise ValidationError(f'{field_name} is required.')
    return normalized


def create_appointment(
    store: SchedulingStore,
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
    service_type = _require_text(service_type, 'Service type')
    address = _require_text(address, 'Address')
    if duration_minutes is None:
        duration_minutes = config.DEFAULT_APPOINTMENT_DURATION_MINUTES
    if duration_minutes <= 0:
        raise ValidationError('Duration must be a positive number of minutes.')
    if total_cost is not None and total_cost < 0:
        raise ValidationError('Total cost cannot be negative.')

    if not is_authorized(actor, CREATE_APPOINTMENT):
        raise ForbiddenError('Insufficient permissions')
    if patient_id is None:
        patient_id = actor.user_id
    if not is_authorized(actor, CREATE_APPOINTMENT_FOR_PATIENT, patient_id):
        raise ForbiddenError('Only admins can book appointments for another patient.')
    if patient_id != actor.user_id and store.get_active_patient(patient_id) is None:
        raise NotFoundError('Patient not found')

    if store.get_active_therapist(therapist_id) is None:
        raise NotFoundError('Therapist not found')

    if has_conflict(store, therapist_id, appointment_date, appointment_time):
        raise ConflictError(SLOT_ALREADY_BOOKED)

    if total_cost is None:
        profile = store.get_therapist_profile(therapist_id)
        if profile is not None and profile.hourly_rate is not None:
            total_cost = compute_total_cost(profile.hourly_rate, duration_minutes)

    appointment = Appointment(
        patient_id=patient_id,
        therapist_id=therapist_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        service_type=service_type,
        status=AppointmentStatus.scheduled.value,
        duration_minutes=duration_minutes,
        notes=notes,
        patient_address=address,
        total_cost=total_cost,
    )

    try:
        appointment = store.add_appointment(appointment)
    except DuplicateRecordError as exc:
        # Lost the race to a concurrent booking of the same slot.
        logger.info(
            'Booking for therapist %s on %s %s rejected by slot constraint',
            therapist_id,
            appointment_date,
            appointment_time,
        )
        raise ConflictError(SLOT_ALREADY_BOOKED) from exc

    logger.info(
        'Appointment %s booked for patient %s with therapist %s on %s %s',
        appointment.id,
        patient_id,
        therapist_id,
        appointment_date,
        appointment_time,
    )
    notify_appointment_created(store, appointment)
    return appointment


def update_status(
    store: SchedulingStore,
    actor: Actor,
    appointment_id: int,
    new_status: str,
    notes: str | None = None,
    *,
    cancellation_reason: str | None = None,
) -> Appointment:
    validate_status(new_status)
    if cancellation_reason is not None and new_status != AppointmentStatus.cancelled.value:
        raise ValidationError('A cancellation reason can only be given when cancelling.')

    appointment = store.get_appointment(appointment_id)
    if appointment is None:
        raise NotFoundError('Appointment not found')

    if not is_authorized(actor, UPDATE_APPOINTMENT_STATUS, appointment):
        raise ForbiddenError('You are not allowed to update this appointment.')

    old_status = appointment.status
    if is_terminal(old_status) and new_status != old_status:
        raise ConflictError(f'Appointment is already {old_status} and cannot change status.')

    appointment.status = new_status
    if notes is not None:
        appointment.notes = notes
    if cancellation_reason is not None and old_status != new_status:
        appointment.cancellation_reason = cancellation_reason

    audit_entry = None
    if old_status != new_status:
        audit_entry = build_status_audit_entry(actor, appointment, old_status, new_status)

    appointment = store.save_appointment(appointment, audit_entry)

    if audit_entry is not None:
        logger.info(
            'Appointment %s status changed from %s to %s by user %s',
            appointment_id,
            old_status,
            new_status,
            actor.user_id,
        )
    return appointment


def list_appointments(
    store: SchedulingStore,
    actor: Actor,
    *,
    status: str | None = None,
    appointment_date: date | None = None,
    limit: int | None = None,
) -> list[Appointment]:
    if status is not None:
        validate_status(status)
    if limit is None:
        limit = config.DEFAULT_APPOINTMENT_LIST_LIMIT
    if limit < 1:
        raise ValidationError('Limit must be at least 1.')

    scope: dict[str, int] = {}
    if actor.role == ROLE_PATIENT:
        scope['patient_id'] = actor.user_id
    elif actor.role == ROLE_THERAPIST:
        scope['therapist_id'] = actor.user_id
    elif actor.role != ROLE_ADMIN:
        raise ForbiddenError('Insufficient permissions')

    return store.query_appointments(
        status=status,
        appointment_date=appointment_date,
        limit=limit,
        **scope,
    )

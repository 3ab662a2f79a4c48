"""Notification and audit records produced by appointment changes."""

import logging

from physiohome.auth.policy import Actor
from physiohome.models.appointment import Appointment
from physiohome.models.audit_log import AuditLog
from physiohome.models.notification import Notification
from physiohome.scheduling.storage import SchedulingStore, StorageError

logger = logging.getLogger(__name__)

APPOINTMENT_NOTIFICATION_TYPE = 'appointment'
STATUS_CHANGE_ACTION = 'status_change'
APPOINTMENTS_TABLE = 'appointments'


def format_slot(appointment: Appointment) -> tuple[str, str]:
    return (
        appointment.appointment_date.strftime('%d/%m/%Y'),
        appointment.appointment_time.strftime('%H:%M'),
    )


def build_creation_notifications(appointment: Appointment) -> list[Notification]:
    formatted_date, formatted_time = format_slot(appointment)
    return [
        Notification(
            user_id=appointment.therapist_id,
            title='New Appointment',
            message=f'You have a new appointment on {formatted_date} at {formatted_time}',
            type=APPOINTMENT_NOTIFICATION_TYPE,
            related_id=appointment.id,
            related_type=APPOINTMENT_NOTIFICATION_TYPE,
        ),
        Notification(
            user_id=appointment.patient_id,
            title='Appointment Scheduled',
            message=f'Your appointment has been scheduled for {formatted_date} at {formatted_time}',
            type=APPOINTMENT_NOTIFICATION_TYPE,
            related_id=appointment.id,
            related_type=APPOINTMENT_NOTIFICATION_TYPE,
        ),
    ]


def notify_appointment_created(store: SchedulingStore, appointment: Appointment) -> bool:
    """Best effort: a failure is logged and never undoes the booking."""
    try:
        store.add_notifications(build_creation_notifications(appointment))
    except StorageError:
        logger.warning(
            'Could not create notifications for appointment %s',
            appointment.id,
            exc_info=True,
        )
        return False
    return True


def build_status_audit_entry(actor: Actor, appointment: Appointment, old_status: str, new_status: str) -> AuditLog:
    return AuditLog(
        user_id=actor.user_id,
        action=STATUS_CHANGE_ACTION,
        table_name=APPOINTMENTS_TABLE,
        record_id=appointment.id,
        old_values={'status': old_status},
        new_values={'status': new_status},
    )

"""Role and ownership rules for scheduling actions."""

from dataclasses import dataclass
from typing import Any

ROLE_ADMIN = 'admin'
ROLE_THERAPIST = 'therapist'
ROLE_PATIENT = 'patient'
ROLES = (ROLE_ADMIN, ROLE_THERAPIST, ROLE_PATIENT)

CREATE_APPOINTMENT = 'appointment:create'
CREATE_APPOINTMENT_FOR_PATIENT = 'appointment:create_for_patient'
UPDATE_APPOINTMENT_STATUS = 'appointment:update_status'
MANAGE_AVAILABILITY = 'availability:manage'


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def _is_party_to(actor: Actor, appointment: Any) -> bool:
    return actor.user_id in (appointment.patient_id, appointment.therapist_id)


def is_authorized(actor: Actor, action: str, resource: Any = None) -> bool:
    if actor.role not in ROLES:
        return False

    if action == CREATE_APPOINTMENT:
        return True

    if action == CREATE_APPOINTMENT_FOR_PATIENT:
        # resource is the patient id the appointment is booked for
        return actor.is_admin or resource == actor.user_id

    if action == UPDATE_APPOINTMENT_STATUS:
        return actor.is_admin or _is_party_to(actor, resource)

    if action == MANAGE_AVAILABILITY:
        # resource is the therapist id owning the windows
        return actor.is_admin or (actor.role == ROLE_THERAPIST and resource == actor.user_id)

    return False

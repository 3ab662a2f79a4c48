from enum import Enum


class AppointmentStatus(str, Enum):
    scheduled = 'scheduled'
    confirmed = 'confirmed'
    in_progress = 'in_progress'
    completed = 'completed'
    cancelled = 'cancelled'


STATUS_VALUES = tuple(status.value for status in AppointmentStatus)
TERMINAL_STATUSES = (AppointmentStatus.completed.value, AppointmentStatus.cancelled.value)
# Statuses that hold a therapist's (date, time) slot.
BLOCKING_STATUSES = tuple(value for value in STATUS_VALUES if value not in TERMINAL_STATUSES)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES

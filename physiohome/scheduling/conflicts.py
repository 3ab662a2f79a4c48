from datetime import date, time

from physiohome.scheduling.storage import SchedulingStore


def has_conflict(store: SchedulingStore, therapist_id: int, appointment_date: date, appointment_time: time) -> bool:
    """Whether a scheduled, confirmed or in-progress appointment already holds the slot.

    This is an early exit only; the partial unique index on ``appointments``
    decides concurrent bookings.
    """
    return store.find_blocking_appointment(therapist_id, appointment_date, appointment_time) is not None

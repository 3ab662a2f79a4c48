"""Weekly availability windows and the bookable slots they produce.

Each active window yields a single slot at its start time; windows are not
split into a finer grid.
"""

import logging
from dataclasses import dataclass
from datetime import date, time

from physiohome.auth.policy import MANAGE_AVAILABILITY, Actor, is_authorized
from physiohome.models.availability import WeeklyAvailabilityWindow
from physiohome.scheduling.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from physiohome.scheduling.storage import DuplicateRecordError, SchedulingStore

logger = logging.getLogger(__name__)

SUNDAY = 0
SATURDAY = 6


@dataclass(frozen=True)
class TimeSlot:
    date: date
    start_time: time
    end_time: time


def day_of_week_index(value: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7


def available_slots(store: SchedulingStore, therapist_id: int, slot_date: date) -> list[TimeSlot]:
    windows = store.list_active_windows(therapist_id, day_of_week_index(slot_date))
    if not windows:
        return []

    booked_times = store.list_blocking_times(therapist_id, slot_date)

    slots: dict[time, TimeSlot] = {}
    for window in windows:
        if window.start_time in booked_times or window.start_time in slots:
            continue
        slots[window.start_time] = TimeSlot(
            date=slot_date,
            start_time=window.start_time,
            end_time=window.end_time,
        )

    return [slots[start] for start in sorted(slots)]


def _validate_window(day_of_week: int, start_time: time, end_time: time) -> None:
    if not SUNDAY <= day_of_week <= SATURDAY:
        raise ValidationError('Day of week must be between 0 (Sunday) and 6 (Saturday).')
    if start_time >= end_time:
        raise ValidationError('Start time must be before end time.')


def _require_manager(actor: Actor, therapist_id: int) -> None:
    if not is_authorized(actor, MANAGE_AVAILABILITY, therapist_id):
        raise ForbiddenError('Only the therapist or an admin can manage this schedule.')


def _get_window(store: SchedulingStore, window_id: int) -> WeeklyAvailabilityWindow:
    window = store.get_window(window_id)
    if window is None:
        raise NotFoundError('Availability window not found.')
    return window


def _save_window(store: SchedulingStore, window: WeeklyAvailabilityWindow) -> WeeklyAvailabilityWindow:
    try:
        return store.save_window(window)
    except DuplicateRecordError as exc:
        raise ConflictError('This availability window already exists.') from exc


def add_window(
    store: SchedulingStore,
    actor: Actor,
    therapist_id: int,
    day_of_week: int,
    start_time: time,
    end_time: time,
    is_available: bool = True,
) -> WeeklyAvailabilityWindow:
    _validate_window(day_of_week, start_time, end_time)
    _require_manager(actor, therapist_id)

    if store.get_active_therapist(therapist_id) is None:
        raise NotFoundError('Therapist not found')

    window = _save_window(
        store,
        WeeklyAvailabilityWindow(
            therapist_id=therapist_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_available=is_available,
        ),
    )
    logger.info('Therapist %s availability window %s added for day %s', therapist_id, window.id, day_of_week)
    return window


def update_window(
    store: SchedulingStore,
    actor: Actor,
    window_id: int,
    *,
    day_of_week: int | None = None,
    start_time: time | None = None,
    end_time: time | None = None,
    is_available: bool | None = None,
) -> WeeklyAvailabilityWindow:
    window = _get_window(store, window_id)
    _require_manager(actor, window.therapist_id)

    new_day = window.day_of_week if day_of_week is None else day_of_week
    new_start = window.start_time if start_time is None else start_time
    new_end = window.end_time if end_time is None else end_time
    _validate_window(new_day, new_start, new_end)

    window.day_of_week = new_day
    window.start_time = new_start
    window.end_time = new_end
    if is_available is not None:
        window.is_available = is_available

    return _save_window(store, window)


def remove_window(store: SchedulingStore, actor: Actor, window_id: int) -> None:
    window = _get_window(store, window_id)
    _require_manager(actor, window.therapist_id)
    store.delete_window(window)
    logger.info('Availability window %s removed by user %s', window_id, actor.user_id)

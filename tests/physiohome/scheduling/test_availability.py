from datetime import date, time

import pytest

from physiohome.models.availability import WeeklyAvailabilityWindow
from physiohome.scheduling import availability, lifecycle
from physiohome.scheduling.availability import TimeSlot
from physiohome.scheduling.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError

MONDAY = date(2024, 6, 10)


def _window(db, therapist_id: int, day_of_week: int, start: time, end: time, is_available: bool = True):
    window = WeeklyAvailabilityWindow(
        therapist_id=therapist_id,
        day_of_week=day_of_week,
        start_time=start,
        end_time=end,
        is_available=is_available,
    )
    db.add(window)
    db.commit()
    return window


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        (date(2024, 6, 9), 0),
        (date(2024, 6, 10), 1),
        (date(2024, 6, 14), 5),
        (date(2024, 6, 15), 6),
        (date(2024, 2, 29), 4),
    ],
)
def test_day_of_week_index_starts_on_sunday(value: date, expected: int) -> None:
    assert availability.day_of_week_index(value) == expected


def test_available_slots_one_per_window_in_start_order(db, store, people) -> None:
    _window(db, 2, 1, time(14, 0), time(17, 0))
    _window(db, 2, 1, time(8, 0), time(12, 0))
    _window(db, 2, 2, time(10, 0), time(11, 0))

    slots = availability.available_slots(store, 2, MONDAY)

    assert slots == [
        TimeSlot(date=MONDAY, start_time=time(8, 0), end_time=time(12, 0)),
        TimeSlot(date=MONDAY, start_time=time(14, 0), end_time=time(17, 0)),
    ]


def test_available_slots_skips_inactive_windows_and_other_therapists(db, store, people) -> None:
    _window(db, 2, 1, time(8, 0), time(12, 0), is_available=False)
    _window(db, 3, 1, time(9, 0), time(12, 0))

    assert availability.available_slots(store, 2, MONDAY) == []


def test_available_slots_empty_without_windows(store, people) -> None:
    assert availability.available_slots(store, 2, MONDAY) == []
    assert availability.available_slots(store, 999, date(1999, 1, 1)) == []


def test_overlapping_windows_sharing_a_start_yield_one_slot(db, store, people) -> None:
    _window(db, 2, 1, time(8, 0), time(12, 0))
    _window(db, 2, 1, time(8, 0), time(10, 0))

    slots = availability.available_slots(store, 2, MONDAY)

    assert [slot.start_time for slot in slots] == [time(8, 0)]


def test_booked_start_is_excluded_until_the_appointment_ends(db, store, people) -> None:
    _window(db, 2, 1, time(8, 0), time(12, 0))
    _window(db, 2, 1, time(13, 0), time(17, 0))
    appointment = lifecycle.create_appointment(
        store,
        people['patient'],
        therapist_id=2,
        appointment_date=MONDAY,
        appointment_time=time(8, 0),
        service_type='Ortopedi',
        address='Jl. Merdeka 5',
    )

    booked = availability.available_slots(store, 2, MONDAY)
    assert [slot.start_time for slot in booked] == [time(13, 0)]

    for status in ('confirmed', 'in_progress'):
        lifecycle.update_status(store, people['therapist'], appointment.id, status)
        assert time(8, 0) not in {slot.start_time for slot in availability.available_slots(store, 2, MONDAY)}

    lifecycle.update_status(store, people['therapist'], appointment.id, 'cancelled')
    freed = availability.available_slots(store, 2, MONDAY)
    assert [slot.start_time for slot in freed] == [time(8, 0), time(13, 0)]


def test_booking_on_another_date_does_not_hide_slot(db, store, people) -> None:
    _window(db, 2, 1, time(8, 0), time(12, 0))
    lifecycle.create_appointment(
        store,
        people['patient'],
        therapist_id=2,
        appointment_date=date(2024, 6, 17),
        appointment_time=time(8, 0),
        service_type='Ortopedi',
        address='Jl. Merdeka 5',
    )

    assert [slot.start_time for slot in availability.available_slots(store, 2, MONDAY)] == [time(8, 0)]


def test_therapist_adds_own_window(store, people) -> None:
    window = availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(17, 0))

    assert window.id is not None
    assert window.is_available is True
    assert store.list_windows(2) == [window]


def test_admin_adds_window_for_any_therapist(store, people) -> None:
    window = availability.add_window(store, people['admin'], 3, 6, time(8, 0), time(14, 0))

    assert window.therapist_id == 3


@pytest.mark.parametrize('actor_key', ['other_therapist', 'patient'])
def test_add_window_forbidden_for_others(store, people, actor_key: str) -> None:
    with pytest.raises(ForbiddenError):
        availability.add_window(store, people[actor_key], 2, 1, time(8, 0), time(17, 0))


@pytest.mark.parametrize(
    ('day_of_week', 'start', 'end'),
    [
        (7, time(8, 0), time(17, 0)),
        (-1, time(8, 0), time(17, 0)),
        (1, time(17, 0), time(8, 0)),
        (1, time(9, 0), time(9, 0)),
    ],
)
def test_add_window_rejects_invalid_window(store, people, day_of_week: int, start: time, end: time) -> None:
    with pytest.raises(ValidationError):
        availability.add_window(store, people['admin'], 2, day_of_week, start, end)


def test_add_window_for_unknown_therapist(store, people) -> None:
    with pytest.raises(NotFoundError):
        availability.add_window(store, people['admin'], 4, 1, time(8, 0), time(17, 0))


def test_add_duplicate_window_conflicts(store, people) -> None:
    availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(17, 0))

    with pytest.raises(ConflictError):
        availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(17, 0))

    assert len(store.list_windows(2)) == 1


def test_update_window_changes_only_given_fields(store, people) -> None:
    window = availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(17, 0))

    updated = availability.update_window(store, people['therapist'], window.id, end_time=time(12, 0), is_available=False)

    assert updated.day_of_week == 1
    assert updated.start_time == time(8, 0)
    assert updated.end_time == time(12, 0)
    assert updated.is_available is False
    assert availability.available_slots(store, 2, MONDAY) == []


def test_update_window_validates_merged_times(store, people) -> None:
    window = availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(12, 0))

    with pytest.raises(ValidationError):
        availability.update_window(store, people['therapist'], window.id, start_time=time(13, 0))


def test_update_window_forbidden_for_other_therapist(store, people) -> None:
    window = availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(12, 0))

    with pytest.raises(ForbiddenError):
        availability.update_window(store, people['other_therapist'], window.id, is_available=False)


def test_remove_window(store, people) -> None:
    window = availability.add_window(store, people['therapist'], 2, 1, time(8, 0), time(12, 0))

    availability.remove_window(store, people['admin'], window.id)

    assert store.list_windows(2) == []
    with pytest.raises(NotFoundError):
        availability.remove_window(store, people['admin'], window.id)

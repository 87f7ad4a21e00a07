from datetime import date, datetime, time

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from backend.core.errors import InvalidInput, NotFound, PermissionDenied, StoreUnavailable
from backend.models.appointment import Appointment
from backend.auth.dependencies import get_current_caller
from backend.routes.availability_routes import (
    create_blocked_time,
    list_available_slots,
    list_blocked_times,
    list_weekly_availability,
    remove_blocked_time,
    router,
    save_weekly_availability,
    to_http_exception,
    update_weekly_availability,
)
from backend.scheduling.permissions import Caller
from backend.scheduling.schemas import BlockedRangeInput, WeeklyAvailabilityInput
from backend.scheduling.store import SqlAvailabilityStore

PROVIDER = Caller(user_id='provider-1', role='provider')
OTHER_PROVIDER = Caller(user_id='provider-2', role='provider')


@pytest.fixture
def store(scheduling_db, monkeypatch: pytest.MonkeyPatch) -> SqlAvailabilityStore:
    monkeypatch.setattr('backend.routes.availability_routes.ensure_database_ready', lambda: None)
    return SqlAvailabilityStore(scheduling_db)


def _weekly_input(**overrides) -> WeeklyAvailabilityInput:
    values = {
        'provider_id': 'provider-1',
        'day_of_week': 1,
        'start_time': time(9, 0),
        'end_time': time(17, 0),
    }
    values.update(overrides)
    return WeeklyAvailabilityInput(**values)


def test_weekly_availability_input_normalizes_provider() -> None:
    data = _weekly_input(provider_id='  provider-1 ')

    assert data.provider_id == 'provider-1'


@pytest.mark.parametrize(
    ('overrides', 'message'),
    [
        ({'start_time': time(17, 0), 'end_time': time(9, 0)}, 'Start time must be before end time.'),
        ({'break_start_time': time(12, 0)}, 'Break start and end times must be set together.'),
        (
            {'break_start_time': time(13, 0), 'break_end_time': time(12, 0)},
            'Break start time must be before break end time.',
        ),
        ({'break_start_time': time(16, 30), 'break_end_time': time(17, 30)}, 'Break must fall within working hours.'),
    ],
)
def test_weekly_availability_input_rejects_bad_times(overrides: dict, message: str) -> None:
    with pytest.raises(ValidationError) as exception_info:
        _weekly_input(**overrides)

    assert message in str(exception_info.value)


def test_weekly_availability_input_rejects_day_out_of_range() -> None:
    with pytest.raises(ValidationError):
        _weekly_input(day_of_week=7)


def test_blocked_range_input_rejects_inverted_range() -> None:
    with pytest.raises(ValidationError):
        BlockedRangeInput(
            provider_id='provider-1',
            title='Meeting',
            start_time=datetime(2026, 1, 5, 10, 0),
            end_time=datetime(2026, 1, 5, 10, 0),
        )


def test_blocked_range_input_requires_pattern_for_recurring_block() -> None:
    with pytest.raises(ValidationError):
        BlockedRangeInput(
            provider_id='provider-1',
            title='Meeting',
            start_time=datetime(2026, 1, 5, 10, 0),
            end_time=datetime(2026, 1, 5, 11, 0),
            is_recurring=True,
        )


def test_blocked_range_input_rejects_unknown_pattern() -> None:
    with pytest.raises(ValidationError):
        BlockedRangeInput(
            provider_id='provider-1',
            title='Meeting',
            start_time=datetime(2026, 1, 5, 10, 0),
            end_time=datetime(2026, 1, 5, 11, 0),
            is_recurring=True,
            recurrence_pattern='yearly',
        )


@pytest.mark.parametrize(
    ('error', 'status_code'),
    [
        (StoreUnavailable('down'), 503),
        (PermissionDenied('no'), 403),
        (InvalidInput('bad'), 400),
        (NotFound('missing'), 404),
    ],
)
def test_scheduling_errors_map_to_distinct_status_codes(error, status_code: int) -> None:
    exception = to_http_exception(error)

    assert exception.status_code == status_code
    assert exception.detail == error.message


def test_list_available_slots_returns_generated_slots(store) -> None:
    save_weekly_availability(
        data=_weekly_input(break_start_time=time(12, 0), break_end_time=time(13, 0)),
        caller=PROVIDER,
        store=store,
    )

    slots = list_available_slots(
        provider_id='provider-1',
        slot_date=date(2026, 1, 5),
        duration_minutes=60,
        buffer_minutes=15,
        store=store,
    )

    assert [slot.start.time() for slot in slots] == [
        time(9, 0), time(10, 15), time(13, 0), time(14, 15), time(15, 30),
    ]


def test_list_available_slots_empty_when_provider_not_working(store) -> None:
    slots = list_available_slots(
        provider_id='provider-1',
        slot_date=date(2026, 1, 4),
        duration_minutes=60,
        buffer_minutes=15,
        store=store,
    )

    assert slots == []


def test_list_available_slots_rejects_non_positive_duration(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_available_slots(
            provider_id='provider-1',
            slot_date=date(2026, 1, 5),
            duration_minutes=0,
            buffer_minutes=15,
            store=store,
        )

    assert exception_info.value.status_code == 400


def test_list_available_slots_reports_store_failure(store, monkeypatch: pytest.MonkeyPatch) -> None:
    def unavailable(*_args, **_kwargs):
        raise StoreUnavailable('Database unavailable. Verify DATABASE_URL and Postgres credentials.')

    monkeypatch.setattr(store, 'get_weekly_availability', unavailable)

    with pytest.raises(HTTPException) as exception_info:
        list_available_slots(
            provider_id='provider-1',
            slot_date=date(2026, 1, 5),
            duration_minutes=60,
            buffer_minutes=15,
            store=store,
        )

    assert exception_info.value.status_code == 503


def test_booked_appointment_hides_slot(store, scheduling_db) -> None:
    save_weekly_availability(data=_weekly_input(), caller=PROVIDER, store=store)
    scheduling_db.add(
        Appointment(
            provider_id='provider-1',
            start_time=datetime(2026, 1, 5, 9, 0),
            end_time=datetime(2026, 1, 5, 9, 30),
            status='confirmed',
        )
    )
    scheduling_db.commit()

    slots = list_available_slots(
        provider_id='provider-1',
        slot_date=date(2026, 1, 5),
        duration_minutes=30,
        buffer_minutes=0,
        store=store,
    )

    assert slots[0].start == datetime(2026, 1, 5, 9, 30)


def test_save_weekly_availability_for_other_provider_is_forbidden(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        save_weekly_availability(data=_weekly_input(), caller=OTHER_PROVIDER, store=store)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Permission denied: You can only manage your own schedule'


def test_update_weekly_availability_returns_not_found(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_weekly_availability(availability_id=42, data=_weekly_input(), caller=PROVIDER, store=store)

    assert exception_info.value.status_code == 404


def test_list_weekly_availability_returns_saved_days(store) -> None:
    save_weekly_availability(data=_weekly_input(day_of_week=3), caller=PROVIDER, store=store)
    save_weekly_availability(data=_weekly_input(day_of_week=1), caller=PROVIDER, store=store)

    rows = list_weekly_availability(provider_id='provider-1', store=store)

    assert [row.day_of_week for row in rows] == [1, 3]


def test_blocked_time_lifecycle(store) -> None:
    created = create_blocked_time(
        data=BlockedRangeInput(
            provider_id='provider-1',
            title='Vacation',
            start_time=datetime(2026, 1, 5, 9, 0),
            end_time=datetime(2026, 1, 5, 17, 0),
            reason='Out of office',
        ),
        caller=PROVIDER,
        store=store,
    )

    listed = list_blocked_times(
        provider_id='provider-1',
        start=datetime(2026, 1, 5, 0, 0),
        end=datetime(2026, 1, 6, 0, 0),
        store=store,
    )
    assert [item.id for item in listed] == [created[0].id]

    with pytest.raises(HTTPException) as exception_info:
        remove_blocked_time(block_id=created[0].id, caller=OTHER_PROVIDER, store=store)
    assert exception_info.value.status_code == 403

    remove_blocked_time(block_id=created[0].id, caller=PROVIDER, store=store)
    assert list_blocked_times(provider_id='provider-1', start=None, end=None, store=store) == []


def test_remove_missing_blocked_time_returns_not_found(store) -> None:
    with pytest.raises(HTTPException) as exception_info:
        remove_blocked_time(block_id=999, caller=PROVIDER, store=store)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Blocked time not found.'


def test_read_routes_require_authenticated_caller() -> None:
    read_routes = [route for route in router.routes if route.methods == {'GET'}]

    assert len(read_routes) == 3
    for route in read_routes:
        assert [dependency.dependency for dependency in route.dependencies] == [get_current_caller]


def test_list_available_slots_with_huge_duration_returns_empty_list(store) -> None:
    save_weekly_availability(data=_weekly_input(), caller=PROVIDER, store=store)

    slots = list_available_slots(
        provider_id='provider-1',
        slot_date=date(2026, 1, 5),
        duration_minutes=5_000_000_000,
        buffer_minutes=15,
        store=store,
    )

    assert slots == []

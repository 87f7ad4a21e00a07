"""
Slot generation for a single provider and day.

Walks the provider's working window for that weekday in steps of
``duration + buffer``, jumps over the break, and drops every candidate that
overlaps a blocked range or a non-cancelled appointment.
"""

import logging
from datetime import date, datetime, timedelta

from backend.core.errors import InvalidInput
from backend.scheduling.overlap import any_overlap, overlaps
from backend.scheduling.schemas import AvailableSlot
from backend.scheduling.store import AvailabilityStore

logger = logging.getLogger(__name__)


def day_of_week_for(slot_date: date) -> int:
    """Weekday number with 0 = Sunday."""
    return slot_date.isoweekday() % 7


def _parse_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise InvalidInput(f'Malformed date: {value!r}. Expected YYYY-MM-DD.') from exc
    raise InvalidInput(f'Malformed date: {value!r}. Expected YYYY-MM-DD.')


def _validate_minutes(value, name: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f'{name} must be a whole number of minutes.')
    if value < minimum:
        qualifier = 'positive' if minimum > 0 else 'zero or more'
        raise InvalidInput(f'{name} must be {qualifier}.')
    return value


def generate_slots(
    store: AvailabilityStore,
    provider_id: str,
    slot_date: date | str,
    duration_minutes: int,
    buffer_minutes: int,
) -> list[AvailableSlot]:
    """Return the bookable slots for ``provider_id`` on ``slot_date``.

    An empty list means the provider has nothing free that day. Store
    failures propagate as ``StoreUnavailable``; no partial list is returned.
    """
    if not isinstance(provider_id, str) or not provider_id.strip():
        raise InvalidInput('Provider is required.')
    target_date = _parse_date(slot_date)
    duration_minutes = _validate_minutes(duration_minutes, 'Duration', minimum=1)
    buffer_minutes = _validate_minutes(buffer_minutes, 'Buffer', minimum=0)

    availability = store.get_weekly_availability(provider_id, day_of_week_for(target_date))
    if availability is None or not availability.is_available:
        return []

    window_start = datetime.combine(target_date, availability.start_time)
    window_end = datetime.combine(target_date, availability.end_time)
    if window_start >= window_end:
        return []
    if duration_minutes + buffer_minutes > (window_end - window_start) // timedelta(minutes=1):
        return []

    break_start = break_end = None
    if availability.has_break:
        break_start = datetime.combine(target_date, availability.break_start_time)
        break_end = datetime.combine(target_date, availability.break_end_time)

    # One read per kind for the whole window; candidates are checked in memory.
    blocked = store.get_blocked_ranges(provider_id, window_start, window_end)
    booked = store.get_booked_appointments(provider_id, window_start, window_end)

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=duration_minutes + buffer_minutes)
    slots: list[AvailableSlot] = []
    cursor = window_start

    while cursor < window_end:
        slot_end = cursor + duration
        if cursor + step > window_end:
            break

        if break_start is not None and overlaps(cursor, slot_end, break_start, break_end):
            cursor = break_end
            continue

        if not any_overlap(cursor, slot_end, blocked) and not any_overlap(cursor, slot_end, booked):
            slots.append(
                AvailableSlot(
                    start=cursor,
                    end=slot_end,
                    duration=duration_minutes,
                    provider_id=provider_id,
                )
            )

        cursor += step

    logger.debug(
        'Generated %d slots for provider %s on %s (%d blocked, %d booked)',
        len(slots), provider_id, target_date.isoformat(), len(blocked), len(booked),
    )
    return slots

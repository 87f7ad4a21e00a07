"""Schedule mutations, each gated by ``authorize_schedule_mutation``."""

import logging

from backend.core import config
from backend.core.errors import NotFound
from backend.scheduling.permissions import Caller, authorize_schedule_mutation
from backend.scheduling.recurrence import expand_occurrences
from backend.scheduling.schemas import (
    BlockedRange,
    BlockedRangeInput,
    WeeklyAvailability,
    WeeklyAvailabilityInput,
)
from backend.scheduling.store import SqlAvailabilityStore

logger = logging.getLogger(__name__)


def save_weekly_availability(
    store: SqlAvailabilityStore, caller: Caller, data: WeeklyAvailabilityInput
) -> WeeklyAvailability:
    authorize_schedule_mutation(caller.user_id, caller.role, data.provider_id)

    saved = store.save_weekly_availability(data, created_by=caller.user_id)
    logger.info('Saved availability for provider %s day %d', saved.provider_id, saved.day_of_week)
    return saved


def update_weekly_availability(
    store: SqlAvailabilityStore, caller: Caller, availability_id: int, data: WeeklyAvailabilityInput
) -> WeeklyAvailability:
    existing = store.get_weekly_availability_by_id(availability_id)
    if existing is None:
        raise NotFound('Availability not found.')

    authorize_schedule_mutation(caller.user_id, caller.role, existing.provider_id)
    if data.provider_id != existing.provider_id:
        authorize_schedule_mutation(caller.user_id, caller.role, data.provider_id)

    updated = store.update_weekly_availability(availability_id, data)
    logger.info('Updated availability %d for provider %s', availability_id, updated.provider_id)
    return updated


def block_time(store: SqlAvailabilityStore, caller: Caller, data: BlockedRangeInput) -> list[BlockedRange]:
    """Store a blocked range, one row per occurrence when it recurs."""
    authorize_schedule_mutation(caller.user_id, caller.role, data.provider_id)

    if data.is_recurring:
        count = data.recurrence_count or config.DEFAULT_RECURRENCE_COUNT
        occurrences = expand_occurrences(data.start_time, data.end_time, data.recurrence_pattern, count)
    else:
        occurrences = [(data.start_time, data.end_time)]

    ranges = [
        BlockedRange(
            provider_id=data.provider_id,
            title=data.title,
            start_time=start_time,
            end_time=end_time,
            reason=data.reason,
            is_recurring=data.is_recurring,
            recurrence_pattern=data.recurrence_pattern,
        )
        for start_time, end_time in occurrences
    ]
    created = store.add_blocked_ranges(ranges, created_by=caller.user_id)
    logger.info('Blocked %d range(s) for provider %s', len(created), data.provider_id)
    return created


def unblock_time(store: SqlAvailabilityStore, caller: Caller, block_id: int) -> None:
    existing = store.get_blocked_range(block_id)
    if existing is None:
        raise NotFound('Blocked time not found.')

    authorize_schedule_mutation(caller.user_id, caller.role, existing.provider_id)

    store.delete_blocked_range(block_id)
    logger.info('Removed blocked range %d for provider %s', block_id, existing.provider_id)

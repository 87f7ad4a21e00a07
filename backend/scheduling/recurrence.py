"""Write-time expansion of recurring blocked ranges.

A recurring block is stored as one concrete row per occurrence; the slot
generator only ever reads stored rows.
"""

from datetime import datetime, timedelta

from backend.core.errors import InvalidInput

DAILY = 'daily'
WEEKDAYS = 'weekdays'
WEEKLY = 'weekly'
BIWEEKLY = 'biweekly'

RECURRENCE_STEPS = {
    DAILY: timedelta(days=1),
    WEEKDAYS: timedelta(days=1),
    WEEKLY: timedelta(weeks=1),
    BIWEEKLY: timedelta(weeks=2),
}
RECURRENCE_PATTERNS = frozenset(RECURRENCE_STEPS)


def expand_occurrences(
    start_time: datetime,
    end_time: datetime,
    pattern: str,
    count: int,
) -> list[tuple[datetime, datetime]]:
    """Return ``count`` ``(start, end)`` pairs following ``pattern``.

    The range length is kept for every occurrence. ``weekdays`` skips
    Saturdays and Sundays, starting from the first weekday on or after
    ``start_time``.
    """
    if pattern not in RECURRENCE_STEPS:
        raise InvalidInput(f'Unsupported recurrence pattern: {pattern}.')
    if count < 1:
        raise InvalidInput('Recurrence count must be at least 1.')

    length = end_time - start_time
    step = RECURRENCE_STEPS[pattern]
    occurrences: list[tuple[datetime, datetime]] = []
    current = start_time

    while len(occurrences) < count:
        if pattern != WEEKDAYS or current.weekday() < 5:
            occurrences.append((current, current + length))
        current += step

    return occurrences

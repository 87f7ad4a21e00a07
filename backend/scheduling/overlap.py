"""Half-open interval overlap checks shared by every conflict test."""

from datetime import datetime
from typing import Iterable, Protocol


class Interval(Protocol):
    start_time: datetime
    end_time: datetime


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Return True when ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect.

    Ranges that only share an endpoint do not overlap, so back-to-back
    bookings are allowed.
    """
    return a_start < b_end and b_start < a_end


def any_overlap(start: datetime, end: datetime, intervals: Iterable[Interval]) -> bool:
    return any(overlaps(start, end, interval.start_time, interval.end_time) for interval in intervals)

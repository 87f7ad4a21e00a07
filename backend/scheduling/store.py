"""Availability store backed by the application database.

Every database failure is logged and re-raised as ``StoreUnavailable`` so
callers can tell a failed lookup apart from an empty result.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Protocol

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.core.errors import InvalidInput, NotFound, StoreUnavailable
from backend.models.appointment import CANCELLED_STATUS, Appointment
from backend.models.availability import ProviderAvailability
from backend.models.blocked_time import BlockedTimeSlot
from backend.scheduling.schemas import (
    BlockedRange,
    BusyInterval,
    WeeklyAvailability,
    WeeklyAvailabilityInput,
)

logger = logging.getLogger(__name__)

STORE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'


class AvailabilityStore(Protocol):
    """Reads the slot generator depends on."""

    def get_weekly_availability(self, provider_id: str, day_of_week: int) -> WeeklyAvailability | None:
        ...

    def get_blocked_ranges(
        self, provider_id: str, range_start: datetime, range_end: datetime
    ) -> list[BlockedRange]:
        ...

    def get_booked_appointments(
        self,
        provider_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_status: str = CANCELLED_STATUS,
    ) -> list[BusyInterval]:
        ...


class SqlAvailabilityStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, action: str, rollback: bool = False) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning('Integrity error while %s: %s', action, exc.orig)
            raise InvalidInput('The change conflicts with an existing record.') from exc
        except SQLAlchemyError as exc:
            if rollback:
                self.db.rollback()
            logger.exception('Database error while %s', action)
            raise StoreUnavailable(STORE_UNAVAILABLE_DETAIL) from exc

    def get_weekly_availability(self, provider_id: str, day_of_week: int) -> WeeklyAvailability | None:
        with self._guard('loading weekly availability'):
            row = self.db.query(ProviderAvailability).filter(
                ProviderAvailability.provider_id == provider_id,
                ProviderAvailability.day_of_week == day_of_week,
            ).first()

        return WeeklyAvailability.model_validate(row) if row else None

    def get_weekly_availability_by_id(self, availability_id: int) -> WeeklyAvailability | None:
        with self._guard('loading weekly availability'):
            row = self.db.get(ProviderAvailability, availability_id)

        return WeeklyAvailability.model_validate(row) if row else None

    def list_weekly_availability(self, provider_id: str) -> list[WeeklyAvailability]:
        with self._guard('listing weekly availability'):
            rows = self.db.query(ProviderAvailability).filter(
                ProviderAvailability.provider_id == provider_id,
            ).order_by(ProviderAvailability.day_of_week.asc()).all()

        return [WeeklyAvailability.model_validate(row) for row in rows]

    def save_weekly_availability(self, data: WeeklyAvailabilityInput, created_by: str) -> WeeklyAvailability:
        """Insert the weekday row or overwrite the existing one for that provider and day."""
        with self._guard('saving weekly availability', rollback=True):
            row = self.db.query(ProviderAvailability).filter(
                ProviderAvailability.provider_id == data.provider_id,
                ProviderAvailability.day_of_week == data.day_of_week,
            ).first()

            if row is None:
                row = ProviderAvailability(created_by=created_by)
                self.db.add(row)

            for field, value in data.model_dump().items():
                setattr(row, field, value)

            self.db.commit()
            self.db.refresh(row)

        return WeeklyAvailability.model_validate(row)

    def update_weekly_availability(self, availability_id: int, data: WeeklyAvailabilityInput) -> WeeklyAvailability:
        with self._guard('updating weekly availability', rollback=True):
            row = self.db.get(ProviderAvailability, availability_id)
            if row is None:
                raise NotFound('Availability not found.')
            for field, value in data.model_dump().items():
                setattr(row, field, value)

            self.db.commit()
            self.db.refresh(row)

        return WeeklyAvailability.model_validate(row)

    def get_blocked_ranges(
        self, provider_id: str, range_start: datetime, range_end: datetime
    ) -> list[BlockedRange]:
        """Blocked ranges intersecting ``[range_start, range_end)``."""
        with self._guard('loading blocked ranges'):
            rows = self.db.query(BlockedTimeSlot).filter(
                BlockedTimeSlot.provider_id == provider_id,
                BlockedTimeSlot.start_time < range_end,
                BlockedTimeSlot.end_time > range_start,
            ).order_by(BlockedTimeSlot.start_time.asc()).all()

        return [BlockedRange.model_validate(row) for row in rows]

    def get_blocked_range(self, block_id: int) -> BlockedRange | None:
        with self._guard('loading blocked range'):
            row = self.db.get(BlockedTimeSlot, block_id)

        return BlockedRange.model_validate(row) if row else None

    def list_blocked_ranges(
        self,
        provider_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[BlockedRange]:
        with self._guard('listing blocked ranges'):
            query = self.db.query(BlockedTimeSlot).filter(BlockedTimeSlot.provider_id == provider_id)
            if start is not None:
                query = query.filter(BlockedTimeSlot.end_time > start)
            if end is not None:
                query = query.filter(BlockedTimeSlot.start_time < end)
            rows = query.order_by(BlockedTimeSlot.start_time.asc()).all()

        return [BlockedRange.model_validate(row) for row in rows]

    def add_blocked_ranges(self, ranges: list[BlockedRange], created_by: str) -> list[BlockedRange]:
        """Insert all ranges in one transaction."""
        with self._guard('creating blocked ranges', rollback=True):
            rows = [
                BlockedTimeSlot(created_by=created_by, **blocked.model_dump(exclude={'id'}))
                for blocked in ranges
            ]
            self.db.add_all(rows)
            self.db.commit()
            for row in rows:
                self.db.refresh(row)

        return [BlockedRange.model_validate(row) for row in rows]

    def delete_blocked_range(self, block_id: int) -> None:
        with self._guard('deleting blocked range', rollback=True):
            row = self.db.get(BlockedTimeSlot, block_id)
            if row is not None:
                self.db.delete(row)
                self.db.commit()

    def get_booked_appointments(
        self,
        provider_id: str,
        range_start: datetime,
        range_end: datetime,
        exclude_status: str = CANCELLED_STATUS,
    ) -> list[BusyInterval]:
        """Appointments intersecting ``[range_start, range_end)``, minus ``exclude_status``.

        Rows without a status still count as busy.
        """
        with self._guard('loading booked appointments'):
            rows = self.db.query(Appointment.start_time, Appointment.end_time).filter(
                Appointment.provider_id == provider_id,
                or_(Appointment.status.is_(None), func.lower(Appointment.status) != exclude_status.lower()),
                Appointment.start_time < range_end,
                Appointment.end_time > range_start,
            ).order_by(Appointment.start_time.asc()).all()

        return [BusyInterval(start_time=start_time, end_time=end_time) for start_time, end_time in rows]

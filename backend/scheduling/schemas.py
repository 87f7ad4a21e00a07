"""Value types passed between the store, the slot generator and the routes."""

from datetime import datetime, time

from pydantic import BaseModel, Field, field_validator, model_validator

from backend.core import config
from backend.scheduling.recurrence import RECURRENCE_PATTERNS


def _normalize_required(value: str, message: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(message)
    return normalized


def _normalize_optional(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized or None


class WeeklyAvailability(BaseModel):
    id: int | None = None
    provider_id: str
    day_of_week: int
    start_time: time
    end_time: time
    break_start_time: time | None = None
    break_end_time: time | None = None
    is_available: bool = True

    class Config:
        from_attributes = True

    @property
    def has_break(self) -> bool:
        return self.break_start_time is not None and self.break_end_time is not None


class BlockedRange(BaseModel):
    id: int | None = None
    provider_id: str
    title: str
    start_time: datetime
    end_time: datetime
    reason: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None

    class Config:
        from_attributes = True


class BusyInterval(BaseModel):
    """A booked appointment reduced to the range it occupies."""
    start_time: datetime
    end_time: datetime

    class Config:
        from_attributes = True


class AvailableSlot(BaseModel):
    start: datetime
    end: datetime
    duration: int
    provider_id: str


class WeeklyAvailabilityInput(BaseModel):
    provider_id: str
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    break_start_time: time | None = None
    break_end_time: time | None = None
    is_available: bool = True

    @field_validator('provider_id')
    @classmethod
    def validate_provider_id(cls, value: str) -> str:
        return _normalize_required(value, 'Provider is required.')

    @model_validator(mode='after')
    def validate_times(self) -> 'WeeklyAvailabilityInput':
        if self.start_time >= self.end_time:
            raise ValueError('Start time must be before end time.')

        if (self.break_start_time is None) != (self.break_end_time is None):
            raise ValueError('Break start and end times must be set together.')

        if self.break_start_time is not None and self.break_end_time is not None:
            if self.break_start_time >= self.break_end_time:
                raise ValueError('Break start time must be before break end time.')
            if self.break_start_time < self.start_time or self.break_end_time > self.end_time:
                raise ValueError('Break must fall within working hours.')

        return self


class BlockedRangeInput(BaseModel):
    provider_id: str
    title: str
    start_time: datetime
    end_time: datetime
    reason: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    recurrence_count: int | None = None

    @field_validator('provider_id')
    @classmethod
    def validate_provider_id(cls, value: str) -> str:
        return _normalize_required(value, 'Provider is required.')

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _normalize_required(value, 'Title is required.')

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_optional(value)

    @field_validator('recurrence_pattern')
    @classmethod
    def validate_recurrence_pattern(cls, value: str | None) -> str | None:
        normalized = _normalize_optional(value)
        if normalized is None:
            return None
        normalized = normalized.lower()
        if normalized not in RECURRENCE_PATTERNS:
            raise ValueError(f'Recurrence pattern must be one of: {", ".join(sorted(RECURRENCE_PATTERNS))}.')
        return normalized

    @field_validator('recurrence_count')
    @classmethod
    def validate_recurrence_count(cls, value: int | None) -> int | None:
        if value is None:
            return None
        if value < 1 or value > config.MAX_RECURRENCE_COUNT:
            raise ValueError(f'Recurrence count must be between 1 and {config.MAX_RECURRENCE_COUNT}.')
        return value

    @model_validator(mode='after')
    def validate_range(self) -> 'BlockedRangeInput':
        if self.start_time >= self.end_time:
            raise ValueError('Start time must be before end time.')
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError('Recurring blocks need a recurrence pattern.')
        if not self.is_recurring and (self.recurrence_pattern is not None or self.recurrence_count is not None):
            raise ValueError('Recurrence settings require is_recurring.')
        return self

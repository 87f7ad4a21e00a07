from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_caller
from backend.core import config
from backend.core.errors import (
    InvalidInput,
    NotFound,
    PermissionDenied,
    SchedulingError,
    StoreUnavailable,
)
from backend.database import SessionLocal, ensure_scheduling_schema
from backend.scheduling import service
from backend.scheduling.permissions import Caller
from backend.scheduling.schemas import (
    AvailableSlot,
    BlockedRange,
    BlockedRangeInput,
    WeeklyAvailability,
    WeeklyAvailabilityInput,
)
from backend.scheduling.slots import generate_slots
from backend.scheduling.store import STORE_UNAVAILABLE_DETAIL, SqlAvailabilityStore

router = APIRouter(tags=['availability'])

ERROR_STATUS_CODES = {
    StoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    PermissionDenied: status.HTTP_403_FORBIDDEN,
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
}


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=status_code, detail=exc.message)


def ensure_database_ready() -> None:
    try:
        ensure_scheduling_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=STORE_UNAVAILABLE_DETAIL,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_store(db: Session = Depends(get_db)) -> SqlAvailabilityStore:
    return SqlAvailabilityStore(db)


@router.get(
    '/providers/{provider_id}/slots',
    response_model=list[AvailableSlot],
    dependencies=[Depends(get_current_caller)],
)
def list_available_slots(
    provider_id: str,
    slot_date: date = Query(..., alias='date'),
    duration_minutes: int = Query(default=config.DEFAULT_APPOINTMENT_DURATION_MINUTES),
    buffer_minutes: int = Query(default=config.DEFAULT_BUFFER_MINUTES),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return generate_slots(store, provider_id, slot_date, duration_minutes, buffer_minutes)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    '/providers/{provider_id}/weekly',
    response_model=list[WeeklyAvailability],
    dependencies=[Depends(get_current_caller)],
)
def list_weekly_availability(
    provider_id: str,
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return store.list_weekly_availability(provider_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.put('/weekly', response_model=WeeklyAvailability)
def save_weekly_availability(
    data: WeeklyAvailabilityInput,
    caller: Caller = Depends(get_current_caller),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return service.save_weekly_availability(store, caller, data)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.put('/weekly/{availability_id}', response_model=WeeklyAvailability)
def update_weekly_availability(
    availability_id: int,
    data: WeeklyAvailabilityInput,
    caller: Caller = Depends(get_current_caller),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return service.update_weekly_availability(store, caller, availability_id, data)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get(
    '/providers/{provider_id}/blocked-times',
    response_model=list[BlockedRange],
    dependencies=[Depends(get_current_caller)],
)
def list_blocked_times(
    provider_id: str,
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return store.list_blocked_ranges(provider_id, start, end)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.post('/blocked-times', response_model=list[BlockedRange], status_code=status.HTTP_201_CREATED)
def create_blocked_time(
    data: BlockedRangeInput,
    caller: Caller = Depends(get_current_caller),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        return service.block_time(store, caller, data)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/blocked-times/{block_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_blocked_time(
    block_id: int,
    caller: Caller = Depends(get_current_caller),
    store: SqlAvailabilityStore = Depends(get_store),
):
    ensure_database_ready()

    try:
        service.unblock_time(store, caller, block_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc

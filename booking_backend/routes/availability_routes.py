import logging
from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from booking_backend.core.errors import UpstreamDataError, ValidationError
from booking_backend.core.validators import is_valid_uuid, parse_clock, parse_iso_date
from booking_backend.database import OptionalSchema, detect_optional_schema, get_db
from booking_backend.scheduling.conflicts import check_conflicts
from booking_backend.scheduling.schemas import TimeSlot
from booking_backend.scheduling.slots import format_slot_time, resolve_day_slots
from booking_backend.scheduling.store import AvailabilityStore, SqlAlchemyAvailabilityStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=['availability'])


class AvailabilityResponse(BaseModel):
    availability_slots: list[TimeSlot]
    professional_id: str
    date: str
    service_id: str | None = None
    total_slots: int
    available_slots: int


class AvailabilityCheckRequest(BaseModel):
    professional_id: str | None = None
    service_id: str | None = None
    date: str | None = None
    start_time: str | None = None
    end_time: str | None = None


class ConflictResponse(BaseModel):
    id: str | None = None
    booking_time: str | None = None
    duration_hours: float | None = None


class AvailabilityCheckResponse(BaseModel):
    available: bool
    conflicts: list[ConflictResponse]
    professional_id: str
    date: str
    start_time: str
    end_time: str


def get_optional_schema() -> OptionalSchema:
    try:
        return detect_optional_schema()
    except SQLAlchemyError as exc:
        logger.exception('Unable to inspect database schema')
        raise UpstreamDataError() from exc


def get_availability_store(
    db: Session = Depends(get_db),
    schema: OptionalSchema = Depends(get_optional_schema),
) -> AvailabilityStore:
    return SqlAlchemyAvailabilityStore(db, schema)


def parse_request_date(value: str) -> date:
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise ValidationError('Invalid date format (expected YYYY-MM-DD)') from exc


@router.get('', response_model=AvailabilityResponse)
def get_availability(
    professional_id: str | None = Query(default=None),
    date: str | None = Query(default=None),
    service_id: str | None = Query(default=None),
    store: AvailabilityStore = Depends(get_availability_store),
):
    if not professional_id or not date:
        raise ValidationError('Professional ID and date are required')

    if not is_valid_uuid(professional_id):
        raise ValidationError('Invalid professional ID format')

    requested_date = parse_request_date(date)

    try:
        slots = resolve_day_slots(store, professional_id, requested_date)
    except SQLAlchemyError as exc:
        logger.exception('Error in availability GET for professional %s', professional_id)
        raise UpstreamDataError() from exc

    return AvailabilityResponse(
        availability_slots=slots,
        professional_id=professional_id,
        date=date,
        service_id=service_id,
        total_slots=len(slots),
        available_slots=sum(1 for slot in slots if slot.is_available),
    )


@router.post('', response_model=AvailabilityCheckResponse)
def check_availability(
    data: AvailabilityCheckRequest,
    store: AvailabilityStore = Depends(get_availability_store),
):
    if not data.professional_id or not data.date or not data.start_time or not data.end_time:
        raise ValidationError('Professional ID, date, start time, and end time are required')

    if not is_valid_uuid(data.professional_id):
        raise ValidationError('Invalid professional ID format')

    requested_date = parse_request_date(data.date)
    start_time = parse_clock(data.start_time)
    end_time = parse_clock(data.end_time)
    if start_time is None or end_time is None:
        raise ValidationError('Invalid time format (expected HH:MM)')

    try:
        conflicts = check_conflicts(store, data.professional_id, requested_date, start_time, end_time)
    except SQLAlchemyError as exc:
        logger.exception('Error in availability POST for professional %s', data.professional_id)
        raise UpstreamDataError() from exc

    return AvailabilityCheckResponse(
        available=not conflicts,
        conflicts=[
            ConflictResponse(
                id=conflict.id,
                booking_time=format_slot_time(conflict.booking_time),
                duration_hours=conflict.duration_hours,
            )
            for conflict in conflicts
        ],
        professional_id=data.professional_id,
        date=data.date,
        start_time=data.start_time,
        end_time=data.end_time,
    )

import logging
from datetime import date, datetime, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from booking_backend.auth.dependencies import RequestContext, get_request_context
from booking_backend.booking_flow import BOOKING_STEPS, BookingFormData, can_proceed, compute_end_time, to_booking_payload
from booking_backend.core import config
from booking_backend.core.errors import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    UpstreamDataError,
    ValidationError,
)
from booking_backend.core.validators import is_valid_uuid, parse_clock
from booking_backend.database import OptionalSchema, get_db
from booking_backend.models.booking import Booking
from booking_backend.models.service import Service
from booking_backend.models.user import Customer, ServiceProvider
from booking_backend.routes.availability_routes import get_optional_schema
from booking_backend.scheduling.conflicts import booking_window_is_open, has_conflict
from booking_backend.scheduling.schemas import ACTIVE_BOOKING_STATUSES, BOOKING_STATUSES
from booking_backend.scheduling.slots import add_minutes, resolve_day_slots
from booking_backend.scheduling.store import SqlAlchemyAvailabilityStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=['bookings'])

CANCELLABLE_STATUSES = ('pending', 'confirmed')
STATUS_TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('in_progress', 'cancelled'),
    'in_progress': ('completed', 'cancelled'),
    'completed': (),
    'cancelled': (),
}


class CreateBookingRequest(BaseModel):
    provider_id: str
    service_id: str
    customer_id: str | None = None
    booking_date: date
    booking_time: time
    duration_hours: float | None = None
    notes: str | None = None
    emergency_booking: bool = False

    @field_validator('booking_time', mode='before')
    @classmethod
    def validate_booking_time(cls, value):
        parsed = parse_clock(value)
        if parsed is None:
            raise ValueError('Booking time must be HH:MM.')
        return parsed

    @field_validator('duration_hours')
    @classmethod
    def validate_duration_hours(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError('Duration must be positive.')
        return value


class UpdateBookingRequest(BaseModel):
    notes: str | None = None
    booking_date: date | None = None
    booking_time: time | None = None
    duration_hours: float | None = None

    @field_validator('booking_time', mode='before')
    @classmethod
    def validate_booking_time(cls, value):
        if value is None:
            return None
        parsed = parse_clock(value)
        if parsed is None:
            raise ValueError('Booking time must be HH:MM.')
        return parsed

    @field_validator('duration_hours')
    @classmethod
    def validate_duration_hours(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError('Duration must be positive.')
        return value


class UpdateStatusRequest(BaseModel):
    status: str | None = None


class BookingResponse(BaseModel):
    id: str
    provider_id: str
    service_id: str
    customer_id: str
    franchise_id: str | None = None
    booking_date: date
    booking_time: time
    duration_hours: float | None = None
    final_price: float | None = None
    notes: str | None = None
    emergency_booking: bool = False
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class BookingEnvelope(BaseModel):
    booking: BookingResponse
    message: str | None = None


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int


class MessageResponse(BaseModel):
    message: str


class FlowStepResponse(BaseModel):
    step: int
    can_proceed: bool
    end_time: str | None = None


def get_booking_or_404(booking_id: str, db: Session) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        raise NotFoundError('Booking not found')
    return booking


def booking_roles(context: RequestContext, booking: Booking, db: Session) -> tuple[bool, bool]:
    """Whether the caller is this booking's customer and whether they are its provider."""
    customer = db.query(Customer.id).filter(Customer.user_id == context.user_id).first()
    provider = db.query(ServiceProvider.id).filter(ServiceProvider.user_id == context.user_id).first()

    is_customer = customer is not None and customer.id == booking.customer_id
    is_provider = provider is not None and provider.id == booking.provider_id
    return is_customer, is_provider


def ensure_participant(context: RequestContext, booking: Booking, db: Session) -> None:
    if context.is_admin:
        return
    is_customer, is_provider = booking_roles(context, booking, db)
    if not is_customer and not is_provider:
        raise PermissionDeniedError()


def ensure_slot_bookable(
    db: Session,
    schema: OptionalSchema,
    provider_id: str,
    booking_date: date,
    booking_time: time,
    duration_hours: float,
    exclude_booking_id: str | None = None,
) -> None:
    """Re-check a requested time against current availability and live bookings."""
    if datetime.combine(booking_date, booking_time) <= datetime.now():
        raise ValidationError('Bookings must be scheduled in the future')

    store = SqlAlchemyAvailabilityStore(db, schema)
    duration_minutes = max(1, round(duration_hours * 60))
    end_time = add_minutes(booking_time, duration_minutes)

    if has_conflict(store, provider_id, booking_date, booking_time, end_time, exclude_booking_id=exclude_booking_id):
        raise ConflictError()

    slots = resolve_day_slots(store, provider_id, booking_date, exclude_booking_id=exclude_booking_id)
    if not booking_window_is_open(slots, booking_time, duration_minutes, config.SLOT_DURATION_MINUTES):
        raise ConflictError()


def ensure_minimum_duration(service: Service, duration_hours: float) -> None:
    minimum_hours = service.minimum_duration_hours or service.duration_hours
    if minimum_hours and duration_hours < minimum_hours:
        raise ValidationError(f'Duration must be at least {minimum_hours:g} hours for this service')


def insert_booking(
    data: CreateBookingRequest,
    context: RequestContext,
    db: Session,
    schema: OptionalSchema,
) -> Booking:
    if not is_valid_uuid(data.provider_id):
        raise ValidationError('Invalid professional ID format')

    service = db.query(Service).filter(Service.id == data.service_id).first()
    if not service:
        raise NotFoundError('Service not found')

    customer_id = data.customer_id
    if not customer_id:
        customer = db.query(Customer).filter(Customer.user_id == context.user_id).first()
        if not customer:
            raise ValidationError('Customer profile not found')
        customer_id = customer.id

    duration_hours = data.duration_hours or service.duration_hours
    ensure_minimum_duration(service, duration_hours)
    ensure_slot_bookable(db, schema, data.provider_id, data.booking_date, data.booking_time, duration_hours)

    booking = Booking(
        provider_id=data.provider_id,
        service_id=data.service_id,
        customer_id=customer_id,
        franchise_id=context.franchise_id,
        booking_date=data.booking_date,
        booking_time=data.booking_time,
        duration_hours=duration_hours,
        final_price=service.price * duration_hours,
        notes=data.notes,
        emergency_booking=data.emergency_booking,
        status='pending',
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info('Concurrent booking for provider %s at %s %s rejected', data.provider_id, data.booking_date, data.booking_time)
        raise ConflictError() from exc

    db.refresh(booking)
    return booking


@router.get('/bookings', response_model=BookingListResponse)
def list_bookings(
    status: str | None = Query(default=None),
    professional_id: str | None = Query(default=None),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Booking)
        if context.franchise_id:
            query = query.filter(Booking.franchise_id == context.franchise_id)
        if professional_id:
            query = query.filter(Booking.provider_id == professional_id)
        if status:
            query = query.filter(Booking.status == status)

        bookings = query.order_by(Booking.created_at.desc(), Booking.booking_date.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error in bookings GET')
        raise UpstreamDataError() from exc

    return BookingListResponse(
        bookings=[BookingResponse.model_validate(booking) for booking in bookings],
        total=len(bookings),
    )


@router.post('/bookings', response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    schema: OptionalSchema = Depends(get_optional_schema),
):
    try:
        booking = insert_booking(data, context, db, schema)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error in bookings POST')
        raise UpstreamDataError() from exc

    return BookingEnvelope(
        booking=BookingResponse.model_validate(booking),
        message='Booking created successfully',
    )


@router.post('/flow/steps/{step}', response_model=FlowStepResponse)
def validate_flow_step(step: int, form: BookingFormData):
    if step not in BOOKING_STEPS:
        raise ValidationError('Unknown booking step')

    return FlowStepResponse(
        step=step,
        can_proceed=can_proceed(step, form),
        end_time=compute_end_time(form.start_time, form.duration),
    )


@router.post('/flow/submit', response_model=BookingEnvelope, status_code=status.HTTP_201_CREATED)
def submit_flow(
    form: BookingFormData,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    schema: OptionalSchema = Depends(get_optional_schema),
):
    try:
        data = CreateBookingRequest(**to_booking_payload(form))
    except ValueError as exc:
        raise ValidationError('Booking form contains invalid values') from exc

    return create_booking(data, context=context, db=db, schema=schema)


@router.get('/{booking_id}', response_model=BookingEnvelope)
def get_booking(
    booking_id: str,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    try:
        booking = get_booking_or_404(booking_id, db)
        ensure_participant(context, booking, db)
    except SQLAlchemyError as exc:
        logger.exception('Error in booking GET for %s', booking_id)
        raise UpstreamDataError() from exc

    return BookingEnvelope(booking=BookingResponse.model_validate(booking))


@router.put('/{booking_id}', response_model=BookingEnvelope)
def update_booking(
    booking_id: str,
    data: UpdateBookingRequest,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
    schema: OptionalSchema = Depends(get_optional_schema),
):
    try:
        booking = get_booking_or_404(booking_id, db)
        ensure_participant(context, booking, db)

        rescheduling = any(
            value is not None for value in (data.booking_date, data.booking_time, data.duration_hours)
        )
        if rescheduling and booking.status not in ACTIVE_BOOKING_STATUSES:
            raise ValidationError('Cannot reschedule booking in current status')

        service = None
        if data.duration_hours is not None:
            service = db.query(Service).filter(Service.id == booking.service_id).first()
            if service:
                ensure_minimum_duration(service, data.duration_hours)

        if rescheduling:
            ensure_slot_bookable(
                db,
                schema,
                booking.provider_id,
                data.booking_date or booking.booking_date,
                data.booking_time or booking.booking_time,
                data.duration_hours or booking.duration_hours or 1.0,
                exclude_booking_id=booking.id,
            )

        for field in ('notes', 'booking_date', 'booking_time', 'duration_hours'):
            value = getattr(data, field)
            if value is not None:
                setattr(booking, field, value)

        if service:
            booking.final_price = service.price * data.duration_hours

        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError() from exc
        db.refresh(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error in booking PUT for %s', booking_id)
        raise UpstreamDataError() from exc

    return BookingEnvelope(
        booking=BookingResponse.model_validate(booking),
        message='Booking updated successfully',
    )


@router.delete('/{booking_id}', response_model=MessageResponse)
def cancel_booking(
    booking_id: str,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    try:
        booking = get_booking_or_404(booking_id, db)

        if booking.status not in CANCELLABLE_STATUSES:
            raise ValidationError('Cannot cancel booking in current status')

        ensure_participant(context, booking, db)

        booking.status = 'cancelled'
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error in booking DELETE for %s', booking_id)
        raise UpstreamDataError() from exc

    return MessageResponse(message='Booking cancelled successfully')


@router.put('/{booking_id}/status', response_model=BookingEnvelope)
def update_booking_status(
    booking_id: str,
    data: UpdateStatusRequest,
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    if not data.status:
        raise ValidationError('Status is required')

    if data.status not in BOOKING_STATUSES:
        raise ValidationError('Invalid status')

    try:
        booking = get_booking_or_404(booking_id, db)

        if not context.is_admin:
            _, is_provider = booking_roles(context, booking, db)
            if not is_provider:
                raise PermissionDeniedError('Only service providers can update booking status')

        if data.status not in STATUS_TRANSITIONS.get(booking.status, ()):
            raise ValidationError(f'Cannot transition from {booking.status} to {data.status}')

        booking.status = data.status
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error in booking status PUT for %s', booking_id)
        raise UpstreamDataError() from exc

    return BookingEnvelope(
        booking=BookingResponse.model_validate(booking),
        message=f'Booking status updated to {data.status}',
    )

from datetime import date, datetime, time
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field, field_validator

from physiohome.auth.dependencies import get_current_actor
from physiohome.auth.policy import Actor
from physiohome.core import config
from physiohome.routes.common import get_scheduling_service, parse_clock_time
from physiohome.scheduling.service import SchedulingService
from physiohome.scheduling.statuses import STATUS_VALUES

router = APIRouter(tags=['appointments'])


def _normalize_notes(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > config.MAX_APPOINTMENT_NOTES_LENGTH:
        raise ValueError(f'Notes must be {config.MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

    return normalized


class CreateAppointmentRequest(BaseModel):
    therapist_id: int
    appointment_date: date
    appointment_time: time
    service_type: str
    address: str
    notes: str | None = None
    patient_id: int | None = None
    duration_minutes: int = Field(
        default=config.DEFAULT_APPOINTMENT_DURATION_MINUTES,
        ge=1,
        le=config.MAX_APPOINTMENT_DURATION_MINUTES,
    )
    total_cost: Decimal | None = Field(default=None, ge=0)

    @field_validator('appointment_time', mode='before')
    @classmethod
    def validate_appointment_time(cls, value):
        return parse_clock_time(value)

    @field_validator('service_type', 'address')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Value is required.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class UpdateStatusRequest(BaseModel):
    status: str
    notes: str | None = None
    cancellation_reason: str | None = None

    @field_validator('status')
    @classmethod
    def validate_status(cls, value: str) -> str:
        if value not in STATUS_VALUES:
            raise ValueError(f"Status must be one of: {', '.join(STATUS_VALUES)}.")
        return value

    @field_validator('notes', 'cancellation_reason')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        return _normalize_notes(value)


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    therapist_id: int
    appointment_date: date
    appointment_time: time
    service_type: str
    status: str
    duration_minutes: int
    notes: str | None = None
    cancellation_reason: str | None = None
    patient_address: str
    total_cost: Decimal | None = None
    payment_status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
    data: CreateAppointmentRequest,
    actor: Actor = Depends(get_current_actor),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.create_appointment(
        actor,
        therapist_id=data.therapist_id,
        appointment_date=data.appointment_date,
        appointment_time=data.appointment_time,
        service_type=data.service_type,
        address=data.address,
        patient_id=data.patient_id,
        notes=data.notes,
        duration_minutes=data.duration_minutes,
        total_cost=data.total_cost,
    )


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    status_filter: str | None = Query(default=None, alias='status'),
    on_date: date | None = Query(default=None, alias='date'),
    limit: int = Query(
        default=config.DEFAULT_APPOINTMENT_LIST_LIMIT,
        ge=1,
        le=config.MAX_APPOINTMENT_LIST_LIMIT,
    ),
    actor: Actor = Depends(get_current_actor),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_appointments(
        actor,
        status=status_filter or None,
        appointment_date=on_date,
        limit=limit,
    )


@router.put('/{appointment_id}/status', response_model=AppointmentResponse)
def update_appointment_status(
    appointment_id: int,
    data: UpdateStatusRequest,
    actor: Actor = Depends(get_current_actor),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_appointment_status(
        actor,
        appointment_id,
        data.status,
        data.notes,
        cancellation_reason=data.cancellation_reason,
    )

from datetime import date, time

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, Field, field_validator

from physiohome.auth.dependencies import require_roles
from physiohome.auth.policy import ROLE_ADMIN, ROLE_THERAPIST, Actor
from physiohome.routes.common import get_scheduling_service, parse_clock_time
from physiohome.scheduling.service import SchedulingService

router = APIRouter(tags=['availability'])

require_schedule_manager = require_roles(ROLE_THERAPIST, ROLE_ADMIN)


class TimeSlotResponse(BaseModel):
    date: date
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class AvailabilityWindowResponse(BaseModel):
    id: int
    therapist_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool

    class Config:
        from_attributes = True


class CreateWindowRequest(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: time
    end_time: time
    is_available: bool = True

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def validate_clock_time(cls, value):
        return parse_clock_time(value)


class UpdateWindowRequest(BaseModel):
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    is_available: bool | None = None

    @field_validator('start_time', 'end_time', mode='before')
    @classmethod
    def validate_clock_time(cls, value):
        if value is None:
            return None
        return parse_clock_time(value)


@router.get('/{therapist_id}/slots', response_model=list[TimeSlotResponse])
def list_available_slots(
    therapist_id: int,
    slot_date: date = Query(..., alias='date'),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.get_available_slots(therapist_id, slot_date)


@router.get('/{therapist_id}/windows', response_model=list[AvailabilityWindowResponse])
def list_windows(
    therapist_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_windows(therapist_id)


@router.post(
    '/{therapist_id}/windows',
    response_model=AvailabilityWindowResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_window(
    therapist_id: int,
    data: CreateWindowRequest,
    actor: Actor = Depends(require_schedule_manager),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.add_window(
        actor,
        therapist_id,
        data.day_of_week,
        data.start_time,
        data.end_time,
        data.is_available,
    )


@router.put('/windows/{window_id}', response_model=AvailabilityWindowResponse)
def update_window(
    window_id: int,
    data: UpdateWindowRequest,
    actor: Actor = Depends(require_schedule_manager),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.update_window(actor, window_id, **data.model_dump(exclude_none=True))


@router.delete('/windows/{window_id}', status_code=status.HTTP_204_NO_CONTENT)
def remove_window(
    window_id: int,
    actor: Actor = Depends(require_schedule_manager),
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.remove_window(actor, window_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

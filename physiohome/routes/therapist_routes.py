from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from physiohome.routes.common import get_scheduling_service
from physiohome.scheduling.service import SchedulingService

router = APIRouter(tags=['therapists'])


class TherapistResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    specialization: str | None = None
    hourly_rate: Decimal | None = None
    is_available: bool = False


@router.get('', response_model=list[TherapistResponse])
def list_therapists(service: SchedulingService = Depends(get_scheduling_service)):
    return [
        TherapistResponse(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone=user.phone,
            specialization=profile.specialization if profile else None,
            hourly_rate=profile.hourly_rate if profile else None,
            is_available=bool(profile and profile.is_available),
        )
        for user, profile in service.list_therapists()
    ]

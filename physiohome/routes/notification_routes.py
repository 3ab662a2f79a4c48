from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from physiohome.auth.dependencies import get_current_actor
from physiohome.auth.policy import Actor
from physiohome.routes.common import get_scheduling_service
from physiohome.scheduling.service import SchedulingService

router = APIRouter(tags=['notifications'])


class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: str
    is_read: bool
    related_id: int | None = None
    related_type: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get('', response_model=list[NotificationResponse])
def list_my_notifications(
    unread_only: bool = Query(default=False),
    actor: Actor = Depends(get_current_actor),
    service: SchedulingService = Depends(get_scheduling_service),
):
    return service.list_notifications(actor, unread_only=unread_only)

"""
In-app notification inbox endpoints
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from leaveflow.api.responses import envelope_response
from leaveflow.core.deps import get_current_user, get_db
from leaveflow.core.errors import NotFoundError
from leaveflow.models.employee import Employee
from leaveflow.schemas.common import ServiceResult
from leaveflow.schemas.notification import NotificationOut
from leaveflow.services.notification_service import list_notifications, mark_read

router = APIRouter()


@router.get("/my")
async def my_notifications_endpoint(
    unread_only: bool = Query(False),
    current_user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = list_notifications(db, current_user.id, unread_only=unread_only)
    return envelope_response(ServiceResult.ok([NotificationOut.model_validate(n) for n in rows]))


@router.post("/{notification_id}/read")
async def mark_notification_read_endpoint(
    notification_id: int,
    current_user: Employee = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = mark_read(db, current_user.id, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found", code="notification_not_found")
    return envelope_response(ServiceResult.ok(NotificationOut.model_validate(notification)))

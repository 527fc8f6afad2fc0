from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.current_user import get_current_user
from app.core.deps import get_db
from app.models.user import User
from app.schemas.notification import MarkAsRead, MarkAsReadResult, NotificationRead
from app.services.notifications import (
    OUTCOME_ACTIVATED,
    OUTCOME_DELETED,
    list_notifications,
    resolve_notification,
)

router = APIRouter()

_MESSAGES = {
    OUTCOME_DELETED: "Notification deleted successfully.",
    OUTCOME_ACTIVATED: "All notifications marked as read. Section status updated to Active.",
}


@router.get("/", response_model=list[NotificationRead])
def get_notifications(
    is_read: bool | None = None,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    return list_notifications(db, me, is_read)


@router.put("/{notification_id}/mark_as_read", response_model=MarkAsReadResult)
def mark_as_read(
    notification_id: int,
    payload: MarkAsRead | None = None,
    db: Session = Depends(get_db),
    me: User = Depends(get_current_user),
):
    action = payload.action if payload else None
    resolution = resolve_notification(db, notification_id, me, action)
    return {
        "message": _MESSAGES.get(resolution.outcome, "Notification marked as read."),
        "outcome": resolution.outcome,
        "notification_id": resolution.notification_id,
        "section_id": resolution.section_id,
        "action_performed": action or "none",
        "notification": resolution.notification,
    }

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class NotificationRead(BaseModel):
    id: int
    user_id: int
    section_id: int | None = None
    type: str | None = None
    message: str
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class MarkAsRead(BaseModel):
    action: Literal["accept", "deny"] | None = None


class MarkAsReadResult(BaseModel):
    message: str
    outcome: str  # "deleted" | "read" | "activated"
    notification_id: int
    section_id: int | None = None
    action_performed: str
    notification: NotificationRead | None = None

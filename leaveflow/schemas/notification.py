"""
Notification schemas
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from leaveflow.utils.datetime_utils import iso_8601_utc


class NotificationOut(BaseModel):
    id: int
    leave_id: Optional[int] = None
    event: str
    title: str
    message: str
    read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt: Optional[datetime]) -> Optional[str]:
        return iso_8601_utc(dt)

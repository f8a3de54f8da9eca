# schooldesk/schemas/notification/responses.py
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from schooldesk.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    notification_id: str
    user_id: str
    user_role: str
    type: str
    title: str
    message: str
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict, serialization_alias="metadata")
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UnreadCount(CamelModel):
    unread_count: int


class MarkedRead(CamelModel):
    updated: int

# schooldesk/schemas/announcement/responses.py
from datetime import date, datetime
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class AnnouncementResponse(CamelModel):
    announcement_id: str
    title: str
    content: str
    category: str
    priority: str
    target_audience: str
    target_classes: List[str] = []
    attachment_url: Optional[str] = None
    publish_date: date
    expiry_date: Optional[date] = None
    created_by: str
    created_by_role: str
    created_by_name: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

# schooldesk/schemas/announcement/requests.py
from datetime import date
from typing import List, Optional

from pydantic import Field, model_validator

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import AnnouncementAudience, AnnouncementPriority, AnnouncementStatus


class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    category: str = Field("general", max_length=50)
    priority: AnnouncementPriority = AnnouncementPriority.NORMAL
    target_audience: AnnouncementAudience = AnnouncementAudience.ALL
    target_classes: List[str] = Field(default_factory=list)
    attachment_url: Optional[str] = Field(None, max_length=500)
    publish_date: Optional[date] = None
    expiry_date: Optional[date] = None

    @model_validator(mode="after")
    def check_targets(self):
        if self.target_audience == AnnouncementAudience.SPECIFIC_CLASS and not self.target_classes:
            raise ValueError("targetClasses is required for specific_class announcements")
        return self


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, max_length=50)
    priority: Optional[AnnouncementPriority] = None
    target_classes: Optional[List[str]] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    expiry_date: Optional[date] = None
    status: Optional[AnnouncementStatus] = None

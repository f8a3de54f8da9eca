# schooldesk/schemas/homework/requests.py
from datetime import date
from typing import Optional

from pydantic import Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import HomeworkStatus


class HomeworkCreate(CamelModel):
    class_id: str
    section_id: Optional[str] = None
    subject_id: str
    # Teachers assign as themselves; school admins name the teacher
    teacher_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    attachment_url: Optional[str] = Field(None, max_length=500)
    due_date: date


class HomeworkUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    attachment_url: Optional[str] = Field(None, max_length=500)
    due_date: Optional[date] = None
    status: Optional[HomeworkStatus] = None

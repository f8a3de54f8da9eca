# schooldesk/schemas/homework/responses.py
from datetime import date, datetime
from typing import Optional

from schooldesk.schemas.base import CamelModel


class HomeworkResponse(CamelModel):
    homework_id: str
    class_id: str
    section_id: Optional[str] = None
    subject_id: str
    teacher_id: str
    title: str
    description: str
    attachment_url: Optional[str] = None
    assigned_date: date
    due_date: date
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None
    class_name: Optional[str] = None
    is_overdue: Optional[bool] = None

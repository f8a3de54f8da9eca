# schooldesk/schemas/teacher/responses.py
from datetime import datetime
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class TeacherResponse(CamelModel):
    teacher_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    subjects: List[str] = []
    classes: List[str] = []
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

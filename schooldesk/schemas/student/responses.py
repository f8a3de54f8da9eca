# schooldesk/schemas/student/responses.py
from datetime import date, datetime
from typing import Optional

from pydantic import Field

from schooldesk.schemas.base import CamelModel


class StudentResponse(CamelModel):
    student_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    class_id: Optional[str] = Field(None, alias="class")
    section: Optional[str] = None
    roll_number: Optional[str] = None
    parent_id: Optional[str] = None
    parent_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

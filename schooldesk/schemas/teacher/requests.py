# schooldesk/schemas/teacher/requests.py
from typing import List, Optional

from pydantic import EmailStr, Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import RecordStatus


class TeacherCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    subjects: List[str] = Field(default_factory=list)
    classes: List[str] = Field(default_factory=list)
    status: RecordStatus = RecordStatus.ACTIVE


class TeacherUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)
    department: Optional[str] = Field(None, max_length=100)
    subjects: Optional[List[str]] = None
    classes: Optional[List[str]] = None
    status: Optional[RecordStatus] = None

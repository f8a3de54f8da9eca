# schooldesk/schemas/student/requests.py
from datetime import date
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import StudentStatus


class StudentCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    # Students without an email cannot log in
    email: Optional[EmailStr] = None
    password: str = Field(..., min_length=6, max_length=128)
    class_id: str = Field(..., alias="class", min_length=1)
    section: Optional[str] = None
    roll_number: Optional[str] = Field(None, max_length=20)
    parent_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=10)
    address: Optional[str] = Field(None, max_length=255)
    status: StudentStatus = StudentStatus.ACTIVE


class StudentUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    class_id: Optional[str] = Field(None, alias="class", min_length=1)
    section: Optional[str] = None
    roll_number: Optional[str] = Field(None, max_length=20)
    parent_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=10)
    address: Optional[str] = Field(None, max_length=255)
    status: Optional[StudentStatus] = None

# schooldesk/schemas/school/requests.py
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import RecordStatus


class SchoolCreate(CamelModel):
    school_name: str = Field(..., min_length=2, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=255)


class SchoolStatusUpdate(CamelModel):
    status: RecordStatus


class SchoolAdminCreate(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    school_id: str = Field(..., min_length=1)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)


class SchoolAdminUpdate(CamelModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    contact_number: Optional[str] = Field(None, max_length=20)
    status: Optional[RecordStatus] = None

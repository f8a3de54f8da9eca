# schooldesk/schemas/parents/requests.py
from enum import Enum
from typing import List, Optional

from pydantic import EmailStr, Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import RecordStatus


class ParentRelationship(str, Enum):
    FATHER = "father"
    MOTHER = "mother"
    GUARDIAN = "guardian"


class ParentCreate(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., min_length=1, max_length=20)
    relationship: ParentRelationship
    student_ids: List[str] = Field(default_factory=list)
    occupation: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    status: RecordStatus = RecordStatus.ACTIVE


class ParentUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6, max_length=128)
    phone: Optional[str] = Field(None, min_length=1, max_length=20)
    relationship: Optional[ParentRelationship] = None
    student_ids: Optional[List[str]] = None
    occupation: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=255)
    status: Optional[RecordStatus] = None

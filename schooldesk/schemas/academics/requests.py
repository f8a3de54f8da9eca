# schooldesk/schemas/academics/requests.py
from typing import List, Optional

from pydantic import Field, field_validator

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import RecordStatus


class SectionCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    class_teacher_id: Optional[str] = None


class ClassTeacherAssignment(CamelModel):
    # None removes the current class teacher
    teacher_id: Optional[str] = None


class ClassCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    sections: List[SectionCreate] = Field(default_factory=list)


class ClassUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=255)
    status: Optional[RecordStatus] = None


class SubjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = Field(None, max_length=255)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class SubjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    description: Optional[str] = Field(None, max_length=255)
    status: Optional[RecordStatus] = None

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

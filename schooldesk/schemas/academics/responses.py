# schooldesk/schemas/academics/responses.py
from datetime import datetime
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class SectionResponse(CamelModel):
    section_id: str
    name: str
    class_teacher_id: Optional[str] = None


class ClassResponse(CamelModel):
    class_id: str
    name: str
    description: Optional[str] = None
    sections: List[SectionResponse] = []
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubjectResponse(CamelModel):
    subject_id: str
    name: str
    code: str
    description: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

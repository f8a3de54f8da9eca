# schooldesk/schemas/parents/responses.py
from datetime import datetime
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class ParentResponse(CamelModel):
    parent_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    relationship: Optional[str] = None
    student_ids: List[str] = []
    occupation: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

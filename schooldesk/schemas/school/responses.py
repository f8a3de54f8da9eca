# schooldesk/schemas/school/responses.py
from datetime import datetime
from typing import Optional

from schooldesk.schemas.base import CamelModel


class SchoolResponse(CamelModel):
    school_id: str
    school_name: str
    database_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SchoolAdminResponse(CamelModel):
    user_id: str
    username: str
    email: Optional[str] = None
    school_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    contact_number: Optional[str] = None
    role: str = "sch_admin"
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class DashboardStats(CamelModel):
    total_schools: int
    active_schools: int
    inactive_schools: int
    total_users: int
    active_users: int

# schooldesk/schemas/auth/tokens.py
from typing import List, Optional

from pydantic import Field

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.user.role import UserRoleEnum


class SessionClaims(CamelModel):
    """Decoded content of a session token.

    Tenant-scoped roles always carry ``school_id`` and ``database_name``; the
    per-role fields are only present for the matching role.
    """
    account_id: str
    email: Optional[str] = None
    role: UserRoleEnum
    username: Optional[str] = None

    school_id: Optional[str] = None
    database_name: Optional[str] = None
    school_name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    # teacher
    department: Optional[str] = None
    subjects: Optional[List[str]] = None
    classes: Optional[List[str]] = None
    subject_names: Optional[List[str]] = None

    # student
    class_id: Optional[str] = Field(default=None, alias="class")
    section: Optional[str] = None
    roll_number: Optional[str] = None
    class_name: Optional[str] = None
    section_name: Optional[str] = None

    # parent
    student_ids: Optional[List[str]] = None

    iat: Optional[int] = None
    exp: Optional[int] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, exclude={"iat", "exp"}, mode="json")

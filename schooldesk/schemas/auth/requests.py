# schooldesk/schemas/auth/requests.py
from typing import Optional

from pydantic import EmailStr, Field

from schooldesk.schemas.base import CamelModel


class LoginRequest(CamelModel):
    # Both optional so an incomplete body is reported as MissingCredentials
    email: Optional[str] = None
    password: Optional[str] = None


class CreateAdminRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)

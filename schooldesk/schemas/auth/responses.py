# schooldesk/schemas/auth/responses.py
from typing import Any, Dict, Optional

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.user.role import UserRoleEnum


class LoginResponse(CamelModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: Dict[str, Any]


class VerifyTokenResponse(CamelModel):
    success: bool = True
    message: str = "Token is valid"
    user_id: str
    email: Optional[str] = None
    role: UserRoleEnum
    school_id: Optional[str] = None


class AdminResponse(CamelModel):
    admin_id: str
    username: str
    email: str
    role: UserRoleEnum = UserRoleEnum.SUPER_ADMIN
    status: Optional[str] = None

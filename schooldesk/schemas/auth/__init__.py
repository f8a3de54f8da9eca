from .requests import CreateAdminRequest, LoginRequest
from .responses import AdminResponse, LoginResponse, VerifyTokenResponse
from .tokens import SessionClaims

__all__ = [
    "CreateAdminRequest",
    "LoginRequest",
    "AdminResponse",
    "LoginResponse",
    "VerifyTokenResponse",
    "SessionClaims",
]

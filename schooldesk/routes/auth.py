from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.dependencies import get_auth_service, get_current_claims, get_db
from schooldesk.core.permissions import require_super_admin
from schooldesk.schemas.auth import (
    AdminResponse,
    CreateAdminRequest,
    LoginRequest,
    LoginResponse,
    SessionClaims,
    VerifyTokenResponse,
)
from schooldesk.schemas.base import APIResponse
from schooldesk.services.admin_service import AdminService
from schooldesk.services.auth_service import AuthService

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={401: {"description": "Unauthorized"}}
)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email and password are required"},
        403: {"description": "School is inactive"}
    }
)
async def login(
    credentials: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Single login for every role; the email decides which account store is used"""
    token, user = await auth_service.login(credentials.email, credentials.password)
    return LoginResponse(token=token, user=user)


@router.get("/verify-token", response_model=VerifyTokenResponse)
async def verify_token(claims: SessionClaims = Depends(get_current_claims)):
    return VerifyTokenResponse(
        user_id=claims.account_id,
        email=claims.email,
        role=claims.role,
        school_id=claims.school_id
    )


@router.post(
    "/create-admin",
    response_model=APIResponse[AdminResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_admin(
    data: CreateAdminRequest,
    db: AsyncSession = Depends(get_db),
    _: SessionClaims = Depends(require_super_admin)
):
    admin = await AdminService(db).create_admin(data)
    return APIResponse[AdminResponse](
        message="Super Admin created successfully",
        data=AdminResponse.model_validate(admin)
    )

from dataclasses import dataclass
from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.database import Database
from schooldesk.core.errors import Unauthorized
from schooldesk.core.security import verify_session_token
from schooldesk.schemas.auth.tokens import SessionClaims
from schooldesk.services.auth_service import AuthService
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.services.tenant_pool import TenantConnectionPool

# Missing or non-bearer headers come back as None and are rejected below
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class TenantContext:
    """Everything a tenant-scoped service needs for one request"""
    school_id: str
    database_name: str
    session: AsyncSession
    claims: SessionClaims


# Application-scoped components
def get_database(request: Request) -> Database:
    return request.app.state.database


def get_tenant_directory(request: Request) -> TenantDirectory:
    return request.app.state.tenant_directory


def get_tenant_pool(request: Request) -> TenantConnectionPool:
    return request.app.state.tenant_pool


# Database session management
async def get_db(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session on the platform (global) database"""
    async with database.session() as session:
        yield session


# Service providers
async def get_auth_service(
    database: Database = Depends(get_database),
    directory: TenantDirectory = Depends(get_tenant_directory),
    tenant_pool: TenantConnectionPool = Depends(get_tenant_pool)
) -> AuthService:
    return AuthService(database, directory, tenant_pool)


# Session verification
async def get_current_claims(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> SessionClaims:
    """Verify the bearer token and expose its claims to the handler"""
    if credentials is None:
        raise Unauthorized("No token provided")

    claims = verify_session_token(credentials.credentials)
    request.state.claims = claims
    return claims

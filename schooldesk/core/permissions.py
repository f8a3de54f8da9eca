# schooldesk/core/permissions.py
import logging
from typing import AsyncGenerator, FrozenSet, Iterable

from fastapi import Depends

from schooldesk.core.dependencies import (
    TenantContext,
    get_current_claims,
    get_tenant_directory,
    get_tenant_pool,
)
from schooldesk.core.errors import Forbidden
from schooldesk.schemas.auth.tokens import SessionClaims
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.services.tenant_pool import TenantConnectionPool

logger = logging.getLogger("schooldesk.permissions")


def authorize(claims: SessionClaims, allowed_roles: Iterable[UserRoleEnum]) -> None:
    """Raise Forbidden unless the session's role is in ``allowed_roles``"""
    allowed = {UserRoleEnum(role) for role in allowed_roles}
    if claims.role not in allowed:
        raise Forbidden()


def authorize_school(claims: SessionClaims, school_id: str) -> None:
    """Only super admins may act on a school other than their own"""
    if claims.role != UserRoleEnum.SUPER_ADMIN and claims.school_id != school_id:
        raise Forbidden("Access denied to this school")


class RoleChecker:
    """Role whitelist usable as a FastAPI dependency"""

    def __init__(self, allowed_roles: Iterable[UserRoleEnum]):
        self.allowed_roles: FrozenSet[UserRoleEnum] = frozenset(UserRoleEnum(role) for role in allowed_roles)

    async def __call__(self, claims: SessionClaims = Depends(get_current_claims)) -> SessionClaims:
        """Makes RoleChecker callable as a FastAPI dependency"""
        try:
            authorize(claims, self.allowed_roles)
        except Forbidden:
            logger.warning(
                f"Permission denied: {claims.role.value} {claims.account_id} attempted to access "
                f"resource requiring roles {sorted(role.value for role in self.allowed_roles)}"
            )
            raise
        return claims


class TenantAccess(RoleChecker):
    """
    Role check plus tenant resolution for ``/school/{school_id}`` routes.

    Yields a TenantContext whose session is bound to the school's database;
    the session is closed when the response has been produced.
    """

    async def __call__(
        self,
        school_id: str,
        claims: SessionClaims = Depends(get_current_claims),
        directory: TenantDirectory = Depends(get_tenant_directory),
        tenant_pool: TenantConnectionPool = Depends(get_tenant_pool)
    ) -> AsyncGenerator[TenantContext, None]:
        await super().__call__(claims)
        try:
            authorize_school(claims, school_id)
        except Forbidden:
            logger.warning(
                f"Cross-school access denied: {claims.account_id} of {claims.school_id} requested {school_id}"
            )
            raise

        database_name = await directory.resolve_database_name(school_id)
        async with tenant_pool.session(database_name) as session:
            yield TenantContext(
                school_id=school_id,
                database_name=database_name,
                session=session,
                claims=claims
            )


def require_roles(*roles: UserRoleEnum) -> RoleChecker:
    return RoleChecker(roles)


def tenant_access(*roles: UserRoleEnum) -> TenantAccess:
    return TenantAccess(roles)


# Common role dependencies
require_super_admin = require_roles(UserRoleEnum.SUPER_ADMIN)
require_any_role = require_roles(*UserRoleEnum)

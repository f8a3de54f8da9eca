# schooldesk/services/auth_service.py
import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.config import settings
from schooldesk.core.database import Database
from schooldesk.core.errors import (
    InvalidCredentials,
    MissingCredentials,
    ServiceUnavailable,
    TenantInactive,
    TenantNotFound,
)
from schooldesk.core.logging import logger
from schooldesk.core.security import check_password, create_access_token
from schooldesk.models import Admin, Class, Parent, School, Student, Subject, Teacher, User
from schooldesk.schemas.auth.tokens import SessionClaims
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.email_registry_service import EmailRegistryService
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.services.tenant_pool import TenantConnectionPool
from schooldesk.utils.identifiers import normalize_email

ClaimsBuilder = Callable[["AuthService", str, Any], Awaitable[Dict[str, Any]]]


@dataclass(frozen=True)
class AccountLocator:
    """How an account of one role is looked up and how its session claims are built"""
    model: Type
    id_field: str
    allow_unset_status: bool = False
    extra_claims: Optional[ClaimsBuilder] = None


async def _teacher_claims(service: "AuthService", database_name: str, teacher: Teacher) -> Dict[str, Any]:
    subjects = list(teacher.subjects or [])
    return {
        "department": teacher.department,
        "subjects": subjects,
        "classes": list(teacher.classes or []),
        "subject_names": await service.resolve_subject_names(database_name, subjects),
    }


async def _student_claims(service: "AuthService", database_name: str, student: Student) -> Dict[str, Any]:
    class_name, section_name = await service.resolve_class_names(
        database_name, student.class_id, student.section
    )
    return {
        "class_id": student.class_id,
        "section": student.section,
        "roll_number": student.roll_number,
        "class_name": class_name,
        "section_name": section_name,
    }


async def _parent_claims(service: "AuthService", database_name: str, parent: Parent) -> Dict[str, Any]:
    return {"student_ids": list(parent.student_ids or [])}


ACCOUNT_LOCATORS: Dict[UserRoleEnum, AccountLocator] = {
    UserRoleEnum.SUPER_ADMIN: AccountLocator(Admin, "admin_id", allow_unset_status=True),
    UserRoleEnum.SCHOOL_ADMIN: AccountLocator(User, "user_id"),
    UserRoleEnum.TEACHER: AccountLocator(Teacher, "teacher_id", extra_claims=_teacher_claims),
    UserRoleEnum.STUDENT: AccountLocator(Student, "student_id", extra_claims=_student_claims),
    UserRoleEnum.PARENT: AccountLocator(Parent, "parent_id", extra_claims=_parent_claims),
}


class AuthService:
    """
    Unified login for all five account shapes.

    The registry entry decides where the account lives; every credential
    failure raises the same ``InvalidCredentials`` so callers cannot tell an
    unknown email from a wrong password.
    """

    def __init__(
        self,
        database: Database,
        directory: TenantDirectory,
        tenant_pool: TenantConnectionPool,
        timeout: Optional[float] = None
    ):
        self.database = database
        self.directory = directory
        self.tenant_pool = tenant_pool
        self.timeout = timeout if timeout is not None else settings.DB_TIMEOUT_SECONDS

    async def login(self, email: Optional[str], password: Optional[str]) -> Tuple[str, Dict[str, Any]]:
        """
        Authenticate and issue a session token.

        Returns:
            ``(token, user)`` where ``user`` is the display summary of the account
        """
        normalized = normalize_email(email)
        if not normalized or not password:
            raise MissingCredentials()

        try:
            claims = await asyncio.wait_for(self._authenticate(normalized, password), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error("Login timed out waiting on the database")
            raise ServiceUnavailable()

        token = create_access_token(claims)
        logger.info(
            "Login successful",
            extra={"user_id": claims.account_id, "role": claims.role.value, "school_id": claims.school_id}
        )
        return token, self._account_summary(claims)

    async def _authenticate(self, email: str, password: str) -> SessionClaims:
        async with self.database.session() as session:
            entry = await EmailRegistryService(session).find_active(email)

        if entry is None:
            await self._reject("unknown or inactive email", password)

        try:
            role = UserRoleEnum(entry.role)
        except ValueError:
            await self._reject(f"registry entry has unknown role {entry.role!r}", password)

        locator = ACCOUNT_LOCATORS[role]
        if role.is_tenant_scoped:
            return await self._authenticate_tenant_account(role, locator, entry.school_id, email, password)
        return await self._authenticate_platform_account(role, locator, email, password)

    async def _authenticate_platform_account(
        self,
        role: UserRoleEnum,
        locator: AccountLocator,
        email: str,
        password: str
    ) -> SessionClaims:
        async with self.database.session() as session:
            account = await self._find_account(session, locator, email)

        if account is None or not self._status_allows_login(locator, account.status):
            await self._reject(f"{role.value} account missing or not active", password)

        school: Optional[School] = None
        if role == UserRoleEnum.SCHOOL_ADMIN:
            school = await self._require_active_school(account.school_id)

        if not await check_password(password, account.password_hash):
            await self._reject("password mismatch")

        claims: Dict[str, Any] = {
            "account_id": getattr(account, locator.id_field),
            "email": account.email,
            "role": role,
            "username": account.username,
            "first_name": account.first_name,
            "last_name": account.last_name,
        }
        if school is not None:
            claims.update({
                "school_id": school.school_id,
                "database_name": school.database_name,
                "school_name": school.school_name,
            })
        return SessionClaims(**claims)

    async def _authenticate_tenant_account(
        self,
        role: UserRoleEnum,
        locator: AccountLocator,
        school_id: Optional[str],
        email: str,
        password: str
    ) -> SessionClaims:
        try:
            database_name = await self.directory.resolve_database_name(school_id)
        except TenantNotFound:
            logger.warning(f"Registry points {role.value} login at unknown school {school_id}")
            raise TenantInactive()

        async with self.tenant_pool.session(database_name) as session:
            account = await self._find_account(session, locator, email)

        if account is None or not self._status_allows_login(locator, account.status):
            await self._reject(f"{role.value} account missing or not active", password)

        school = await self._require_active_school(school_id)

        if not await check_password(password, account.password_hash):
            await self._reject("password mismatch")

        claims: Dict[str, Any] = {
            "account_id": getattr(account, locator.id_field),
            "email": account.email,
            "role": role,
            "school_id": school.school_id,
            "database_name": database_name,
            "school_name": school.school_name,
            "first_name": account.first_name,
            "last_name": account.last_name,
        }
        if locator.extra_claims is not None:
            claims.update(await locator.extra_claims(self, database_name, account))
        return SessionClaims(**claims)

    @staticmethod
    async def _find_account(session: AsyncSession, locator: AccountLocator, email: str):
        result = await session.execute(select(locator.model).where(locator.model.email == email))
        return result.scalars().first()

    @staticmethod
    def _status_allows_login(locator: AccountLocator, status: Optional[str]) -> bool:
        if not status:
            return locator.allow_unset_status
        return status == RecordStatus.ACTIVE.value

    async def _require_active_school(self, school_id: Optional[str]) -> School:
        try:
            school = await self.directory.get_record(school_id)
        except TenantNotFound:
            school = None

        if school is None or not school.is_active:
            logger.warning(f"Login refused for inactive school {school_id}", extra={"school_id": school_id})
            raise TenantInactive()
        return school

    @staticmethod
    async def _reject(reason: str, password: Optional[str] = None) -> None:
        """
        Fail the login with the generic credentials error.

        Rejections that happen before the real password check pass the
        password so it is still run through bcrypt against a decoy hash.
        """
        if password is not None:
            await check_password(password, None)
        logger.warning(f"Login failed: {reason}")
        raise InvalidCredentials()

    async def resolve_subject_names(self, database_name: str, subject_ids) -> list:
        """Names of the given subjects; an empty list when the lookup fails"""
        if not subject_ids:
            return []
        try:
            async with self.tenant_pool.session(database_name) as session:
                result = await session.execute(
                    select(Subject.subject_id, Subject.name).where(Subject.subject_id.in_(subject_ids))
                )
                names = dict(result.all())
        except Exception as e:
            logger.warning(f"Subject name lookup failed for {database_name}: {str(e)}")
            return []
        return [names[subject_id] for subject_id in subject_ids if subject_id in names]

    async def resolve_class_names(
        self,
        database_name: str,
        class_id: Optional[str],
        section: Optional[str]
    ) -> Tuple[Optional[str], Optional[str]]:
        """Display names of a class and section, falling back to the raw ids"""
        if not class_id:
            return class_id, section
        try:
            async with self.tenant_pool.session(database_name) as session:
                result = await session.execute(select(Class).where(Class.class_id == class_id))
                class_ = result.scalar_one_or_none()
        except Exception as e:
            logger.warning(f"Class name lookup failed for {database_name}: {str(e)}")
            return class_id, section

        if class_ is None:
            return class_id, section

        section_entry = class_.find_section(section) if section else None
        section_name = section_entry.get("name") if section_entry else section
        return class_.name, section_name or section

    @staticmethod
    def _account_summary(claims: SessionClaims) -> Dict[str, Any]:
        summary = claims.to_payload()
        summary.pop("databaseName", None)
        summary["userId"] = claims.account_id
        return summary

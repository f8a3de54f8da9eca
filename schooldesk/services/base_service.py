# schooldesk/services/base_service.py
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type

from pydantic import BaseModel
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.dependencies import TenantContext
from schooldesk.core.errors import DuplicateResource, Forbidden, NotFoundError
from schooldesk.core.logging import logger
from schooldesk.core.security import hash_password
from schooldesk.models.parent import Parent
from schooldesk.models.student import Student
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.email_registry_service import EmailRegistryService
from schooldesk.utils.identifiers import generate_sequential_id, normalize_email


def dump_values(data: BaseModel, **kwargs: Any) -> Dict[str, Any]:
    """Field values of a request model with enums reduced to their plain values"""
    values = data.model_dump(**kwargs)
    for field, value in values.items():
        if isinstance(value, Enum):
            values[field] = value.value
        elif isinstance(value, list):
            values[field] = [item.value if isinstance(item, Enum) else item for item in value]
    return values


class BaseService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, conflict_message: str = "Resource already exists") -> None:
        """Commit, reporting unique-constraint races as duplicates"""
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.error(f"Database Integrity Error: {e.orig}")
            raise DuplicateResource(conflict_message)


class TenantService(BaseService):
    """Base for services working inside one school's database"""

    def __init__(self, context: TenantContext):
        super().__init__(context.session)
        self.context = context
        self.school_id = context.school_id

    async def _lookup(self, id_column, ids: Iterable[Optional[str]]) -> Dict[str, Any]:
        """Rows of ``id_column``'s model keyed by public id, for display names"""
        wanted = {value for value in ids if value}
        if not wanted:
            return {}
        model = id_column.class_
        result = await self.db.execute(select(model).where(id_column.in_(wanted)))
        return {getattr(row, id_column.key): row for row in result.scalars().all()}

    async def _get_visible_student(self, student_id: str) -> Student:
        """Students may only look at themselves and parents at their own children"""
        claims = self.context.claims
        if claims.role == UserRoleEnum.STUDENT and claims.account_id != student_id:
            raise Forbidden("You can only view your own records")

        result = await self.db.execute(select(Student).where(Student.student_id == student_id))
        student = result.scalar_one_or_none()
        if student is None:
            raise NotFoundError("Student not found", details={"student_id": student_id})

        if claims.role == UserRoleEnum.PARENT and student.parent_id != claims.account_id:
            result = await self.db.execute(select(Parent).where(Parent.parent_id == claims.account_id))
            parent = result.scalar_one_or_none()
            if parent is None or student_id not in (parent.student_ids or []):
                raise Forbidden("You can only view your own children's records")
        return student


class AccountService(BaseService):
    """
    CRUD shared by login-capable accounts (school admins and tenant accounts).

    Creating an account registers its email globally; email and status
    changes are mirrored to the registry; deletes are soft.
    """
    model: Type = None
    id_field: str = None
    id_prefix: str = None
    role: UserRoleEnum = None
    label: str = "Account"
    search_fields = ("first_name", "last_name", "email")

    def __init__(self, db: AsyncSession, school_id: Optional[str] = None):
        super().__init__(db)
        self.school_id = school_id
        self.registry = EmailRegistryService(self.db)

    @property
    def id_column(self):
        return getattr(self.model, self.id_field)

    async def get(self, account_id: str):
        result = await self.db.execute(select(self.model).where(self.id_column == account_id))
        account = result.scalar_one_or_none()
        if account is None:
            raise NotFoundError(f"{self.label} not found", details={self.id_field: account_id})
        return account

    async def list(self, **filters: Any) -> List:
        stmt = select(self.model)
        for field, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, field) == value)
        result = await self.db.execute(stmt.order_by(self.id_column))
        return list(result.scalars().all())

    async def search(self, query: Optional[str], limit: int = 10) -> List:
        """Partial, case-insensitive match over id and name/contact fields of active accounts"""
        if not query or len(query.strip()) < 2:
            return []
        pattern = f"%{query.strip()}%"
        columns = [self.id_column] + [getattr(self.model, field) for field in self.search_fields]
        stmt = (
            select(self.model)
            .where(or_(*(column.ilike(pattern) for column in columns)))
            .where(self.model.status == RecordStatus.ACTIVE.value)
            .order_by(self.id_column)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _create_account(self, values: Dict[str, Any], password: str):
        email = values.get("email")
        if email:
            values["email"] = await self.registry.ensure_available(email)

        account_id = await generate_sequential_id(self.db, self.id_column, self.id_prefix)
        account = self.model(
            **values,
            **{self.id_field: account_id},
            password_hash=await hash_password(password)
        )
        self.db.add(account)

        if account.email:
            await self.registry.register(
                account.email,
                self.role,
                self._account_school_id(account),
                account_id,
                status=self._registry_status(account.status)
            )
        return account

    async def _apply_update(self, account, values: Dict[str, Any]) -> None:
        """Apply changed fields, keeping the email registry in sync"""
        password = values.pop("password", None)
        if password:
            account.password_hash = await hash_password(password)

        if "email" in values:
            new_email = normalize_email(values.pop("email"))
            if new_email and new_email != account.email:
                if account.email:
                    await self.registry.change_email(account.email, new_email)
                else:
                    await self.registry.ensure_available(new_email)
                    await self.registry.register(
                        new_email,
                        self.role,
                        self._account_school_id(account),
                        getattr(account, self.id_field),
                        status=self._registry_status(values.get("status") or account.status)
                    )
                account.email = new_email

        status = values.pop("status", None)
        if status is not None:
            account.status = status
            await self.registry.set_status(account.email, self._registry_status(account.status))

        for field, value in values.items():
            setattr(account, field, value)

    async def _soft_delete(self, account) -> None:
        account.status = RecordStatus.INACTIVE.value
        await self.registry.set_status(account.email, RecordStatus.INACTIVE.value)

    @staticmethod
    def _registry_status(status: Optional[str]) -> str:
        # Graduated students keep their record but can no longer log in
        if status == RecordStatus.ACTIVE.value:
            return RecordStatus.ACTIVE.value
        return RecordStatus.INACTIVE.value

    def _account_school_id(self, account) -> Optional[str]:
        return getattr(account, "school_id", None) or self.school_id


class TenantAccountService(AccountService):
    """Accounts stored in a school's own database (teachers, students, parents)"""

    def __init__(self, context: TenantContext):
        super().__init__(context.session, context.school_id)
        self.context = context

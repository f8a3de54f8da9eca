# school_admin_service.py
import logging
from typing import List, Optional

from sqlalchemy import select

from schooldesk.core.errors import DuplicateResource, TenantNotFound
from schooldesk.models.school import School
from schooldesk.models.user import User
from schooldesk.schemas.school import SchoolAdminCreate, SchoolAdminUpdate
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import AccountService, dump_values
from schooldesk.utils.identifiers import USER_PREFIX

logger = logging.getLogger("schooldesk.services.school_admin")


class SchoolAdminService(AccountService):
    """School admins live in the platform database and belong to one school"""
    model = User
    id_field = "user_id"
    id_prefix = USER_PREFIX
    role = UserRoleEnum.SCHOOL_ADMIN
    label = "User"
    search_fields = ("username", "first_name", "last_name", "email")

    async def _ensure_school(self, school_id: str) -> None:
        result = await self.db.execute(select(School.id).where(School.school_id == school_id))
        if result.scalar_one_or_none() is None:
            raise TenantNotFound(details={"schoolId": school_id})

    async def _ensure_unique_username(self, username: str, exclude_user_id: Optional[str] = None) -> None:
        stmt = select(User.id).where(User.username == username)
        if exclude_user_id:
            stmt = stmt.where(User.user_id != exclude_user_id)
        result = await self.db.execute(stmt)
        if result.scalar_one_or_none() is not None:
            raise DuplicateResource("Username already exists")

    async def create_user(self, data: SchoolAdminCreate) -> User:
        await self._ensure_school(data.school_id)
        await self._ensure_unique_username(data.username)

        values = dump_values(data, exclude={"password"})
        values["status"] = RecordStatus.ACTIVE.value
        user = await self._create_account(values, data.password)
        await self._commit("Email already exists in the system")
        logger.info(f"Created school admin {user.user_id} for school {user.school_id}")
        return user

    async def list_users(self, school_id: Optional[str] = None, status: Optional[str] = None) -> List[User]:
        return await self.list(school_id=school_id, status=status)

    async def update_user(self, user_id: str, data: SchoolAdminUpdate) -> User:
        user = await self.get(user_id)
        values = dump_values(data, exclude_unset=True)
        if values.get("username"):
            await self._ensure_unique_username(values["username"], exclude_user_id=user_id)
        elif "username" in values:
            values.pop("username")
        await self._apply_update(user, values)
        await self._commit("Email already exists in the system")
        return user

    async def delete_user(self, user_id: str) -> User:
        user = await self.get(user_id)
        await self._soft_delete(user)
        await self._commit()
        logger.info(f"Deactivated school admin {user_id}")
        return user

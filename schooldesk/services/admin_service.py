# admin_service.py
import logging
from typing import Optional

from sqlalchemy import func, select

from schooldesk.core.errors import DuplicateResource
from schooldesk.core.security import hash_password
from schooldesk.models.admin import Admin
from schooldesk.schemas.auth.requests import CreateAdminRequest
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import BaseService
from schooldesk.services.email_registry_service import EmailRegistryService
from schooldesk.utils.identifiers import ADMIN_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.admin")


class AdminService(BaseService):
    """Super admin accounts"""

    async def create_admin(self, data: CreateAdminRequest) -> Admin:
        registry = EmailRegistryService(self.db)
        email = await registry.ensure_available(data.email)

        result = await self.db.execute(select(Admin.id).where(Admin.username == data.username))
        if result.scalar_one_or_none() is not None:
            raise DuplicateResource("Username already exists")

        admin = Admin(
            admin_id=await generate_sequential_id(self.db, Admin.admin_id, ADMIN_PREFIX),
            username=data.username,
            email=email,
            password_hash=await hash_password(data.password),
            status=RecordStatus.ACTIVE.value
        )
        self.db.add(admin)
        await registry.register(email, UserRoleEnum.SUPER_ADMIN, None, admin.admin_id)
        await self._commit("Email already exists")
        logger.info(f"Created super admin {admin.admin_id}")
        return admin

    async def ensure_bootstrap_admin(self, email: Optional[str], password: Optional[str], username: str) -> Optional[Admin]:
        """Create the first super admin from configuration when none exists yet"""
        if not email or not password:
            return None

        result = await self.db.execute(select(func.count(Admin.id)))
        if result.scalar_one() > 0:
            return None

        logger.info("No super admin found; creating bootstrap account")
        return await self.create_admin(
            CreateAdminRequest(username=username, email=email, password=password)
        )

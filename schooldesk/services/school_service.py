# school_service.py
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.core.database import Database
from schooldesk.core.errors import DuplicateResource, TenantNotFound
from schooldesk.core.logging import log_function_call
from schooldesk.models.school import School
from schooldesk.models.user import User
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.schemas.school import DashboardStats, SchoolCreate
from schooldesk.services.base_service import BaseService
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.utils.identifiers import SCHOOL_PREFIX, generate_sequential_id, slugify_database_name

logger = logging.getLogger("schooldesk.services.school")


class SchoolService(BaseService):
    """
    Tenant provisioning and the platform view of schools.

    A school is provisioned by creating its logical database first and only
    then its directory entry, so the directory never points at a database
    that does not exist.
    """

    def __init__(self, db: AsyncSession, database: Database, directory: TenantDirectory):
        super().__init__(db)
        self.database = database
        self.directory = directory

    async def get_school(self, school_id: str) -> School:
        result = await self.db.execute(select(School).where(School.school_id == school_id))
        school = result.scalar_one_or_none()
        if school is None:
            raise TenantNotFound(details={"schoolId": school_id})
        return school

    @log_function_call(logger)
    async def create_school(self, data: SchoolCreate) -> School:
        name = data.school_name.strip()
        result = await self.db.execute(select(School.id).where(func.lower(School.school_name) == name.lower()))
        if result.scalar_one_or_none() is not None:
            raise DuplicateResource("School with this name already exists")

        school_id = await generate_sequential_id(self.db, School.school_id, SCHOOL_PREFIX)
        database_name = slugify_database_name(name, school_id)

        await self.database.create_tenant_database(database_name)

        school = School(
            school_id=school_id,
            database_name=database_name,
            school_name=name,
            email=str(data.email).lower() if data.email else None,
            phone=data.phone,
            address=data.address,
            status=RecordStatus.ACTIVE.value
        )
        self.db.add(school)
        try:
            await self._commit("School already exists")
        except DuplicateResource:
            await self.database.drop_tenant_database(database_name)
            raise
        logger.info(f"Provisioned school {school_id} with database {database_name}")
        return school

    async def list_schools(self, status: Optional[str] = None) -> List[School]:
        stmt = select(School).order_by(School.school_id)
        if status:
            stmt = stmt.where(School.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def set_status(self, school_id: str, status: RecordStatus) -> School:
        school = await self.get_school(school_id)
        school.status = RecordStatus(status).value
        await self._commit()
        logger.info(f"School {school_id} is now {school.status}")
        return school

    async def dashboard_stats(self) -> DashboardStats:
        async def count(stmt) -> int:
            result = await self.db.execute(stmt)
            return result.scalar_one()

        total_schools = await count(select(func.count(School.id)))
        active_schools = await count(
            select(func.count(School.id)).where(School.status == RecordStatus.ACTIVE.value)
        )
        total_users = await count(select(func.count(User.id)))
        active_users = await count(
            select(func.count(User.id)).where(User.status == RecordStatus.ACTIVE.value)
        )
        return DashboardStats(
            total_schools=total_schools,
            active_schools=active_schools,
            inactive_schools=total_schools - active_schools,
            total_users=total_users,
            active_users=active_users
        )

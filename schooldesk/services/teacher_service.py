# teacher_service.py
import logging
from typing import List, Optional

from schooldesk.models.teacher import Teacher
from schooldesk.schemas.teacher import TeacherCreate, TeacherUpdate
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantAccountService, dump_values
from schooldesk.utils.identifiers import TEACHER_PREFIX

logger = logging.getLogger("schooldesk.services.teacher")


class TeacherService(TenantAccountService):
    model = Teacher
    id_field = "teacher_id"
    id_prefix = TEACHER_PREFIX
    role = UserRoleEnum.TEACHER
    label = "Teacher"

    async def create_teacher(self, data: TeacherCreate) -> Teacher:
        values = dump_values(data, exclude={"password"})
        teacher = await self._create_account(values, data.password)
        await self._commit("Email already exists in the system")
        logger.info(f"Created teacher {teacher.teacher_id} in school {self.school_id}")
        return teacher

    async def list_teachers(self, department: Optional[str] = None, status: Optional[str] = None) -> List[Teacher]:
        return await self.list(department=department, status=status)

    async def update_teacher(self, teacher_id: str, data: TeacherUpdate) -> Teacher:
        teacher = await self.get(teacher_id)
        await self._apply_update(teacher, dump_values(data, exclude_unset=True))
        await self._commit("Email already exists in the system")
        return teacher

    async def delete_teacher(self, teacher_id: str) -> Teacher:
        teacher = await self.get(teacher_id)
        await self._soft_delete(teacher)
        await self._commit()
        logger.info(f"Deactivated teacher {teacher_id} in school {self.school_id}")
        return teacher

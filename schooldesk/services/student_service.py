# student_service.py
import logging
from typing import Dict, List, Optional

from sqlalchemy import select

from schooldesk.core.errors import NotFoundError
from schooldesk.models.parent import Parent
from schooldesk.models.student import Student
from schooldesk.schemas.student import StudentCreate, StudentUpdate
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantAccountService, dump_values
from schooldesk.utils.identifiers import STUDENT_PREFIX

logger = logging.getLogger("schooldesk.services.student")


class StudentService(TenantAccountService):
    """Students, with the student <-> parent link kept on both sides"""
    model = Student
    id_field = "student_id"
    id_prefix = STUDENT_PREFIX
    role = UserRoleEnum.STUDENT
    label = "Student"
    search_fields = ("first_name", "last_name", "email", "roll_number")

    async def _get_parent(self, parent_id: str) -> Parent:
        result = await self.db.execute(select(Parent).where(Parent.parent_id == parent_id))
        parent = result.scalar_one_or_none()
        if parent is None:
            raise NotFoundError("Parent not found", details={"parent_id": parent_id})
        return parent

    async def _link_parent(self, parent_id: Optional[str], student_id: str) -> None:
        if not parent_id:
            return
        parent = await self._get_parent(parent_id)
        if student_id not in (parent.student_ids or []):
            parent.student_ids = [*(parent.student_ids or []), student_id]

    async def _unlink_parent(self, parent_id: Optional[str], student_id: str) -> None:
        if not parent_id:
            return
        result = await self.db.execute(select(Parent).where(Parent.parent_id == parent_id))
        parent = result.scalar_one_or_none()
        if parent is not None:
            parent.student_ids = [sid for sid in (parent.student_ids or []) if sid != student_id]

    async def create_student(self, data: StudentCreate) -> Student:
        values = dump_values(data, exclude={"password"})
        if data.parent_id:
            # Fail before allocating an id when the parent does not exist
            await self._get_parent(data.parent_id)

        student = await self._create_account(values, data.password)
        await self._link_parent(student.parent_id, student.student_id)
        await self._commit("Email already exists in the system")
        logger.info(f"Created student {student.student_id} in school {self.school_id}")
        return student

    async def list_students(
        self,
        class_id: Optional[str] = None,
        section: Optional[str] = None,
        status: Optional[str] = None,
        parent_id: Optional[str] = None
    ) -> List[Student]:
        return await self.list(class_id=class_id, section=section, status=status, parent_id=parent_id)

    async def parent_names(self, students: List[Student]) -> Dict[str, str]:
        """Display names of the parents of ``students`` keyed by parent id"""
        parent_ids = {student.parent_id for student in students if student.parent_id}
        if not parent_ids:
            return {}
        result = await self.db.execute(select(Parent).where(Parent.parent_id.in_(parent_ids)))
        return {parent.parent_id: parent.full_name for parent in result.scalars().all()}

    async def update_student(self, student_id: str, data: StudentUpdate) -> Student:
        student = await self.get(student_id)
        values = dump_values(data, exclude_unset=True)

        if "parent_id" in values and values["parent_id"] != student.parent_id:
            new_parent_id = values["parent_id"]
            if new_parent_id:
                await self._get_parent(new_parent_id)
            await self._unlink_parent(student.parent_id, student_id)
            await self._link_parent(new_parent_id, student_id)

        await self._apply_update(student, values)
        await self._commit("Email already exists in the system")
        return student

    async def delete_student(self, student_id: str) -> Student:
        student = await self.get(student_id)
        await self._soft_delete(student)
        await self._commit()
        logger.info(f"Deactivated student {student_id} in school {self.school_id}")
        return student

# parent_service.py
import logging
from typing import Iterable, List, Optional

from sqlalchemy import select

from schooldesk.core.errors import NotFoundError
from schooldesk.models.parent import Parent
from schooldesk.models.student import Student
from schooldesk.schemas.parents import ParentCreate, ParentUpdate
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantAccountService, dump_values
from schooldesk.utils.identifiers import PARENT_PREFIX

logger = logging.getLogger("schooldesk.services.parent")


class ParentService(TenantAccountService):
    """Parents, with the parent <-> student link kept on both sides"""
    model = Parent
    id_field = "parent_id"
    id_prefix = PARENT_PREFIX
    role = UserRoleEnum.PARENT
    label = "Parent"
    search_fields = ("first_name", "last_name", "email", "phone")

    async def _load_students(self, student_ids: Iterable[str]) -> List[Student]:
        wanted = list(dict.fromkeys(student_ids))
        if not wanted:
            return []
        result = await self.db.execute(select(Student).where(Student.student_id.in_(wanted)))
        students = list(result.scalars().all())
        missing = set(wanted) - {student.student_id for student in students}
        if missing:
            raise NotFoundError("Student not found", details={"student_ids": sorted(missing)})
        return students

    async def create_parent(self, data: ParentCreate) -> Parent:
        values = dump_values(data, exclude={"password"})
        values["student_ids"] = list(dict.fromkeys(values.get("student_ids") or []))
        await self._load_students(values["student_ids"])

        parent = await self._create_account(values, data.password)
        parent.student_ids = []
        await self._relink_students(parent, values["student_ids"])
        parent.student_ids = values["student_ids"]
        await self._commit("Email already exists in the system")
        logger.info(f"Created parent {parent.parent_id} in school {self.school_id}")
        return parent

    async def list_parents(self, status: Optional[str] = None, relationship: Optional[str] = None) -> List[Parent]:
        return await self.list(status=status, relationship=relationship)

    async def list_by_student(self, student_id: str) -> List[Parent]:
        # JSON containment differs per dialect, so filter in Python
        parents = await self.list()
        return [parent for parent in parents if student_id in (parent.student_ids or [])]

    async def update_parent(self, parent_id: str, data: ParentUpdate) -> Parent:
        parent = await self.get(parent_id)
        values = dump_values(data, exclude_unset=True)

        if values.get("student_ids") is not None:
            new_ids = list(dict.fromkeys(values["student_ids"]))
            await self._load_students(new_ids)
            await self._relink_students(parent, new_ids)
            values["student_ids"] = new_ids
        else:
            values.pop("student_ids", None)

        await self._apply_update(parent, values)
        await self._commit("Email already exists in the system")
        return parent

    async def _relink_students(self, parent: Parent, new_ids: List[str]) -> None:
        old_ids = set(parent.student_ids or [])
        removed = old_ids - set(new_ids)
        added = set(new_ids) - old_ids

        if removed:
            result = await self.db.execute(select(Student).where(Student.student_id.in_(removed)))
            for student in result.scalars().all():
                if student.parent_id == parent.parent_id:
                    student.parent_id = None
        if added:
            result = await self.db.execute(select(Student).where(Student.student_id.in_(added)))
            students = list(result.scalars().all())
            previous = {s.parent_id for s in students if s.parent_id and s.parent_id != parent.parent_id}
            if previous:
                result = await self.db.execute(select(Parent).where(Parent.parent_id.in_(previous)))
                for other in result.scalars().all():
                    other.student_ids = [sid for sid in (other.student_ids or []) if sid not in added]
            for student in students:
                student.parent_id = parent.parent_id

    async def delete_parent(self, parent_id: str) -> Parent:
        parent = await self.get(parent_id)
        await self._soft_delete(parent)
        await self._commit()
        logger.info(f"Deactivated parent {parent_id} in school {self.school_id}")
        return parent

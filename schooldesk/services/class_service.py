# class_service.py
import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select

from schooldesk.core.errors import DuplicateResource, NotFoundError
from schooldesk.models.class_ import Class
from schooldesk.models.teacher import Teacher
from schooldesk.schemas.academics import ClassCreate, ClassUpdate, SectionCreate
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.utils.identifiers import CLASS_PREFIX, ID_WIDTH, SECTION_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.class")


def next_section_number(sections: List[Dict], last_issued: Optional[int] = 0) -> int:
    """
    Section ids are numbered within their class and never reused, even after
    the section holding the highest number is removed.
    """
    last_number = last_issued or 0
    for section in sections or []:
        section_id = section.get("sectionId") or ""
        try:
            last_number = max(last_number, int(section_id[len(SECTION_PREFIX):]))
        except ValueError:
            continue
    return last_number + 1


def format_section_id(number: int) -> str:
    return f"{SECTION_PREFIX}{str(number).zfill(ID_WIDTH)}"


class ClassService(TenantService):

    async def get_class(self, class_id: str) -> Class:
        result = await self.db.execute(select(Class).where(Class.class_id == class_id))
        class_ = result.scalar_one_or_none()
        if class_ is None:
            raise NotFoundError("Class not found", details={"class_id": class_id})
        return class_

    async def _ensure_unique_name(self, name: str, exclude_class_id: Optional[str] = None) -> None:
        stmt = select(Class).where(func.lower(Class.name) == name.strip().lower())
        if exclude_class_id:
            stmt = stmt.where(Class.class_id != exclude_class_id)
        result = await self.db.execute(stmt)
        if result.scalars().first() is not None:
            raise DuplicateResource("Class with this name already exists")

    async def _ensure_teacher(self, teacher_id: Optional[str]) -> None:
        if not teacher_id:
            return
        result = await self.db.execute(select(Teacher.id).where(Teacher.teacher_id == teacher_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Teacher not found", details={"teacher_id": teacher_id})

    async def create_class(self, data: ClassCreate) -> Class:
        await self._ensure_unique_name(data.name)

        sections: List[Dict] = []
        for section in data.sections:
            sections.append(await self._build_section(sections, section, format_section_id(len(sections) + 1)))

        class_ = Class(
            class_id=await generate_sequential_id(self.db, Class.class_id, CLASS_PREFIX),
            name=data.name.strip(),
            description=data.description,
            sections=sections,
            last_section_number=len(sections)
        )
        self.db.add(class_)
        await self._commit("Class with this name already exists")
        logger.info(f"Created class {class_.class_id} in school {self.school_id}")
        return class_

    async def list_classes(self, status: Optional[str] = None) -> List[Class]:
        stmt = select(Class).order_by(Class.class_id)
        if status:
            stmt = stmt.where(Class.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_class(self, class_id: str, data: ClassUpdate) -> Class:
        class_ = await self.get_class(class_id)
        values = dump_values(data, exclude_unset=True, exclude_none=True)
        if "name" in values:
            values["name"] = values["name"].strip()
            await self._ensure_unique_name(values["name"], exclude_class_id=class_id)
        for field, value in values.items():
            setattr(class_, field, value)
        await self._commit("Class with this name already exists")
        return class_

    async def delete_class(self, class_id: str) -> Class:
        class_ = await self.get_class(class_id)
        class_.status = RecordStatus.INACTIVE.value
        await self._commit()
        return class_

    async def _build_section(self, existing: List[Dict], data: SectionCreate, section_id: str) -> Dict:
        name = data.name.strip()
        if any((section.get("name") or "").lower() == name.lower() for section in existing):
            raise DuplicateResource("Section with this name already exists in this class")
        await self._ensure_teacher(data.class_teacher_id)
        return {
            "sectionId": section_id,
            "name": name,
            "classTeacherId": data.class_teacher_id,
        }

    async def add_section(self, class_id: str, data: SectionCreate) -> Class:
        class_ = await self.get_class(class_id)
        sections = list(class_.sections or [])
        number = next_section_number(sections, class_.last_section_number)
        sections.append(await self._build_section(sections, data, format_section_id(number)))
        class_.last_section_number = number
        # Reassign so the JSON column is flagged as modified
        class_.sections = sections
        await self._commit()
        return class_

    async def remove_section(self, class_id: str, section_id: str) -> Class:
        class_ = await self.get_class(class_id)
        sections = [section for section in (class_.sections or []) if section.get("sectionId") != section_id]
        if len(sections) == len(class_.sections or []):
            raise NotFoundError("Section not found", details={"section_id": section_id})
        class_.sections = sections
        await self._commit()
        return class_

    async def assign_class_teacher(self, class_id: str, section_id: str, teacher_id: Optional[str]) -> Class:
        class_ = await self.get_class(class_id)
        if not any(section.get("sectionId") == section_id for section in class_.sections or []):
            raise NotFoundError("Section not found", details={"section_id": section_id})
        await self._ensure_teacher(teacher_id)

        class_.sections = [
            {**section, "classTeacherId": teacher_id or None} if section.get("sectionId") == section_id else section
            for section in class_.sections
        ]
        await self._commit()
        return class_

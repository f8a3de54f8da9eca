# subject_service.py
import logging
from typing import List, Optional

from sqlalchemy import func, or_, select

from schooldesk.core.errors import DuplicateResource, NotFoundError
from schooldesk.models.subject import Subject
from schooldesk.schemas.academics import SubjectCreate, SubjectUpdate
from schooldesk.schemas.common.status import RecordStatus
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.utils.identifiers import SUBJECT_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.subject")

DUPLICATE_SUBJECT = "Subject with this name or code already exists"


class SubjectService(TenantService):

    async def get_subject(self, subject_id: str) -> Subject:
        result = await self.db.execute(select(Subject).where(Subject.subject_id == subject_id))
        subject = result.scalar_one_or_none()
        if subject is None:
            raise NotFoundError("Subject not found", details={"subject_id": subject_id})
        return subject

    async def _ensure_unique(
        self,
        name: Optional[str],
        code: Optional[str],
        exclude_subject_id: Optional[str] = None
    ) -> None:
        conditions = []
        if name:
            conditions.append(func.lower(Subject.name) == name.lower())
        if code:
            conditions.append(Subject.code == code)
        if not conditions:
            return

        stmt = select(Subject.id).where(or_(*conditions))
        if exclude_subject_id:
            stmt = stmt.where(Subject.subject_id != exclude_subject_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise DuplicateResource(DUPLICATE_SUBJECT)

    async def create_subject(self, data: SubjectCreate) -> Subject:
        name = data.name.strip()
        await self._ensure_unique(name, data.code)

        subject = Subject(
            subject_id=await generate_sequential_id(self.db, Subject.subject_id, SUBJECT_PREFIX),
            name=name,
            code=data.code,
            description=data.description
        )
        self.db.add(subject)
        await self._commit(DUPLICATE_SUBJECT)
        logger.info(f"Created subject {subject.subject_id} ({subject.code}) in school {self.school_id}")
        return subject

    async def list_subjects(self, status: Optional[str] = None) -> List[Subject]:
        stmt = select(Subject).order_by(Subject.name)
        if status:
            stmt = stmt.where(Subject.status == status)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def update_subject(self, subject_id: str, data: SubjectUpdate) -> Subject:
        subject = await self.get_subject(subject_id)
        values = dump_values(data, exclude_unset=True, exclude_none=True)
        if "name" in values:
            values["name"] = values["name"].strip()
        await self._ensure_unique(values.get("name"), values.get("code"), exclude_subject_id=subject_id)

        for field, value in values.items():
            setattr(subject, field, value)
        await self._commit(DUPLICATE_SUBJECT)
        return subject

    async def delete_subject(self, subject_id: str) -> Subject:
        subject = await self.get_subject(subject_id)
        subject.status = RecordStatus.INACTIVE.value
        await self._commit()
        return subject

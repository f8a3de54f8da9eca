# homework_service.py
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import or_, select

from schooldesk.core.errors import Forbidden, InvalidArgument, NotFoundError
from schooldesk.models.class_ import Class
from schooldesk.models.homework import Homework
from schooldesk.models.parent import Parent
from schooldesk.models.student import Student
from schooldesk.models.subject import Subject
from schooldesk.models.teacher import Teacher
from schooldesk.schemas.common.status import HomeworkStatus, NotificationType, RecordStatus
from schooldesk.schemas.homework import HomeworkCreate, HomeworkResponse, HomeworkUpdate
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.services.notification_service import NotificationService
from schooldesk.utils.identifiers import HOMEWORK_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.homework")


class HomeworkService(TenantService):

    async def create_homework(self, data: HomeworkCreate) -> Homework:
        claims = self.context.claims
        if claims.role == UserRoleEnum.TEACHER:
            teacher_id = claims.account_id
        elif data.teacher_id:
            teacher_id = data.teacher_id
        else:
            raise InvalidArgument("teacherId is required when a school admin assigns homework")

        class_ = (await self._lookup(Class.class_id, [data.class_id])).get(data.class_id)
        if class_ is None:
            raise NotFoundError("Class not found", details={"class_id": data.class_id})
        if data.section_id and class_.find_section(data.section_id) is None:
            raise NotFoundError("Section not found", details={"section_id": data.section_id})
        if not await self._lookup(Subject.subject_id, [data.subject_id]):
            raise NotFoundError("Subject not found", details={"subject_id": data.subject_id})
        if not await self._lookup(Teacher.teacher_id, [teacher_id]):
            raise NotFoundError("Teacher not found", details={"teacher_id": teacher_id})

        homework = Homework(
            homework_id=await generate_sequential_id(self.db, Homework.homework_id, HOMEWORK_PREFIX),
            **dump_values(data, exclude={"teacher_id"}),
            teacher_id=teacher_id,
            assigned_date=date.today(),
            status=HomeworkStatus.ACTIVE.value
        )
        self.db.add(homework)
        await self._commit()
        logger.info(f"Homework {homework.homework_id} assigned to class {homework.class_id} by {teacher_id}")

        await self._notify_assigned(homework, class_)
        return homework

    async def _notify_assigned(self, homework: Homework, class_: Class) -> None:
        """Tell the class's students and their parents; never blocks the assignment"""
        try:
            section = class_.find_section(homework.section_id) if homework.section_id else None
            stmt = select(Student).where(
                Student.class_id == homework.class_id,
                Student.status == RecordStatus.ACTIVE.value
            )
            if section:
                stmt = stmt.where(Student.section.in_([section["sectionId"], section["name"]]))
            students = list((await self.db.execute(stmt)).scalars().all())
            if not students:
                return

            student_ids = {student.student_id for student in students}
            parent_ids = {student.parent_id for student in students if student.parent_id}
            parents = (await self.db.execute(
                select(Parent).where(Parent.status == RecordStatus.ACTIVE.value)
            )).scalars().all()
            parent_ids.update(
                parent.parent_id for parent in parents
                if student_ids.intersection(parent.student_ids or [])
            )

            subject = (await self._lookup(Subject.subject_id, [homework.subject_id])).get(homework.subject_id)
            subject_name = getattr(subject, "name", "Subject")
            recipients = [(student_id, UserRoleEnum.STUDENT.value) for student_id in sorted(student_ids)]
            recipients += [(parent_id, UserRoleEnum.PARENT.value) for parent_id in sorted(parent_ids)]
            await NotificationService(self.context).try_notify_many(
                recipients,
                notification_type=NotificationType.HOMEWORK_ASSIGNED.value,
                title=f"New Homework: {homework.title}",
                message=f"{subject_name} homework for {class_.name}. Due: {homework.due_date.isoformat()}",
                reference_id=homework.homework_id,
                reference_type="homework",
                extra={"classId": homework.class_id, "subjectId": homework.subject_id}
            )
        except Exception as e:
            logger.error(f"Error notifying about homework {homework.homework_id}: {str(e)}")

    async def _enrich(self, items: List[Homework]) -> List[HomeworkResponse]:
        subjects = await self._lookup(Subject.subject_id, [item.subject_id for item in items])
        teachers = await self._lookup(Teacher.teacher_id, [item.teacher_id for item in items])
        classes = await self._lookup(Class.class_id, [item.class_id for item in items])
        today = date.today()

        enriched = []
        for item in items:
            response = HomeworkResponse.model_validate(item)
            teacher = teachers.get(item.teacher_id)
            response.subject_name = getattr(subjects.get(item.subject_id), "name", None)
            response.teacher_name = teacher.full_name if teacher else None
            response.class_name = getattr(classes.get(item.class_id), "name", None)
            response.is_overdue = item.status == HomeworkStatus.ACTIVE.value and item.due_date < today
            enriched.append(response)
        return enriched

    async def _list(self, stmt) -> List[HomeworkResponse]:
        result = await self.db.execute(stmt.order_by(Homework.due_date.desc(), Homework.homework_id))
        return await self._enrich(list(result.scalars().all()))

    async def list_for_class(
        self,
        class_id: str,
        section_id: Optional[str] = None,
        status: Optional[str] = None,
        subject_id: Optional[str] = None
    ) -> List[HomeworkResponse]:
        stmt = select(Homework).where(Homework.class_id == class_id)
        if section_id:
            stmt = stmt.where(or_(Homework.section_id == section_id, Homework.section_id.is_(None)))
        if status:
            stmt = stmt.where(Homework.status == status)
        if subject_id:
            stmt = stmt.where(Homework.subject_id == subject_id)
        return await self._list(stmt)

    async def _student_scope(self, student: Student):
        """Homework of the student's class, for their section or the whole class"""
        if not student.class_id:
            return None
        criteria = [Homework.section_id.is_(None)]
        if student.section:
            sections = {student.section}
            class_ = (await self._lookup(Class.class_id, [student.class_id])).get(student.class_id)
            section = class_.find_section(student.section) if class_ else None
            if section:
                sections.add(section["sectionId"])
            criteria.append(Homework.section_id.in_(sections))
        return select(Homework).where(Homework.class_id == student.class_id, or_(*criteria))

    async def list_for_student(
        self,
        student_id: str,
        status: Optional[str] = None,
        subject_id: Optional[str] = None
    ) -> List[HomeworkResponse]:
        student = await self._get_visible_student(student_id)
        stmt = await self._student_scope(student)
        if stmt is None:
            return []
        if status:
            stmt = stmt.where(Homework.status == status)
        if subject_id:
            stmt = stmt.where(Homework.subject_id == subject_id)
        return await self._list(stmt)

    async def upcoming_for_student(self, student_id: str, limit: int = 5) -> List[HomeworkResponse]:
        student = await self._get_visible_student(student_id)
        stmt = await self._student_scope(student)
        if stmt is None:
            return []
        stmt = (
            stmt.where(Homework.status == HomeworkStatus.ACTIVE.value, Homework.due_date >= date.today())
            .order_by(Homework.due_date, Homework.homework_id)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return await self._enrich(list(result.scalars().all()))

    async def list_for_teacher(
        self,
        teacher_id: str,
        status: Optional[str] = None,
        class_id: Optional[str] = None
    ) -> List[HomeworkResponse]:
        stmt = select(Homework).where(Homework.teacher_id == teacher_id)
        if status:
            stmt = stmt.where(Homework.status == status)
        if class_id:
            stmt = stmt.where(Homework.class_id == class_id)
        return await self._list(stmt)

    async def get_homework(self, homework_id: str) -> Homework:
        result = await self.db.execute(select(Homework).where(Homework.homework_id == homework_id))
        homework = result.scalar_one_or_none()
        if homework is None:
            raise NotFoundError("Homework not found", details={"homework_id": homework_id})
        return homework

    async def get_homework_details(self, homework_id: str) -> HomeworkResponse:
        return (await self._enrich([await self.get_homework(homework_id)]))[0]

    async def _get_editable(self, homework_id: str) -> Homework:
        homework = await self.get_homework(homework_id)
        claims = self.context.claims
        if claims.role != UserRoleEnum.SCHOOL_ADMIN and homework.teacher_id != claims.account_id:
            raise Forbidden("Only the assigning teacher or a school admin can change this homework")
        return homework

    async def update_homework(self, homework_id: str, data: HomeworkUpdate) -> Homework:
        homework = await self._get_editable(homework_id)
        for field, value in dump_values(data, exclude_unset=True, exclude_none=True).items():
            setattr(homework, field, value)
        await self._commit()
        return homework

    async def delete_homework(self, homework_id: str) -> Homework:
        homework = await self._get_editable(homework_id)
        homework.status = HomeworkStatus.CANCELLED.value
        await self._commit()
        logger.info(f"Homework {homework_id} cancelled by {self.context.claims.account_id}")
        return homework

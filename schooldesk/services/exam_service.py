# exam_service.py
import logging
from datetime import time
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, update

from schooldesk.core.errors import DuplicateResource, InvalidArgument, NotFoundError, ScheduleConflict
from schooldesk.models.base import utcnow
from schooldesk.models.class_ import Class
from schooldesk.models.exam import Exam, ExamResult, ExamSchedule, GradingSystem
from schooldesk.models.student import Student
from schooldesk.models.subject import Subject
from schooldesk.models.teacher import Teacher
from schooldesk.models.timetable import TimetableConfig, TimetableEntry
from schooldesk.schemas.common.status import ExamStatus, NotificationType, RecordStatus
from schooldesk.schemas.exam import (
    ExamCreate,
    ExamResultResponse,
    ExamScheduleCreate,
    ExamScheduleResponse,
    GradingSystemCreate,
    MarksSubmission,
)
from schooldesk.schemas.user.role import UserRoleEnum
from schooldesk.services.base_service import TenantService, dump_values
from schooldesk.services.notification_service import NotificationService
from schooldesk.utils.identifiers import (
    EXAM_PREFIX,
    EXAM_SCHEDULE_PREFIX,
    GRADING_SYSTEM_PREFIX,
    generate_sequential_id,
)

logger = logging.getLogger("schooldesk.services.exam")

FALLBACK_GRADE = ("F", 0.0)


def calculate_grade(percentage: float, grades: Optional[List[Dict[str, Any]]]) -> Tuple[Optional[str], Optional[float]]:
    """Highest band whose minimum the percentage reaches; F when none does"""
    if not grades:
        return None, None
    for band in sorted(grades, key=lambda g: g.get("minPercentage", 0), reverse=True):
        if percentage >= band.get("minPercentage", 0):
            return band.get("name"), band.get("points", 0)
    return FALLBACK_GRADE


def overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and start_b < end_a


def minutes_between(start: time, end: time) -> int:
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


class ExamService(TenantService):

    # Grading systems

    async def create_grading_system(self, data: GradingSystemCreate) -> GradingSystem:
        result = await self.db.execute(select(GradingSystem.id).where(GradingSystem.name == data.name.strip()))
        if result.scalar_one_or_none() is not None:
            raise DuplicateResource("Grading system with this name already exists")

        if data.is_default:
            await self.db.execute(update(GradingSystem).values(is_default=False))
        grading_system = GradingSystem(
            grading_system_id=await generate_sequential_id(self.db, GradingSystem.grading_system_id, GRADING_SYSTEM_PREFIX),
            name=data.name.strip(),
            grades=[band.model_dump(by_alias=True) for band in data.grades],
            is_default=data.is_default,
        )
        self.db.add(grading_system)
        await self._commit("Grading system with this name already exists")
        return grading_system

    async def list_grading_systems(self) -> List[GradingSystem]:
        result = await self.db.execute(
            select(GradingSystem)
            .where(GradingSystem.status == RecordStatus.ACTIVE.value)
            .order_by(GradingSystem.grading_system_id)
        )
        return list(result.scalars().all())

    async def _get_grading_system(self, grading_system_id: Optional[str]) -> Optional[GradingSystem]:
        stmt = select(GradingSystem)
        if grading_system_id:
            stmt = stmt.where(GradingSystem.grading_system_id == grading_system_id)
        else:
            stmt = stmt.where(GradingSystem.is_default.is_(True))
        return (await self.db.execute(stmt.limit(1))).scalar_one_or_none()

    # Exams

    async def create_exam(self, data: ExamCreate) -> Exam:
        if data.grading_system_id and await self._get_grading_system(data.grading_system_id) is None:
            raise NotFoundError("Grading system not found", details={"grading_system_id": data.grading_system_id})
        exam = Exam(
            exam_id=await generate_sequential_id(self.db, Exam.exam_id, EXAM_PREFIX),
            **dump_values(data),
            status=ExamStatus.SCHEDULED.value
        )
        self.db.add(exam)
        await self._commit()
        logger.info(f"Created exam {exam.exam_id} ({exam.name}) in school {self.school_id}")
        return exam

    async def list_exams(self, academic_year: Optional[str] = None, status: Optional[str] = None) -> List[Exam]:
        stmt = select(Exam).where(Exam.is_active.is_(True))
        if academic_year:
            stmt = stmt.where(Exam.academic_year == academic_year)
        if status:
            stmt = stmt.where(Exam.status == status)
        result = await self.db.execute(stmt.order_by(Exam.start_date.desc(), Exam.exam_id.desc()))
        return list(result.scalars().all())

    async def get_exam(self, exam_id: str) -> Exam:
        result = await self.db.execute(select(Exam).where(Exam.exam_id == exam_id, Exam.is_active.is_(True)))
        exam = result.scalar_one_or_none()
        if exam is None:
            raise NotFoundError("Exam not found", details={"exam_id": exam_id})
        return exam

    # Scheduling

    async def _check_schedule_conflicts(self, data: ExamScheduleCreate) -> None:
        same_day = list((await self.db.execute(
            select(ExamSchedule).where(ExamSchedule.date == data.date)
        )).scalars().all())
        clashing = [s for s in same_day if overlaps(s.start_time, s.end_time, data.start_time, data.end_time)]

        if data.room_id:
            for other in clashing:
                if other.room_id == data.room_id:
                    raise ScheduleConflict(
                        "Room is already booked for another exam at this time",
                        conflicts=[{"type": "room", "scheduleId": other.schedule_id}]
                    )

        if not data.invigilators:
            return

        config = (await self.db.execute(
            select(TimetableConfig).where(TimetableConfig.is_active.is_(True)).limit(1)
        )).scalar_one_or_none()
        if config is not None:
            periods = [
                period["periodNumber"] for period in config.periods or []
                if overlaps(
                    time.fromisoformat(period["startTime"]), time.fromisoformat(period["endTime"]),
                    data.start_time, data.end_time
                )
            ]
            if periods:
                entry = (await self.db.execute(
                    select(TimetableEntry).where(
                        TimetableEntry.status == RecordStatus.ACTIVE.value,
                        TimetableEntry.teacher_id.in_(data.invigilators),
                        TimetableEntry.day_of_week == data.date.strftime("%A").lower(),
                        TimetableEntry.period_number.in_(periods),
                    ).limit(1)
                )).scalar_one_or_none()
                if entry is not None:
                    raise ScheduleConflict(
                        f"Invigilator has a regular class during this time (Period {entry.period_number})",
                        conflicts=[{"type": "timetable", "entryId": entry.entry_id, "teacherId": entry.teacher_id}]
                    )

        wanted = set(data.invigilators)
        for other in clashing:
            if wanted.intersection(other.invigilators or []):
                raise ScheduleConflict(
                    "Invigilator is assigned to another exam at this time",
                    conflicts=[{"type": "invigilator", "scheduleId": other.schedule_id}]
                )

    async def schedule_subject(self, exam_id: str, data: ExamScheduleCreate) -> ExamSchedule:
        await self.get_exam(exam_id)
        duration = minutes_between(data.start_time, data.end_time)
        if duration <= 0:
            raise InvalidArgument("End time must be after start time")
        if not await self._lookup(Class.class_id, [data.class_id]):
            raise NotFoundError("Class not found", details={"class_id": data.class_id})
        if not await self._lookup(Subject.subject_id, [data.subject_id]):
            raise NotFoundError("Subject not found", details={"subject_id": data.subject_id})

        await self._check_schedule_conflicts(data)

        schedule = ExamSchedule(
            schedule_id=await generate_sequential_id(self.db, ExamSchedule.schedule_id, EXAM_SCHEDULE_PREFIX),
            exam_id=exam_id,
            duration_minutes=duration,
            **dump_values(data)
        )
        self.db.add(schedule)
        await self._commit()
        logger.info(f"Scheduled {schedule.subject_id} for exam {exam_id} on {schedule.date}")
        return schedule

    async def get_schedule(self, exam_id: str, class_id: Optional[str] = None) -> List[ExamScheduleResponse]:
        await self.get_exam(exam_id)
        stmt = select(ExamSchedule).where(ExamSchedule.exam_id == exam_id)
        if class_id:
            stmt = stmt.where(ExamSchedule.class_id == class_id)
        schedules = list((await self.db.execute(
            stmt.order_by(ExamSchedule.date, ExamSchedule.start_time)
        )).scalars().all())

        teachers = await self._lookup(
            Teacher.teacher_id, [teacher_id for s in schedules for teacher_id in s.invigilators or []]
        )
        subjects = await self._lookup(Subject.subject_id, [s.subject_id for s in schedules])
        enriched = []
        for schedule in schedules:
            item = ExamScheduleResponse.model_validate(schedule)
            item.invigilator_names = [
                teachers[teacher_id].full_name for teacher_id in schedule.invigilators or [] if teacher_id in teachers
            ]
            item.subject_name = getattr(subjects.get(schedule.subject_id), "name", None)
            enriched.append(item)
        return enriched

    # Results

    async def submit_marks(self, exam_id: str, data: MarksSubmission) -> Dict[str, Any]:
        exam = await self.get_exam(exam_id)
        schedule = (await self.db.execute(
            select(ExamSchedule).where(
                ExamSchedule.schedule_id == data.schedule_id,
                ExamSchedule.exam_id == exam_id
            )
        )).scalar_one_or_none()
        if schedule is None:
            raise NotFoundError("Exam schedule not found", details={"schedule_id": data.schedule_id})

        grading_system = await self._get_grading_system(exam.grading_system_id)
        grades = grading_system.grades if grading_system else None
        students = await self._lookup(Student.student_id, [entry.student_id for entry in data.marks])
        existing = {
            result.student_id: result
            for result in (await self.db.execute(
                select(ExamResult).where(
                    ExamResult.exam_id == exam_id,
                    ExamResult.subject_id == schedule.subject_id
                )
            )).scalars().all()
        }

        max_marks = schedule.max_marks
        processed = 0
        errors: List[str] = []
        for entry in data.marks:
            student = students.get(entry.student_id)
            if student is None or student.class_id != schedule.class_id:
                errors.append(f"Student {entry.student_id} is not enrolled in class {schedule.class_id}.")
                continue
            if entry.theory > schedule.max_marks_theory or entry.practical > schedule.max_marks_practical:
                errors.append(f"Marks for student {entry.student_id} exceed the maximum.")
                continue

            total = entry.theory + entry.practical
            percentage = round(total / max_marks * 100, 2) if max_marks > 0 else 0.0
            grade, points = calculate_grade(percentage, grades)

            result = existing.get(entry.student_id)
            if result is None:
                result = ExamResult(exam_id=exam_id, student_id=entry.student_id, subject_id=schedule.subject_id)
                self.db.add(result)
                existing[entry.student_id] = result
            result.schedule_id = schedule.schedule_id
            result.class_id = schedule.class_id
            result.section_id = student.section
            result.marks_theory = entry.theory
            result.marks_practical = entry.practical
            result.total_marks = total
            result.max_marks = max_marks
            result.percentage = percentage
            result.grade = grade
            result.grade_points = points
            result.attendance_status = entry.attendance_status.value
            result.remarks = entry.remarks
            result.evaluated_by = self.context.claims.account_id
            result.evaluated_at = utcnow()
            result.is_published = False
            processed += 1

        await self._commit()
        logger.info(f"Processed {processed} results for exam {exam_id} schedule {schedule.schedule_id}")
        return {"processed": processed, "errors": errors}

    async def subject_results(self, exam_id: str, subject_id: str, class_id: Optional[str] = None) -> List[ExamResultResponse]:
        stmt = select(ExamResult).where(ExamResult.exam_id == exam_id, ExamResult.subject_id == subject_id)
        if class_id:
            stmt = stmt.where(ExamResult.class_id == class_id)
        results = list((await self.db.execute(stmt.order_by(ExamResult.student_id))).scalars().all())
        students = await self._lookup(Student.student_id, [r.student_id for r in results])

        enriched = []
        for result in results:
            item = ExamResultResponse.model_validate(result)
            student = students.get(result.student_id)
            item.student_name = student.full_name if student else None
            item.roll_number = getattr(student, "roll_number", None)
            enriched.append(item)
        return enriched

    async def publish_results(self, exam_id: str, class_id: Optional[str] = None) -> int:
        exam = await self.get_exam(exam_id)
        stmt = select(ExamResult).where(ExamResult.exam_id == exam_id, ExamResult.is_published.is_(False))
        if class_id:
            stmt = stmt.where(ExamResult.class_id == class_id)
        results = list((await self.db.execute(stmt)).scalars().all())
        for result in results:
            result.is_published = True

        if not class_id:
            exam.status = ExamStatus.PUBLISHED.value
            exam.result_publish_date = utcnow()
        await self._commit()
        logger.info(f"Published {len(results)} results of exam {exam_id}")

        await self._notify_published(exam, {result.student_id for result in results})
        return len(results)

    async def _notify_published(self, exam: Exam, student_ids) -> None:
        if not student_ids:
            return
        try:
            students = await self._lookup(Student.student_id, student_ids)
            recipients = [(student_id, UserRoleEnum.STUDENT.value) for student_id in sorted(student_ids)]
            recipients += [
                (student.parent_id, UserRoleEnum.PARENT.value)
                for student in students.values() if student.parent_id
            ]
            await NotificationService(self.context).try_notify_many(
                recipients,
                notification_type=NotificationType.RESULT_PUBLISHED.value,
                title=f"Results published: {exam.name}",
                message=f"Results of {exam.name} are now available.",
                reference_id=exam.exam_id,
                reference_type="exam"
            )
        except Exception as e:
            logger.error(f"Error notifying about results of exam {exam.exam_id}: {str(e)}")

    async def report_card(self, student_id: str, academic_year: Optional[str] = None) -> Dict[str, Any]:
        student = await self._get_visible_student(student_id)

        stmt = select(Exam).where(Exam.is_active.is_(True), Exam.status == ExamStatus.PUBLISHED.value)
        if academic_year:
            stmt = stmt.where(Exam.academic_year == academic_year)
        exams = list((await self.db.execute(stmt.order_by(Exam.start_date, Exam.exam_id))).scalars().all())

        results = []
        if exams:
            results = list((await self.db.execute(
                select(ExamResult).where(
                    ExamResult.student_id == student_id,
                    ExamResult.is_published.is_(True),
                    ExamResult.exam_id.in_([exam.exam_id for exam in exams])
                ).order_by(ExamResult.subject_id)
            )).scalars().all())
        subjects = await self._lookup(Subject.subject_id, [r.subject_id for r in results])

        return {
            "student": {
                "student_id": student.student_id,
                "name": student.full_name,
                "roll_number": student.roll_number,
                "class_id": student.class_id,
                "section": student.section,
            },
            "academic_year": academic_year,
            "exams": [
                {
                    "exam_id": exam.exam_id,
                    "name": exam.name,
                    "term": exam.term,
                    "exam_type": exam.exam_type,
                    "results": [
                        {
                            "subject_id": r.subject_id,
                            "subject_name": getattr(subjects.get(r.subject_id), "name", None),
                            "marks_obtained": r.total_marks,
                            "max_marks": r.max_marks,
                            "percentage": r.percentage,
                            "grade": r.grade,
                            "points": r.grade_points,
                            "remarks": r.remarks,
                        }
                        for r in results if r.exam_id == exam.exam_id
                    ],
                }
                for exam in exams
            ],
        }

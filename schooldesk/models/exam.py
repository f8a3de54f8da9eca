from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, Integer, String, Time, UniqueConstraint

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import ExamAttendance, ExamStatus, RecordStatus


class GradingSystem(TimestampMixin, TenantBase):
    """Grade bands as ``{"name", "minPercentage", "points"}`` mappings"""
    __tablename__ = "grading_systems"

    id = Column(Integer, primary_key=True)
    grading_system_id = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=False, unique=True)
    grades = Column(JSON, nullable=False, default=list)
    is_default = Column(Boolean, nullable=False, default=False)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)


class Exam(TimestampMixin, TenantBase):
    __tablename__ = "exams"

    id = Column(Integer, primary_key=True)
    exam_id = Column(String(20), nullable=False, unique=True)
    name = Column(String(150), nullable=False)
    academic_year = Column(String(20), nullable=False)
    term = Column(String(50), nullable=True)
    exam_type = Column(String(50), nullable=True)
    grading_system_id = Column(String(20), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    result_publish_date = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=False, default=ExamStatus.SCHEDULED.value)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Exam(exam_id='{self.exam_id}', name='{self.name}')>"


class ExamSchedule(TimestampMixin, TenantBase):
    """One paper of an exam: a subject sat by a class at a date and time"""
    __tablename__ = "exam_schedules"

    id = Column(Integer, primary_key=True)
    schedule_id = Column(String(20), nullable=False, unique=True)
    exam_id = Column(String(20), nullable=False)
    class_id = Column(String(20), nullable=False)
    subject_id = Column(String(20), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    room_id = Column(String(50), nullable=True)
    invigilators = Column(JSON, nullable=False, default=list)  # teacher ids
    max_marks_theory = Column(Float, nullable=False, default=100)
    max_marks_practical = Column(Float, nullable=False, default=0)

    @property
    def max_marks(self) -> float:
        return (self.max_marks_theory or 0) + (self.max_marks_practical or 0)


class ExamResult(TimestampMixin, TenantBase):
    __tablename__ = "exam_results"
    __table_args__ = (
        UniqueConstraint("exam_id", "student_id", "subject_id", name="uq_exam_result_student_subject"),
    )

    id = Column(Integer, primary_key=True)
    exam_id = Column(String(20), nullable=False)
    schedule_id = Column(String(20), nullable=False)
    student_id = Column(String(20), nullable=False)
    subject_id = Column(String(20), nullable=False)
    class_id = Column(String(20), nullable=False)
    section_id = Column(String(20), nullable=True)
    marks_theory = Column(Float, nullable=False, default=0)
    marks_practical = Column(Float, nullable=False, default=0)
    total_marks = Column(Float, nullable=False, default=0)
    max_marks = Column(Float, nullable=False, default=0)
    percentage = Column(Float, nullable=False, default=0)
    grade = Column(String(10), nullable=True)
    grade_points = Column(Float, nullable=True)
    attendance_status = Column(String(10), nullable=False, default=ExamAttendance.PRESENT.value)
    remarks = Column(String(255), nullable=True)
    evaluated_by = Column(String(20), nullable=True)
    evaluated_at = Column(DateTime(timezone=True), nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)

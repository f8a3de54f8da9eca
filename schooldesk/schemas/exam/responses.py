# schooldesk/schemas/exam/responses.py
from datetime import date, datetime, time
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class GradeBandResponse(CamelModel):
    name: str
    min_percentage: float
    points: float = 0


class GradingSystemResponse(CamelModel):
    grading_system_id: str
    name: str
    grades: List[GradeBandResponse] = []
    is_default: bool = False
    status: Optional[str] = None


class ExamResponse(CamelModel):
    exam_id: str
    name: str
    academic_year: str
    term: Optional[str] = None
    exam_type: Optional[str] = None
    grading_system_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    result_publish_date: Optional[datetime] = None
    status: str
    created_at: Optional[datetime] = None


class ExamScheduleResponse(CamelModel):
    schedule_id: str
    exam_id: str
    class_id: str
    subject_id: str
    date: date
    start_time: time
    end_time: time
    duration_minutes: int
    room_id: Optional[str] = None
    invigilators: List[str] = []
    max_marks_theory: float
    max_marks_practical: float

    invigilator_names: List[str] = []
    subject_name: Optional[str] = None


class MarksSubmissionResult(CamelModel):
    processed: int
    errors: List[str] = []


class ExamResultResponse(CamelModel):
    exam_id: str
    schedule_id: str
    student_id: str
    subject_id: str
    class_id: str
    section_id: Optional[str] = None
    marks_theory: float
    marks_practical: float
    total_marks: float
    max_marks: float
    percentage: float
    grade: Optional[str] = None
    grade_points: Optional[float] = None
    attendance_status: str
    remarks: Optional[str] = None
    is_published: bool

    student_name: Optional[str] = None
    roll_number: Optional[str] = None


class ReportCardLine(CamelModel):
    subject_id: str
    subject_name: Optional[str] = None
    marks_obtained: float
    max_marks: float
    percentage: float
    grade: Optional[str] = None
    points: Optional[float] = None
    remarks: Optional[str] = None


class ReportCardExam(CamelModel):
    exam_id: str
    name: str
    term: Optional[str] = None
    exam_type: Optional[str] = None
    results: List[ReportCardLine] = []


class ReportCardStudent(CamelModel):
    student_id: str
    name: str
    roll_number: Optional[str] = None
    class_id: Optional[str] = None
    section: Optional[str] = None


class ReportCard(CamelModel):
    student: ReportCardStudent
    academic_year: Optional[str] = None
    exams: List[ReportCardExam] = []

# schooldesk/schemas/exam/requests.py
from datetime import date, time
from typing import List, Optional

from pydantic import Field, model_validator

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import ExamAttendance


class GradeBand(CamelModel):
    name: str = Field(..., min_length=1, max_length=10)
    min_percentage: float = Field(..., ge=0, le=100)
    points: float = Field(0, ge=0)


class GradingSystemCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    grades: List[GradeBand] = Field(..., min_length=1)
    is_default: bool = False


class ExamCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=150)
    academic_year: str = Field(..., min_length=4, max_length=20)
    term: Optional[str] = Field(None, max_length=50)
    exam_type: Optional[str] = Field(None, max_length=50)
    grading_system_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must not be before start date")
        return self


class ExamScheduleCreate(CamelModel):
    class_id: str
    subject_id: str
    date: date
    start_time: time
    end_time: time
    room_id: Optional[str] = None
    invigilators: List[str] = Field(default_factory=list)
    max_marks_theory: float = Field(100, ge=0)
    max_marks_practical: float = Field(0, ge=0)


class MarkEntry(CamelModel):
    student_id: str
    theory: float = Field(0, ge=0)
    practical: float = Field(0, ge=0)
    attendance_status: ExamAttendance = ExamAttendance.PRESENT
    remarks: Optional[str] = Field(None, max_length=255)


class MarksSubmission(CamelModel):
    schedule_id: str
    marks: List[MarkEntry] = Field(..., min_length=1)


class PublishResultsRequest(CamelModel):
    # None publishes the whole exam
    class_id: Optional[str] = None

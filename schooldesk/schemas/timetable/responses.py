# schooldesk/schemas/timetable/responses.py
from datetime import datetime, time
from typing import Dict, List, Optional

from schooldesk.schemas.base import CamelModel


class PeriodResponse(CamelModel):
    period_number: int
    name: str
    start_time: time
    end_time: time
    type: str = "regular"


class TimetableConfigResponse(CamelModel):
    config_id: str
    academic_year: str
    working_days: List[str] = []
    periods: List[PeriodResponse] = []
    is_active: bool
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TimetableEntryResponse(CamelModel):
    entry_id: str
    class_id: str
    section_id: str
    subject_id: str
    teacher_id: str
    day_of_week: str
    period_number: int
    room_id: Optional[str] = None
    period_type: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    # Display names filled in by timetable views
    class_name: Optional[str] = None
    section_name: Optional[str] = None
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None


class TimetableView(CamelModel):
    config: Optional[TimetableConfigResponse] = None
    entries: List[TimetableEntryResponse] = []


class BulkEntryFailure(CamelModel):
    index: int
    reason: str
    conflicts: List[Dict] = []


class BulkEntryResult(CamelModel):
    created: List[TimetableEntryResponse] = []
    failed: List[BulkEntryFailure] = []


class ScheduleConflictResponse(CamelModel):
    type: str
    description: str
    entries: List[str]
    day_of_week: str
    period_number: int


class ConflictReport(CamelModel):
    total_conflicts: int
    conflicts: List[ScheduleConflictResponse] = []


class FreePeriod(CamelModel):
    period_number: int
    name: str
    start_time: time
    end_time: time


class TeacherFreePeriods(CamelModel):
    teacher_id: str
    free_periods: Dict[str, List[FreePeriod]]


class FreeTeacher(CamelModel):
    teacher_id: str
    name: str
    email: Optional[str] = None

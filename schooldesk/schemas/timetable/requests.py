# schooldesk/schemas/timetable/requests.py
from datetime import time
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import DayOfWeek, PeriodType

DEFAULT_WORKING_DAYS = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
]


class PeriodDefinition(CamelModel):
    period_number: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, max_length=50)
    start_time: time
    end_time: time
    type: PeriodType = PeriodType.REGULAR

    @model_validator(mode="after")
    def check_times(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


def _unique_period_numbers(periods: Optional[List[PeriodDefinition]]) -> Optional[List[PeriodDefinition]]:
    if periods:
        numbers = [period.period_number for period in periods]
        if len(numbers) != len(set(numbers)):
            raise ValueError("Period numbers must be unique")
    return periods


class TimetableConfigCreate(CamelModel):
    academic_year: str = Field(..., min_length=4, max_length=20)
    working_days: List[DayOfWeek] = Field(default_factory=lambda: list(DEFAULT_WORKING_DAYS))
    periods: List[PeriodDefinition] = Field(default_factory=list)

    @field_validator("periods")
    @classmethod
    def unique_periods(cls, v):
        return _unique_period_numbers(v)


class TimetableConfigUpdate(CamelModel):
    working_days: Optional[List[DayOfWeek]] = None
    periods: Optional[List[PeriodDefinition]] = None

    @field_validator("periods")
    @classmethod
    def unique_periods(cls, v):
        return _unique_period_numbers(v)


class TimetableEntryCreate(CamelModel):
    class_id: str
    section_id: str
    subject_id: str
    teacher_id: str
    day_of_week: DayOfWeek
    period_number: int = Field(..., ge=1)
    room_id: Optional[str] = None
    period_type: PeriodType = PeriodType.REGULAR
    notes: Optional[str] = Field(None, max_length=255)


class TimetableEntryUpdate(CamelModel):
    class_id: Optional[str] = None
    section_id: Optional[str] = None
    subject_id: Optional[str] = None
    teacher_id: Optional[str] = None
    day_of_week: Optional[DayOfWeek] = None
    period_number: Optional[int] = Field(None, ge=1)
    room_id: Optional[str] = None
    period_type: Optional[PeriodType] = None
    notes: Optional[str] = Field(None, max_length=255)


class BulkTimetableEntries(CamelModel):
    entries: List[TimetableEntryCreate] = Field(..., min_length=1)

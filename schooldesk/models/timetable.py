from sqlalchemy import JSON, Boolean, Column, Integer, String

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import PeriodType, RecordStatus


class TimetableConfig(TimestampMixin, TenantBase):
    """
    Period structure of a school year. ``periods`` holds
    ``{"periodNumber", "name", "startTime", "endTime", "type"}`` mappings with
    ``HH:MM`` times; at most one config is active at a time.
    """
    __tablename__ = "timetable_configs"

    id = Column(Integer, primary_key=True)
    config_id = Column(String(20), nullable=False, unique=True)
    academic_year = Column(String(20), nullable=False, unique=True)
    working_days = Column(JSON, nullable=False, default=list)
    periods = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    def regular_periods(self):
        return [
            period for period in self.periods or []
            if period.get("type", PeriodType.REGULAR.value) == PeriodType.REGULAR.value
        ]

    def __repr__(self):
        return f"<TimetableConfig(config_id='{self.config_id}', academic_year='{self.academic_year}')>"


class TimetableEntry(TimestampMixin, TenantBase):
    """One weekly slot: a class section takes a subject with a teacher"""
    __tablename__ = "timetable_entries"

    id = Column(Integer, primary_key=True)
    entry_id = Column(String(20), nullable=False, unique=True)
    class_id = Column(String(20), nullable=False)
    section_id = Column(String(20), nullable=False)
    subject_id = Column(String(20), nullable=False)
    teacher_id = Column(String(20), nullable=False)
    day_of_week = Column(String(10), nullable=False)
    period_number = Column(Integer, nullable=False)
    room_id = Column(String(50), nullable=True)
    period_type = Column(String(20), nullable=False, default=PeriodType.REGULAR.value)
    notes = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    @property
    def slot(self):
        return self.day_of_week, self.period_number

    def __repr__(self):
        return f"<TimetableEntry(entry_id='{self.entry_id}', slot={self.day_of_week}/{self.period_number})>"

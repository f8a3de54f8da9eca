from .requests import (
    BulkTimetableEntries,
    PeriodDefinition,
    TimetableConfigCreate,
    TimetableConfigUpdate,
    TimetableEntryCreate,
    TimetableEntryUpdate,
)
from .responses import (
    BulkEntryFailure,
    BulkEntryResult,
    ConflictReport,
    FreePeriod,
    FreeTeacher,
    PeriodResponse,
    ScheduleConflictResponse,
    TeacherFreePeriods,
    TimetableConfigResponse,
    TimetableEntryResponse,
    TimetableView,
)

__all__ = [
    "BulkTimetableEntries",
    "PeriodDefinition",
    "TimetableConfigCreate",
    "TimetableConfigUpdate",
    "TimetableEntryCreate",
    "TimetableEntryUpdate",
    "BulkEntryFailure",
    "BulkEntryResult",
    "ConflictReport",
    "FreePeriod",
    "FreeTeacher",
    "PeriodResponse",
    "ScheduleConflictResponse",
    "TeacherFreePeriods",
    "TimetableConfigResponse",
    "TimetableEntryResponse",
    "TimetableView",
]

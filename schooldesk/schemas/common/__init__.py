from .status import (
    AnnouncementAudience,
    AnnouncementPriority,
    AnnouncementStatus,
    DayOfWeek,
    ExamAttendance,
    ExamStatus,
    HomeworkStatus,
    MenuType,
    NotificationType,
    PeriodType,
    RecordStatus,
    StudentStatus,
)

__all__ = [
    "AnnouncementAudience",
    "AnnouncementPriority",
    "AnnouncementStatus",
    "DayOfWeek",
    "ExamAttendance",
    "ExamStatus",
    "HomeworkStatus",
    "MenuType",
    "NotificationType",
    "PeriodType",
    "RecordStatus",
    "StudentStatus",
]

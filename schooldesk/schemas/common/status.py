from enum import Enum


class RecordStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class StudentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"


class MenuType(str, Enum):
    MAIN = "main"
    SUB = "sub"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class PeriodType(str, Enum):
    REGULAR = "regular"
    BREAK = "break"
    LUNCH = "lunch"
    ASSEMBLY = "assembly"


class HomeworkStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExamStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    PUBLISHED = "published"


class ExamAttendance(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class AnnouncementAudience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    PARENTS = "parents"
    TEACHERS = "teachers"
    SPECIFIC_CLASS = "specific_class"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AnnouncementStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class NotificationType(str, Enum):
    HOMEWORK_ASSIGNED = "homework_assigned"
    ANNOUNCEMENT = "announcement"
    RESULT_PUBLISHED = "result_published"

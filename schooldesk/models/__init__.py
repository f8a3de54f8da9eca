from .base import Base, TenantBase, TENANT_SCHEMA
from .school import School
from .email_registry import EmailRegistryEntry
from .admin import Admin
from .user import User
from .menu import Menu
from .teacher import Teacher
from .student import Student
from .parent import Parent
from .class_ import Class
from .subject import Subject
from .timetable import TimetableConfig, TimetableEntry
from .homework import Homework
from .exam import Exam, ExamResult, ExamSchedule, GradingSystem
from .announcement import Announcement
from .notification import Notification

__all__ = [
    "Base",
    "TenantBase",
    "TENANT_SCHEMA",
    "School",
    "EmailRegistryEntry",
    "Admin",
    "User",
    "Menu",
    "Teacher",
    "Student",
    "Parent",
    "Class",
    "Subject",
    "TimetableConfig",
    "TimetableEntry",
    "Homework",
    "GradingSystem",
    "Exam",
    "ExamSchedule",
    "ExamResult",
    "Announcement",
    "Notification",
]

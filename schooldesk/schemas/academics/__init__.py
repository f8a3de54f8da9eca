from .requests import (
    ClassCreate,
    ClassTeacherAssignment,
    ClassUpdate,
    SectionCreate,
    SubjectCreate,
    SubjectUpdate,
)
from .responses import ClassResponse, SectionResponse, SubjectResponse

__all__ = [
    "ClassCreate",
    "ClassTeacherAssignment",
    "ClassUpdate",
    "SectionCreate",
    "SubjectCreate",
    "SubjectUpdate",
    "ClassResponse",
    "SectionResponse",
    "SubjectResponse",
]

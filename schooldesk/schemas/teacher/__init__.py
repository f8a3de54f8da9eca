from .requests import TeacherCreate, TeacherUpdate
from .responses import TeacherResponse

__all__ = ["TeacherCreate", "TeacherUpdate", "TeacherResponse"]

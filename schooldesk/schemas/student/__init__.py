from .requests import StudentCreate, StudentUpdate
from .responses import StudentResponse

__all__ = ["StudentCreate", "StudentUpdate", "StudentResponse"]

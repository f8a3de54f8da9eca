from .requests import HomeworkCreate, HomeworkUpdate
from .responses import HomeworkResponse

__all__ = ["HomeworkCreate", "HomeworkUpdate", "HomeworkResponse"]

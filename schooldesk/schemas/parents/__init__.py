from .requests import ParentCreate, ParentRelationship, ParentUpdate
from .responses import ParentResponse

__all__ = ["ParentCreate", "ParentRelationship", "ParentUpdate", "ParentResponse"]

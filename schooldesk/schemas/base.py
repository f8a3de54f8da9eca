from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every wire model: snake_case in Python, camelCase in JSON"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class APIResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    data: Optional[T] = None


class ListResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = "Success"
    count: int
    data: List[T]


class PaginatedResponse(ListResponse[T], Generic[T]):
    total: int
    page: int
    limit: int
    pages: int

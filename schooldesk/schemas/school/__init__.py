from .requests import SchoolAdminCreate, SchoolAdminUpdate, SchoolCreate, SchoolStatusUpdate
from .responses import DashboardStats, SchoolAdminResponse, SchoolResponse

__all__ = [
    "SchoolAdminCreate",
    "SchoolAdminUpdate",
    "SchoolCreate",
    "SchoolStatusUpdate",
    "DashboardStats",
    "SchoolAdminResponse",
    "SchoolResponse",
]

from .requests import AnnouncementCreate, AnnouncementUpdate
from .responses import AnnouncementResponse

__all__ = ["AnnouncementCreate", "AnnouncementUpdate", "AnnouncementResponse"]

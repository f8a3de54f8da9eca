from sqlalchemy import JSON, Column, Date, Integer, String, Text

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import AnnouncementAudience, AnnouncementPriority, AnnouncementStatus


class Announcement(TimestampMixin, TenantBase):
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True)
    announcement_id = Column(String(20), nullable=False, unique=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    category = Column(String(50), nullable=False, default="general")
    priority = Column(String(20), nullable=False, default=AnnouncementPriority.NORMAL.value)
    target_audience = Column(String(20), nullable=False, default=AnnouncementAudience.ALL.value)
    target_classes = Column(JSON, nullable=False, default=list)  # class ids
    attachment_url = Column(String(500), nullable=True)
    publish_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=True)
    created_by = Column(String(20), nullable=False)
    created_by_role = Column(String(20), nullable=False)
    created_by_name = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default=AnnouncementStatus.ACTIVE.value)

    def __repr__(self):
        return f"<Announcement(announcement_id='{self.announcement_id}', audience='{self.target_audience}')>"

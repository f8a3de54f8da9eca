from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String

from .base import TenantBase, TimestampMixin


class Notification(TimestampMixin, TenantBase):
    """In-app notification addressed to one account of the school"""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    notification_id = Column(String(20), nullable=False, unique=True)
    user_id = Column(String(20), nullable=False)
    user_role = Column(String(20), nullable=False)
    type = Column(String(30), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(String(500), nullable=False)
    reference_id = Column(String(20), nullable=True)
    reference_type = Column(String(30), nullable=True)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", JSON, nullable=False, default=dict)
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Notification(notification_id='{self.notification_id}', user_id='{self.user_id}')>"

from sqlalchemy import Column, Date, Integer, String, Text

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import HomeworkStatus


class Homework(TimestampMixin, TenantBase):
    __tablename__ = "homework"

    id = Column(Integer, primary_key=True)
    homework_id = Column(String(20), nullable=False, unique=True)
    class_id = Column(String(20), nullable=False)
    section_id = Column(String(20), nullable=True)  # None: every section of the class
    subject_id = Column(String(20), nullable=False)
    teacher_id = Column(String(20), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    attachment_url = Column(String(500), nullable=True)
    assigned_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=HomeworkStatus.ACTIVE.value)

    def __repr__(self):
        return f"<Homework(homework_id='{self.homework_id}', class='{self.class_id}')>"

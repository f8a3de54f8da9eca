from sqlalchemy import Column, Integer, String

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import RecordStatus


class Subject(TimestampMixin, TenantBase):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True)
    subject_id = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(20), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    def __repr__(self):
        return f"<Subject(subject_id='{self.subject_id}', code='{self.code}')>"

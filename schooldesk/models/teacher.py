from sqlalchemy import JSON, Column, Integer, String

from .base import AccountMixin, TenantBase


class Teacher(AccountMixin, TenantBase):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True)
    teacher_id = Column(String(20), nullable=False, unique=True)
    phone = Column(String(20), nullable=True)
    department = Column(String(100), nullable=True)
    subjects = Column(JSON, nullable=False, default=list)  # subject ids
    classes = Column(JSON, nullable=False, default=list)   # class ids

    def __repr__(self):
        return f"<Teacher(teacher_id='{self.teacher_id}', email='{self.email}')>"

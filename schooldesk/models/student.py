from sqlalchemy import Column, Date, Integer, String

from .base import AccountMixin, TenantBase


class Student(AccountMixin, TenantBase):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True)
    student_id = Column(String(20), nullable=False, unique=True)
    class_id = Column("class", String(20), nullable=True)
    section = Column(String(20), nullable=True)
    roll_number = Column(String(20), nullable=True)
    parent_id = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    address = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Student(student_id='{self.student_id}', class='{self.class_id}')>"

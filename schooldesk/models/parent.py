from sqlalchemy import JSON, Column, Integer, String

from .base import AccountMixin, TenantBase


class Parent(AccountMixin, TenantBase):
    __tablename__ = "parents"

    id = Column(Integer, primary_key=True)
    parent_id = Column(String(20), nullable=False, unique=True)
    phone = Column(String(20), nullable=True)
    student_ids = Column(JSON, nullable=False, default=list)
    relationship = Column(String(20), nullable=True)  # father, mother, guardian
    occupation = Column(String(100), nullable=True)
    address = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Parent(parent_id='{self.parent_id}', email='{self.email}')>"

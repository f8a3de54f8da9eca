from sqlalchemy import Column, Integer, String

from .base import Base, TimestampMixin
from schooldesk.schemas.common.status import RecordStatus


class EmailRegistryEntry(TimestampMixin, Base):
    """Global index from a normalized email to the role and school owning it"""
    __tablename__ = "email_registry"

    id = Column(Integer, primary_key=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(String(20), nullable=False)
    school_id = Column(String(20), nullable=True, index=True)  # null for super admins
    account_id = Column(String(20), nullable=False)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    def __repr__(self):
        return f"<EmailRegistryEntry(email='{self.email}', role='{self.role}')>"

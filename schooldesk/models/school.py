from sqlalchemy import Column, Integer, String

from .base import Base, TimestampMixin
from schooldesk.schemas.common.status import RecordStatus


class School(TimestampMixin, Base):
    """
    Tenant directory entry. Maps a public school id to the name of the
    logical database holding that school's roster.
    Schools are never deleted, only deactivated.
    """
    __tablename__ = "schools"

    id = Column(Integer, primary_key=True)
    school_id = Column(String(20), nullable=False, unique=True, index=True)
    database_name = Column(String(63), nullable=False, unique=True)
    school_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE.value

    def __repr__(self):
        return f"<School(school_id='{self.school_id}', database_name='{self.database_name}')>"

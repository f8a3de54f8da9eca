from sqlalchemy import JSON, Column, Integer, String

from .base import TenantBase, TimestampMixin
from schooldesk.schemas.common.status import RecordStatus


class Class(TimestampMixin, TenantBase):
    """
    A class (grade) of a school. Sections are stored inline as a list of
    ``{"sectionId", "name", "classTeacherId"}`` mappings.
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True)
    class_id = Column(String(20), nullable=False, unique=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(255), nullable=True)
    sections = Column(JSON, nullable=False, default=list)
    # Highest section number ever issued; removed sections keep their number
    last_section_number = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    def find_section(self, section: str):
        """Match a section by id or by name"""
        for entry in self.sections or []:
            if section in (entry.get("sectionId"), entry.get("name")):
                return entry
        return None

    def __repr__(self):
        return f"<Class(class_id='{self.class_id}', name='{self.name}')>"

from sqlalchemy import JSON, Column, Integer, String

from .base import Base, TimestampMixin
from schooldesk.schemas.common.status import MenuType, RecordStatus


class Menu(TimestampMixin, Base):
    """Navigation entry shown to the roles listed in ``menu_access_roles``"""
    __tablename__ = "menus"

    id = Column(Integer, primary_key=True)
    menu_id = Column(String(20), nullable=False, unique=True, index=True)
    menu_name = Column(String(100), nullable=False)
    menu_url = Column(String(255), nullable=True)
    menu_icon = Column(String(100), nullable=True)
    menu_type = Column(String(10), nullable=False, default=MenuType.MAIN.value)
    parent_menu_id = Column(String(20), nullable=True, index=True)
    menu_order = Column(JSON, nullable=False, default=list)         # e.g. ["SA3", "A2"]
    menu_access_roles = Column(JSON, nullable=False, default=list)
    school_id = Column(String(20), nullable=True, index=True)
    status = Column(String(20), nullable=False, default=RecordStatus.ACTIVE.value)

    def __repr__(self):
        return f"<Menu(menu_id='{self.menu_id}', menu_name='{self.menu_name}')>"

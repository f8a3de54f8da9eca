# schooldesk/schemas/menu/responses.py
from datetime import datetime
from typing import List, Optional

from schooldesk.schemas.base import CamelModel


class MenuResponse(CamelModel):
    menu_id: str
    menu_name: str
    menu_url: Optional[str] = None
    menu_icon: Optional[str] = None
    menu_type: str
    parent_menu_id: Optional[str] = None
    menu_order: List[str] = []
    menu_access_roles: List[str] = []
    school_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

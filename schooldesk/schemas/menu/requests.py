# schooldesk/schemas/menu/requests.py
from typing import List, Optional

from pydantic import Field, model_validator

from schooldesk.schemas.base import CamelModel
from schooldesk.schemas.common.status import MenuType, RecordStatus
from schooldesk.schemas.user.role import UserRoleEnum


class MenuCreate(CamelModel):
    menu_name: str = Field(..., min_length=1, max_length=100)
    menu_url: Optional[str] = Field(None, max_length=255)
    menu_icon: Optional[str] = Field(None, max_length=100)
    menu_type: MenuType = MenuType.MAIN
    parent_menu_id: Optional[str] = None
    menu_access_roles: List[UserRoleEnum] = Field(..., min_length=1)
    school_id: Optional[str] = None

    @model_validator(mode="after")
    def check_parent(self):
        if self.menu_type == MenuType.SUB and not self.parent_menu_id:
            raise ValueError("parentMenuId is required for sub menus")
        return self


class MenuUpdate(CamelModel):
    menu_name: Optional[str] = Field(None, min_length=1, max_length=100)
    menu_url: Optional[str] = Field(None, max_length=255)
    menu_icon: Optional[str] = Field(None, max_length=100)
    menu_access_roles: Optional[List[UserRoleEnum]] = Field(None, min_length=1)
    status: Optional[RecordStatus] = None

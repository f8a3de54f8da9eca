# menu_service.py
import logging
import re
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import or_, select

from schooldesk.core.errors import DuplicateResource, NotFoundError
from schooldesk.models.menu import Menu
from schooldesk.schemas.common.status import MenuType, RecordStatus
from schooldesk.schemas.menu import MenuCreate, MenuUpdate
from schooldesk.schemas.user.role import DEFAULT_MENU_ORDER_PREFIX, MENU_ORDER_PREFIXES, UserRoleEnum
from schooldesk.services.base_service import BaseService, dump_values
from schooldesk.utils.identifiers import MENU_PREFIX, generate_sequential_id

logger = logging.getLogger("schooldesk.services.menu")


def menu_order_prefix(role) -> str:
    name = str(getattr(role, "value", role)).lower()
    if name == "school_admin":
        name = UserRoleEnum.SCHOOL_ADMIN.value
    return MENU_ORDER_PREFIXES.get(name, DEFAULT_MENU_ORDER_PREFIX)


def derive_order_codes(
    roles: Iterable[str],
    existing_orders: Iterable[Sequence[str]],
    parent_orders: Optional[Sequence[str]] = None
) -> List[str]:
    """
    Order codes of a new menu, one per role prefix.

    Root menus get ``<prefix><max + 1>`` over ``existing_orders`` (the root
    menus of the same school). Sub menus get ``<parentCode>.<max + 1>`` over
    ``existing_orders`` (their siblings), where ``parentCode`` is the parent's
    code for the same prefix; roles the parent has no code for are skipped.
    """
    existing = [code for orders in existing_orders for code in (orders or [])]
    codes: List[str] = []

    for role in roles:
        prefix = menu_order_prefix(role)

        if parent_orders is None:
            pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
            numbers = [int(m.group(1)) for m in map(pattern.match, existing) if m]
            codes.append(f"{prefix}{max(numbers, default=0) + 1}")
            continue

        # "S" must not pick up a super admin's "SA" code
        own_code = re.compile(rf"^{re.escape(prefix)}\d")
        parent_code = next((code for code in parent_orders if own_code.match(str(code))), None)
        if parent_code is None:
            logger.warning(f"Parent menu has no order code for prefix {prefix}; skipping role {role}")
            continue

        pattern = re.compile(rf"^{re.escape(parent_code)}\.(\d+)$")
        numbers = [int(m.group(1)) for m in map(pattern.match, existing) if m]
        codes.append(f"{parent_code}.{max(numbers, default=0) + 1}")

    return list(dict.fromkeys(codes))


def order_sort_key(menu: Menu, role: str):
    """Sort menus by their order code for ``role``: ``A2`` < ``A2.1`` < ``A10``"""
    prefix = menu_order_prefix(role)
    own_code = re.compile(rf"^{re.escape(prefix)}(\d+(?:\.\d+)*)$")
    for code in menu.menu_order or []:
        match = own_code.match(str(code))
        if match:
            return tuple(int(part) for part in match.group(1).split("."))
    return (float("inf"),)


class MenuService(BaseService):
    """Navigation menus and their hierarchical order codes"""

    async def get_menu(self, menu_id: str) -> Menu:
        result = await self.db.execute(select(Menu).where(Menu.menu_id == menu_id))
        menu = result.scalar_one_or_none()
        if menu is None:
            raise NotFoundError("Menu not found", details={"menu_id": menu_id})
        return menu

    async def _ensure_unique_name(
        self,
        name: str,
        school_id: Optional[str],
        parent_menu_id: Optional[str],
        exclude_menu_id: Optional[str] = None
    ) -> None:
        stmt = select(Menu.id).where(
            Menu.menu_name == name,
            Menu.school_id.is_(None) if school_id is None else Menu.school_id == school_id,
            Menu.parent_menu_id.is_(None) if parent_menu_id is None else Menu.parent_menu_id == parent_menu_id,
        )
        if exclude_menu_id:
            stmt = stmt.where(Menu.menu_id != exclude_menu_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            scope = "parent menu" if parent_menu_id else "school"
            raise DuplicateResource(f'Menu with name "{name}" already exists for this {scope}')

    async def _existing_orders(self, school_id: Optional[str], parent_menu_id: Optional[str]) -> List[List[str]]:
        if parent_menu_id:
            stmt = select(Menu.menu_order).where(Menu.parent_menu_id == parent_menu_id)
        else:
            stmt = select(Menu.menu_order).where(
                or_(Menu.parent_menu_id.is_(None), Menu.parent_menu_id == ""),
                Menu.school_id.is_(None) if school_id is None else Menu.school_id == school_id,
            )
        result = await self.db.execute(stmt)
        return [orders or [] for orders in result.scalars().all()]

    async def generate_order_codes(
        self,
        roles: Iterable[str],
        school_id: Optional[str],
        parent_menu_id: Optional[str]
    ) -> List[str]:
        parent_orders = None
        if parent_menu_id:
            parent = await self.get_menu(parent_menu_id)
            parent_orders = list(parent.menu_order or [])
        existing = await self._existing_orders(school_id, parent_menu_id)
        return derive_order_codes(roles, existing, parent_orders)

    async def create_menu(self, data: MenuCreate) -> Menu:
        values = dump_values(data)
        parent_menu_id = values["parent_menu_id"] if data.menu_type == MenuType.SUB else None
        await self._ensure_unique_name(data.menu_name, data.school_id, parent_menu_id)

        menu = Menu(
            menu_id=await generate_sequential_id(self.db, Menu.menu_id, MENU_PREFIX),
            menu_name=data.menu_name,
            menu_url=data.menu_url,
            menu_icon=data.menu_icon,
            menu_type=values["menu_type"],
            parent_menu_id=parent_menu_id,
            menu_access_roles=values["menu_access_roles"],
            menu_order=await self.generate_order_codes(values["menu_access_roles"], data.school_id, parent_menu_id),
            school_id=data.school_id,
            status=RecordStatus.ACTIVE.value
        )
        self.db.add(menu)
        await self._commit()
        logger.info(f"Created menu {menu.menu_id} with order codes {menu.menu_order}")
        return menu

    async def menus_for_role(self, role: UserRoleEnum, school_id: Optional[str] = None) -> List[Menu]:
        """Active menus visible to ``role``, platform-wide ones plus those of ``school_id``"""
        stmt = select(Menu).where(Menu.status == RecordStatus.ACTIVE.value)
        if school_id:
            stmt = stmt.where(or_(Menu.school_id.is_(None), Menu.school_id == school_id))
        else:
            stmt = stmt.where(Menu.school_id.is_(None))
        result = await self.db.execute(stmt)

        # JSON containment differs per dialect, so filter in Python
        role_value = UserRoleEnum(role).value
        menus = [menu for menu in result.scalars().all() if role_value in (menu.menu_access_roles or [])]
        return sorted(menus, key=lambda menu: order_sort_key(menu, role_value))

    async def update_menu(self, menu_id: str, data: MenuUpdate) -> Menu:
        menu = await self.get_menu(menu_id)
        values = dump_values(data, exclude_unset=True, exclude_none=True)

        if "menu_name" in values:
            await self._ensure_unique_name(
                values["menu_name"], menu.school_id, menu.parent_menu_id, exclude_menu_id=menu_id
            )

        new_roles = values.get("menu_access_roles")
        if new_roles is not None:
            menu.menu_order = await self._reconcile_order_codes(menu, new_roles)

        for field, value in values.items():
            setattr(menu, field, value)
        await self._commit()
        return menu

    async def _reconcile_order_codes(self, menu: Menu, roles: List[str]) -> List[str]:
        """Keep codes of roles that remain, derive codes for newly added roles"""
        kept, added = [], []
        for role in roles:
            prefix = menu_order_prefix(role)
            own_code = re.compile(rf"^{re.escape(prefix)}\d")
            code = next((c for c in menu.menu_order or [] if own_code.match(str(c))), None)
            if code is None:
                added.append(role)
            else:
                kept.append(code)

        if added:
            kept.extend(await self.generate_order_codes(added, menu.school_id, menu.parent_menu_id))
        return list(dict.fromkeys(kept))

    async def delete_menu(self, menu_id: str) -> Menu:
        menu = await self.get_menu(menu_id)
        menu.status = RecordStatus.INACTIVE.value
        await self._commit()
        logger.info(f"Deactivated menu {menu_id}")
        return menu

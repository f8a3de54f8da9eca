# schooldesk/schemas/user/role.py
from enum import Enum
from typing import Dict


class UserRoleEnum(str, Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "sch_admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"

    @property
    def is_tenant_scoped(self) -> bool:
        """Accounts stored inside a school's own database"""
        return self in TENANT_ROLES


TENANT_ROLES = frozenset({UserRoleEnum.TEACHER, UserRoleEnum.STUDENT, UserRoleEnum.PARENT})

# Prefix of hierarchical menu order codes per role
MENU_ORDER_PREFIXES: Dict[str, str] = {
    UserRoleEnum.SUPER_ADMIN.value: "SA",
    UserRoleEnum.SCHOOL_ADMIN.value: "A",
    UserRoleEnum.TEACHER.value: "T",
    UserRoleEnum.PARENT.value: "P",
    UserRoleEnum.STUDENT.value: "S",
}
DEFAULT_MENU_ORDER_PREFIX = "M"

from .role import TENANT_ROLES, UserRoleEnum

__all__ = ["TENANT_ROLES", "UserRoleEnum"]

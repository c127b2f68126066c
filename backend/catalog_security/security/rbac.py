"""Role-Based Access Control (RBAC) over an ordered set of roles."""

from enum import Enum
from functools import wraps
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Union

from fastapi import HTTPException

from catalog_security.config import settings


class Role(str, Enum):
    """Catalog roles, from least to most privileged."""

    VIEWER = "viewer"    # Read-only access to the catalog
    EDITOR = "editor"    # Can edit procedures and documents
    MANAGER = "manager"  # Can approve and publish
    ADMIN = "admin"      # Full control


# Role hierarchy (higher level = more permissions). Level 0 is reserved
# for unknown roles and never grants anything.
ROLE_LEVELS: Mapping[str, int] = MappingProxyType({
    Role.VIEWER.value: 1,
    Role.EDITOR.value: 2,
    Role.MANAGER.value: 3,
    Role.ADMIN.value: 4,
})

UNKNOWN_LEVEL = 0

RoleLike = Union[Role, str]


def role_level(role: Optional[RoleLike], levels: Mapping[str, int] = ROLE_LEVELS) -> int:
    """
    Map a role to its level.

    Args:
        role: Role enum member or role name
        levels: Role table

    Returns:
        The role's level, or 0 for unknown roles
    """
    if isinstance(role, Role):
        role = role.value
    if not isinstance(role, str):
        return UNKNOWN_LEVEL
    return levels.get(role, UNKNOWN_LEVEL)


def has_permission(
    actual: Optional[RoleLike],
    required: Optional[RoleLike],
    levels: Mapping[str, int] = ROLE_LEVELS,
) -> bool:
    """
    Check whether a role is at least as privileged as the required role.

    Unknown roles on either side deny access.

    Args:
        actual: Role of the acting principal
        required: Minimum role for the action
        levels: Role table

    Returns:
        True if access is granted
    """
    actual_level = role_level(actual, levels)
    required_level = role_level(required, levels)

    if actual_level <= UNKNOWN_LEVEL or required_level <= UNKNOWN_LEVEL:
        return False

    return actual_level >= required_level


class PermissionChecker:
    """
    Permission checks against an explicit role table.

    Use this when the deployment defines roles beyond the built-in four;
    the table is copied and frozen at construction.
    """

    def __init__(self, levels: Optional[Mapping[str, int]] = None):
        if levels is None:
            levels = settings.role_levels or ROLE_LEVELS

        invalid = [name for name, level in levels.items() if level <= UNKNOWN_LEVEL]
        if invalid:
            raise ValueError(f"Role levels must be positive: {sorted(invalid)}")

        self.levels: Mapping[str, int] = MappingProxyType(dict(levels))

    def level(self, role: Optional[RoleLike]) -> int:
        return role_level(role, self.levels)

    def has_permission(self, actual: Optional[RoleLike], required: Optional[RoleLike]) -> bool:
        return has_permission(actual, required, self.levels)


def require_role(minimum_role: RoleLike, checker: Optional[PermissionChecker] = None):
    """
    Decorator to require a minimum role level.

    Usage:
        @router.post("/procedures/{procedure_id}/publish")
        @require_role(Role.MANAGER)
        async def publish(procedure_id: str, user = Depends(get_current_user)):
            pass
    """
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any):
            user = kwargs.get("user") or kwargs.get("current_user")

            if not user:
                raise HTTPException(
                    status_code=401,
                    detail="Authentication required"
                )

            user_role = user.get("role") if isinstance(user, dict) else getattr(user, "role", None)
            allowed = (
                checker.has_permission(user_role, minimum_role)
                if checker is not None
                else has_permission(user_role, minimum_role)
            )

            if not allowed:
                required = minimum_role.value if isinstance(minimum_role, Role) else minimum_role
                raise HTTPException(
                    status_code=403,
                    detail=f"Role '{required}' or higher required"
                )

            return await func(*args, **kwargs)
        return wrapper
    return decorator

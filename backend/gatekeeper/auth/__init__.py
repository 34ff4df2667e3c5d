"""
RBAC core: the permission registry and the access decision functions.

Decision functions take the principal's permissions as plain arguments; the
registry is static configuration built once at import.
"""
from .decisions import (
    can_perform_action,
    has_all_permissions,
    has_any_permission,
    has_permission,
    resolve_permissions,
    role_at_least,
)
from .registry import (
    DEFAULT_REGISTRY,
    ROLE_HIERARCHY,
    Action,
    PermissionRegistry,
    Resource,
    Role,
    get_all_permissions,
    get_role_permissions,
    validate_permission,
)

__all__ = [
    "Action",
    "DEFAULT_REGISTRY",
    "PermissionRegistry",
    "ROLE_HIERARCHY",
    "Resource",
    "Role",
    "can_perform_action",
    "get_all_permissions",
    "get_role_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "resolve_permissions",
    "role_at_least",
    "validate_permission",
]

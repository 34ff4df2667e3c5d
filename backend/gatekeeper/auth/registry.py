"""
Permission Registry - the closed RBAC vocabulary and role grants.

This module is the single source of truth for:
- Resources and actions that canonical permissions are built from
- Every permission the application knows about, grouped by resource group
- The role hierarchy and the permissions each role is granted

Role grants are derived, not hand-maintained: every role receives the grants of
the role below it plus an explicit delta, and super_admin receives every
registered permission. The whole contract is validated when the registry is
built, and the default registry is built at import time (fail-fast).

SECURITY:
- No wildcard permissions
- No permission may be granted unless it is registered in a group
- A role map referencing an unknown permission is a build error, not a runtime deny
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum, unique
from types import MappingProxyType
from typing import Final

from ..errors import InvalidArgumentError

Permission = str


# ============================================================================
# RESOURCES AND ACTIONS
# ============================================================================

class Resource(str, Enum):
    """Nouns that canonical permissions are applied to."""
    USER = "user"
    RESUME = "resume"
    TENANT = "tenant"
    GROUP = "group"
    ROLE = "role"
    SLOT = "slot"
    EMAIL = "email"
    FILE = "file"
    ANALYTICS = "analytics"
    SETTINGS = "settings"
    BILLING = "billing"
    AUDIT = "audit"


class Action(str, Enum):
    """Verbs that canonical permissions grant."""
    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    UPDATE = "update"
    CREATE = "create"
    MANAGE = "manage"
    EXPORT = "export"
    IMPORT = "import"
    APPROVE = "approve"
    REJECT = "reject"


def canonical_permission(resource: Resource | str, action: Action | str) -> Permission:
    """Build the canonical "<resource>:<action>" permission string."""
    resource_value = resource.value if isinstance(resource, Resource) else resource
    action_value = action.value if isinstance(action, Action) else action
    return f"{resource_value}:{action_value}"


# ============================================================================
# ROLES - TOTALLY ORDERED, LEAST TO MOST PRIVILEGED
# ============================================================================

class Role(str, Enum):
    GUEST = "guest"
    USER = "user"
    GROUP_ADMIN = "group_admin"
    TENANT_ADMIN = "tenant_admin"
    SUPER_ADMIN = "super_admin"


ROLE_HIERARCHY: Final[tuple[Role, ...]] = (
    Role.GUEST,
    Role.USER,
    Role.GROUP_ADMIN,
    Role.TENANT_ADMIN,
    Role.SUPER_ADMIN,
)


def role_rank(role: Role | str) -> int:
    """Position of ``role`` in the hierarchy, or -1 for an unknown role."""
    try:
        return ROLE_HIERARCHY.index(Role(role))
    except ValueError:
        return -1


# ============================================================================
# PERMISSION GROUPS
# ============================================================================

@unique
class UserPermission(str, Enum):
    # User management
    USER_READ = canonical_permission(Resource.USER, Action.READ)
    USER_CREATE = canonical_permission(Resource.USER, Action.CREATE)
    USER_UPDATE = canonical_permission(Resource.USER, Action.UPDATE)
    USER_DELETE = canonical_permission(Resource.USER, Action.DELETE)
    USER_MANAGE = canonical_permission(Resource.USER, Action.MANAGE)

    # Profile
    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"
    PROFILE_DELETE = "profile:delete"

    # Authentication
    AUTH_LOGIN = "auth:login"
    AUTH_LOGOUT = "auth:logout"
    AUTH_REGISTER = "auth:register"
    AUTH_RESET_PASSWORD = "auth:reset_password"
    AUTH_CHANGE_PASSWORD = "auth:change_password"

    # Settings
    SETTINGS_READ = canonical_permission(Resource.SETTINGS, Action.READ)
    SETTINGS_UPDATE = canonical_permission(Resource.SETTINGS, Action.UPDATE)


@unique
class ResumePermission(str, Enum):
    RESUME_READ = canonical_permission(Resource.RESUME, Action.READ)
    RESUME_CREATE = canonical_permission(Resource.RESUME, Action.CREATE)
    RESUME_UPDATE = canonical_permission(Resource.RESUME, Action.UPDATE)
    RESUME_DELETE = canonical_permission(Resource.RESUME, Action.DELETE)
    RESUME_MANAGE = canonical_permission(Resource.RESUME, Action.MANAGE)

    RESUME_UPLOAD = "resume:upload"
    RESUME_DOWNLOAD = "resume:download"
    RESUME_EXPORT = canonical_permission(Resource.RESUME, Action.EXPORT)
    RESUME_IMPORT = canonical_permission(Resource.RESUME, Action.IMPORT)
    RESUME_ANALYZE = "resume:analyze"
    RESUME_TEMPLATE_CREATE = "resume:template_create"
    RESUME_TEMPLATE_USE = "resume:template_use"

    # Sharing
    RESUME_SHARE = "resume:share"
    RESUME_PUBLIC_VIEW = "resume:public_view"
    RESUME_PRIVATE_VIEW = "resume:private_view"


@unique
class TenantPermission(str, Enum):
    TENANT_READ = canonical_permission(Resource.TENANT, Action.READ)
    TENANT_CREATE = canonical_permission(Resource.TENANT, Action.CREATE)
    TENANT_UPDATE = canonical_permission(Resource.TENANT, Action.UPDATE)
    TENANT_DELETE = canonical_permission(Resource.TENANT, Action.DELETE)
    TENANT_MANAGE = canonical_permission(Resource.TENANT, Action.MANAGE)

    # Membership
    TENANT_JOIN = "tenant:join"
    TENANT_LEAVE = "tenant:leave"
    TENANT_INVITE = "tenant:invite"
    TENANT_APPROVE = canonical_permission(Resource.TENANT, Action.APPROVE)
    TENANT_REJECT = canonical_permission(Resource.TENANT, Action.REJECT)

    # Settings and billing
    TENANT_SETTINGS_READ = "tenant:settings_read"
    TENANT_SETTINGS_UPDATE = "tenant:settings_update"
    TENANT_BILLING_READ = "tenant:billing_read"
    TENANT_BILLING_UPDATE = "tenant:billing_update"


@unique
class GroupPermission(str, Enum):
    GROUP_READ = canonical_permission(Resource.GROUP, Action.READ)
    GROUP_CREATE = canonical_permission(Resource.GROUP, Action.CREATE)
    GROUP_UPDATE = canonical_permission(Resource.GROUP, Action.UPDATE)
    GROUP_DELETE = canonical_permission(Resource.GROUP, Action.DELETE)
    GROUP_MANAGE = canonical_permission(Resource.GROUP, Action.MANAGE)

    GROUP_JOIN = "group:join"
    GROUP_LEAVE = "group:leave"
    GROUP_INVITE = "group:invite"
    GROUP_APPROVE = canonical_permission(Resource.GROUP, Action.APPROVE)
    GROUP_REJECT = canonical_permission(Resource.GROUP, Action.REJECT)


@unique
class RolePermission(str, Enum):
    ROLE_READ = canonical_permission(Resource.ROLE, Action.READ)
    ROLE_CREATE = canonical_permission(Resource.ROLE, Action.CREATE)
    ROLE_UPDATE = canonical_permission(Resource.ROLE, Action.UPDATE)
    ROLE_DELETE = canonical_permission(Resource.ROLE, Action.DELETE)
    ROLE_MANAGE = canonical_permission(Resource.ROLE, Action.MANAGE)

    # Assignment
    ROLE_ASSIGN = "role:assign"
    ROLE_UNASSIGN = "role:unassign"
    ROLE_PERMISSION_GRANT = "role:permission_grant"
    ROLE_PERMISSION_REVOKE = "role:permission_revoke"


@unique
class SlotPermission(str, Enum):
    SLOT_READ = canonical_permission(Resource.SLOT, Action.READ)
    SLOT_CREATE = canonical_permission(Resource.SLOT, Action.CREATE)
    SLOT_UPDATE = canonical_permission(Resource.SLOT, Action.UPDATE)
    SLOT_DELETE = canonical_permission(Resource.SLOT, Action.DELETE)
    SLOT_MANAGE = canonical_permission(Resource.SLOT, Action.MANAGE)

    # Booking
    SLOT_BOOK = "slot:book"
    SLOT_CANCEL = "slot:cancel"
    SLOT_RESCHEDULE = "slot:reschedule"
    SLOT_APPROVE = canonical_permission(Resource.SLOT, Action.APPROVE)
    SLOT_REJECT = canonical_permission(Resource.SLOT, Action.REJECT)


@unique
class SystemPermission(str, Enum):
    # Analytics
    ANALYTICS_READ = canonical_permission(Resource.ANALYTICS, Action.READ)
    ANALYTICS_EXPORT = canonical_permission(Resource.ANALYTICS, Action.EXPORT)

    # Files
    FILE_READ = canonical_permission(Resource.FILE, Action.READ)
    FILE_UPLOAD = "file:upload"
    FILE_DOWNLOAD = "file:download"
    FILE_DELETE = canonical_permission(Resource.FILE, Action.DELETE)

    # Email
    EMAIL_READ = canonical_permission(Resource.EMAIL, Action.READ)
    EMAIL_SEND = "email:send"
    EMAIL_TEMPLATE_MANAGE = "email:template_manage"

    # Audit logs
    AUDIT_READ = canonical_permission(Resource.AUDIT, Action.READ)
    AUDIT_EXPORT = canonical_permission(Resource.AUDIT, Action.EXPORT)

    # Billing
    BILLING_READ = canonical_permission(Resource.BILLING, Action.READ)
    BILLING_UPDATE = canonical_permission(Resource.BILLING, Action.UPDATE)
    BILLING_MANAGE = canonical_permission(Resource.BILLING, Action.MANAGE)


def _values(*members: Iterable[Enum]) -> tuple[Permission, ...]:
    return tuple(member.value for group in members for member in group)


PERMISSION_GROUPS: Final[Mapping[str, tuple[Permission, ...]]] = MappingProxyType({
    "USER": _values(UserPermission),
    "RESUME": _values(ResumePermission),
    "TENANT": _values(TenantPermission),
    "GROUP": _values(GroupPermission),
    "ROLE": _values(RolePermission),
    "SLOT": _values(SlotPermission),
    "SYSTEM": _values(SystemPermission),
})


# ============================================================================
# ROLE GRANTS - DELTA OVER THE ROLE BELOW
# ============================================================================

ROLE_GRANTS: Final[Mapping[Role, frozenset[Permission]]] = MappingProxyType({
    Role.GUEST: frozenset(_values((
        UserPermission.AUTH_LOGIN,
        UserPermission.AUTH_REGISTER,
        UserPermission.AUTH_RESET_PASSWORD,
        ResumePermission.RESUME_PUBLIC_VIEW,
        TenantPermission.TENANT_READ,
    ))),
    Role.USER: frozenset(_values((
        UserPermission.PROFILE_READ,
        UserPermission.PROFILE_UPDATE,
        UserPermission.AUTH_LOGOUT,
        UserPermission.AUTH_CHANGE_PASSWORD,
        UserPermission.SETTINGS_READ,
        UserPermission.SETTINGS_UPDATE,
        ResumePermission.RESUME_READ,
        ResumePermission.RESUME_CREATE,
        ResumePermission.RESUME_UPDATE,
        ResumePermission.RESUME_DELETE,
        ResumePermission.RESUME_UPLOAD,
        ResumePermission.RESUME_DOWNLOAD,
        ResumePermission.RESUME_EXPORT,
        ResumePermission.RESUME_ANALYZE,
        ResumePermission.RESUME_TEMPLATE_USE,
        TenantPermission.TENANT_JOIN,
        GroupPermission.GROUP_READ,
        GroupPermission.GROUP_JOIN,
        SlotPermission.SLOT_READ,
        SlotPermission.SLOT_BOOK,
        SlotPermission.SLOT_CANCEL,
        SlotPermission.SLOT_RESCHEDULE,
        SystemPermission.FILE_UPLOAD,
        SystemPermission.FILE_DOWNLOAD,
    ))),
    Role.GROUP_ADMIN: frozenset(_values((
        UserPermission.USER_READ,
        UserPermission.USER_CREATE,
        UserPermission.USER_UPDATE,
        GroupPermission.GROUP_UPDATE,
        GroupPermission.GROUP_MANAGE,
        GroupPermission.GROUP_INVITE,
        GroupPermission.GROUP_APPROVE,
        GroupPermission.GROUP_REJECT,
        SlotPermission.SLOT_CREATE,
        SlotPermission.SLOT_UPDATE,
        SlotPermission.SLOT_DELETE,
        SlotPermission.SLOT_MANAGE,
        SlotPermission.SLOT_APPROVE,
        SlotPermission.SLOT_REJECT,
        SystemPermission.ANALYTICS_READ,
    ))),
    Role.TENANT_ADMIN: frozenset(
        _values(
            (UserPermission.USER_DELETE,),
            ResumePermission,
            (
                TenantPermission.TENANT_UPDATE,
                TenantPermission.TENANT_MANAGE,
                TenantPermission.TENANT_INVITE,
                TenantPermission.TENANT_APPROVE,
                TenantPermission.TENANT_REJECT,
                TenantPermission.TENANT_SETTINGS_READ,
                TenantPermission.TENANT_SETTINGS_UPDATE,
                TenantPermission.TENANT_BILLING_READ,
                TenantPermission.TENANT_BILLING_UPDATE,
            ),
            GroupPermission,
            RolePermission,
            SlotPermission,
            (
                SystemPermission.ANALYTICS_EXPORT,
                SystemPermission.AUDIT_READ,
                SystemPermission.AUDIT_EXPORT,
            ),
        )
    ),
    # Everything registered, including system-level permissions
    Role.SUPER_ADMIN: frozenset(
        permission for group in PERMISSION_GROUPS.values() for permission in group
    ),
})


# ============================================================================
# CONTRACT VALIDATION
# ============================================================================

PERMISSION_FORMAT: Final[re.Pattern[str]] = re.compile(r"[a-z]+(?:_[a-z]+)*:[a-z]+(?:_[a-z]+)*")


def _is_wildcard(permission: str) -> bool:
    return "*" in permission


def _contract_errors(
    groups: Mapping[str, tuple[Permission, ...]],
    grants: Mapping[Role, frozenset[Permission]],
    hierarchy: tuple[Role, ...],
) -> list[str]:
    errors: list[str] = []
    seen: dict[Permission, str] = {}

    for group_name, permissions in groups.items():
        for permission in permissions:
            if _is_wildcard(permission):
                errors.append(
                    f"SECURITY VIOLATION: Wildcard permission '{permission}' in group {group_name}"
                )
            elif not PERMISSION_FORMAT.fullmatch(permission):
                errors.append(
                    f"Permission '{permission}' in group {group_name} is not '<resource>:<action>'"
                )
            if permission in seen:
                errors.append(
                    f"Permission '{permission}' registered in both {seen[permission]} and {group_name}"
                )
            else:
                seen[permission] = group_name

    for role in hierarchy:
        if role not in grants:
            errors.append(f"Role '{role.value}' has no grants defined")
            continue
        for permission in sorted(grants[role]):
            if permission not in seen:
                errors.append(f"Role '{role.value}' grants unregistered permission '{permission}'")

    for role in grants:
        if role not in hierarchy:
            errors.append(f"Role '{role.value}' is granted permissions but is not in the hierarchy")

    return errors


@dataclass(frozen=True)
class PermissionRegistry:
    """Validated, immutable permission vocabulary and role map.

    ``role_permissions`` holds the effective (cumulative) set of every role.
    Instances are built once and passed to decision code as plain arguments.
    """

    groups: Mapping[str, tuple[Permission, ...]]
    role_permissions: Mapping[Role, frozenset[Permission]]
    hierarchy: tuple[Role, ...]
    permissions: frozenset[Permission]

    @classmethod
    def build(
        cls,
        groups: Mapping[str, tuple[Permission, ...]] = PERMISSION_GROUPS,
        grants: Mapping[Role, frozenset[Permission]] = ROLE_GRANTS,
        hierarchy: tuple[Role, ...] = ROLE_HIERARCHY,
    ) -> "PermissionRegistry":
        """Validate the contract and derive each role's effective permissions.

        Raises:
            RuntimeError: listing every defect found in the configuration
        """
        errors = _contract_errors(groups, grants, hierarchy)
        if errors:
            raise RuntimeError(
                "RBAC registry validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )

        effective: dict[Role, frozenset[Permission]] = {}
        inherited: frozenset[Permission] = frozenset()
        for role in hierarchy:
            inherited = inherited | grants[role]
            effective[role] = inherited

        return cls(
            groups=MappingProxyType({name: tuple(perms) for name, perms in groups.items()}),
            role_permissions=MappingProxyType(effective),
            hierarchy=tuple(hierarchy),
            permissions=frozenset(p for perms in groups.values() for p in perms),
        )

    def is_registered(self, permission: str) -> bool:
        return permission in self.permissions

    def permissions_for(self, role: Role | str) -> frozenset[Permission]:
        try:
            return self.role_permissions.get(Role(role), frozenset())
        except ValueError:
            return frozenset()


DEFAULT_REGISTRY: Final[PermissionRegistry] = PermissionRegistry.build()


# ============================================================================
# LOOKUPS
# ============================================================================

def validate_permission(
    permission: str,
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> Permission:
    """
    Validate that a permission is explicitly registered.

    Used where permissions are declared (route dependencies, configuration),
    so that a typo fails at startup instead of silently denying at request time.

    Raises:
        ValueError: If permission contains wildcards or is not registered
    """
    if not isinstance(permission, str):
        raise InvalidArgumentError(f"Permission must be a string, got {type(permission).__name__}")
    if _is_wildcard(permission):
        raise ValueError(
            f"SECURITY VIOLATION: Wildcard permission '{permission}' is FORBIDDEN. "
            "All permissions must be explicit."
        )
    if not registry.is_registered(permission):
        raise ValueError(f"Invalid permission '{permission}'. Permission is not registered.")
    return permission


def is_registered_permission(
    permission: str,
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> bool:
    return isinstance(permission, str) and registry.is_registered(permission)


def get_role_permissions(
    role: Role | str,
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> list[Permission]:
    """
    Get every permission granted to a role.

    Unknown roles get an empty list: zero privileges, never an exception.

    Returns:
        list[str]: sorted permission strings; a fresh list on every call
    """
    if not isinstance(role, str):
        raise InvalidArgumentError(f"Role must be a string, got {type(role).__name__}")
    return sorted(registry.permissions_for(role))


def get_all_permissions(
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> dict[str, list[Permission]]:
    """All registered permissions grouped by resource group, in declaration order."""
    return {name: list(permissions) for name, permissions in registry.groups.items()}

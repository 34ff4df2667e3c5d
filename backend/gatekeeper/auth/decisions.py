"""Access decision functions over a principal's permission set.

All functions here are pure and total: unknown roles and unknown permission
strings simply are not held, so every decision degrades to ``False`` instead of
raising. The only exceptions are contract violations by the caller (a bare
string passed as a permission list, a non-string permission), which raise
``InvalidArgumentError``.

Membership is strict string equality. There is no wildcard, prefix or
hierarchy matching: ``"user:read"`` does not imply ``"user:manage"`` or vice
versa.
"""
from __future__ import annotations

from collections.abc import Iterable

from ..errors import InvalidArgumentError
from .registry import (
    DEFAULT_REGISTRY,
    Action,
    Permission,
    PermissionRegistry,
    Resource,
    Role,
    canonical_permission,
    role_rank,
)


def _held(principal_permissions: Iterable[str]) -> frozenset[str]:
    # A bare string is iterable, and substring membership would grant access
    if isinstance(principal_permissions, (str, bytes)) or not isinstance(
        principal_permissions, Iterable
    ):
        raise InvalidArgumentError(
            "principal_permissions must be a collection of permission strings, "
            f"got {type(principal_permissions).__name__}"
        )
    return frozenset(principal_permissions)


def _requested(permissions: Iterable[str]) -> tuple[str, ...]:
    if isinstance(permissions, (str, bytes)) or not isinstance(permissions, Iterable):
        raise InvalidArgumentError(
            f"permissions must be a collection of permission strings, got {type(permissions).__name__}"
        )
    requested = tuple(permissions)
    for permission in requested:
        _ensure_permission(permission)
    return requested


def _ensure_permission(permission: object) -> None:
    if not isinstance(permission, str):
        raise InvalidArgumentError(
            f"permission must be a string, got {type(permission).__name__}"
        )


def has_permission(principal_permissions: Iterable[str], permission: str) -> bool:
    """True iff ``permission`` is literally present in ``principal_permissions``."""
    _ensure_permission(permission)
    return permission in _held(principal_permissions)


def has_any_permission(
    principal_permissions: Iterable[str],
    permissions: Iterable[str],
) -> bool:
    """True iff at least one requested permission is held. Empty request -> False."""
    held = _held(principal_permissions)
    return any(permission in held for permission in _requested(permissions))


def has_all_permissions(
    principal_permissions: Iterable[str],
    permissions: Iterable[str],
) -> bool:
    """
    True iff every requested permission is held.

    An empty request is vacuously satisfied and returns True. Callers gating
    on a computed list must make sure the list cannot be empty by accident.
    """
    held = _held(principal_permissions)
    return all(permission in held for permission in _requested(permissions))


def can_perform_action(
    principal_permissions: Iterable[str],
    resource: Resource | str,
    action: Action | str,
) -> bool:
    """
    Check the canonical "<resource>:<action>" permission.

    This is a convenience subset of ``has_permission``: hand-named permissions
    such as ``auth:login`` or ``resume:upload`` do not follow the
    resource/action vocabulary and must be checked with ``has_permission``.
    """
    if not isinstance(resource, str) or not isinstance(action, str):
        raise InvalidArgumentError("resource and action must be strings")
    return has_permission(principal_permissions, canonical_permission(resource, action))


def resolve_permissions(
    role: Role | str | None = None,
    permissions: Iterable[str] = (),
    registry: PermissionRegistry = DEFAULT_REGISTRY,
) -> frozenset[Permission]:
    """Effective permissions of a principal: role grants plus direct grants."""
    direct = _held(permissions)
    if role is None:
        return direct
    if not isinstance(role, str):
        raise InvalidArgumentError(f"Role must be a string, got {type(role).__name__}")
    return registry.permissions_for(role) | direct


def role_at_least(role: Role | str | None, minimum: Role | str) -> bool:
    """True iff both roles are known and ``role`` ranks at or above ``minimum``."""
    if role is None:
        return False
    required = role_rank(minimum)
    return required >= 0 and role_rank(role) >= required

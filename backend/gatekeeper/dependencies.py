"""
Permission dependencies for FastAPI endpoints.

The principal is resolved by the authentication layer and placed on
``request.state.principal``; this module never authenticates anyone. A request
without a principal is an anonymous guest.

SECURITY: Required permissions are validated against the registry when the
dependency is declared, so a typo fails at import instead of silently
denying every request.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from fastapi import Depends, Request

from .auth import decisions
from .auth.registry import Action, Resource, Role, canonical_permission, validate_permission
from .config import get_settings
from .errors import AuthError, PermissionError
from .routing.redirects import RedirectPolicy
from .schemas.access import Principal

logger = logging.getLogger("gatekeeper.rbac")

PermissionCheck = Callable[[frozenset[str]], bool]


def get_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if isinstance(principal, Principal):
        return principal
    return Principal(is_authenticated=False, role=Role.GUEST.value)


def get_redirect_policy(request: Request) -> RedirectPolicy:
    """Redirect policy of the running app, falling back to the environment."""
    policy = getattr(request.app.state, "redirect_policy", None)
    if isinstance(policy, RedirectPolicy):
        return policy
    return RedirectPolicy.from_settings(get_settings())


def get_principal_permissions(
    principal: Principal = Depends(get_principal),
) -> frozenset[str]:
    return decisions.resolve_permissions(principal.role, principal.permissions)


def _log_deny(request: Request, principal: Principal, required: tuple[str, ...]) -> None:
    logger.warning(
        "Permission denied method=%s path=%s role=%s authenticated=%s required=%s",
        request.method,
        request.url.path,
        principal.role or "n/a",
        principal.is_authenticated,
        ",".join(required),
    )


def _enforce(
    required: tuple[str, ...],
    check: PermissionCheck,
) -> Callable[..., Awaitable[None]]:
    async def dependency(
        request: Request,
        principal: Principal = Depends(get_principal),
        permissions: frozenset[str] = Depends(get_principal_permissions),
    ) -> None:
        if check(permissions):
            return
        _log_deny(request, principal, required)
        if not principal.is_authenticated:
            raise AuthError()
        raise PermissionError(required_permissions=required)

    return dependency


def require_permission(permission: str) -> Callable[..., Awaitable[None]]:
    """Require one exact permission."""
    required = (validate_permission(permission),)
    return _enforce(required, lambda held: decisions.has_permission(held, permission))


def require_any_permission(permissions: Iterable[str]) -> Callable[..., Awaitable[None]]:
    """Require at least one of ``permissions``; an empty list is rejected."""
    required = tuple(validate_permission(permission) for permission in permissions)
    if not required:
        raise ValueError("require_any_permission needs at least one permission")
    return _enforce(required, lambda held: decisions.has_any_permission(held, required))


def require_all_permissions(permissions: Iterable[str]) -> Callable[..., Awaitable[None]]:
    """Require every one of ``permissions``.

    An empty list would be vacuously satisfied and guard nothing, so it is
    rejected at declaration time.
    """
    required = tuple(validate_permission(permission) for permission in permissions)
    if not required:
        raise ValueError("require_all_permissions needs at least one permission")
    return _enforce(required, lambda held: decisions.has_all_permissions(held, required))


def require_action(resource: Resource | str, action: Action | str) -> Callable[..., Awaitable[None]]:
    """Require the canonical "<resource>:<action>" permission."""
    return require_permission(canonical_permission(resource, action))

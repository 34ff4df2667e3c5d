"""Redirect resolution for the edge access check.

Decides, from the route classification and an authentication flag alone,
whether a request proceeds or is redirected. Role-level checks for admin
routes are not made here; they belong to the permission dependencies that
guard the admin endpoints themselves.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import InvalidArgumentError
from ..schemas.access import AccessResult
from .routes import DEFAULT_ROUTE_TABLE, RouteCategory, RouteTable

if TYPE_CHECKING:
    from ..config import Settings

ALLOW: AccessResult = AccessResult(allow=True)


@dataclass(frozen=True)
class RedirectPolicy:
    login_path: str = "/login"
    landing_path: str = "/dashboard"
    callback_param: str = "callbackUrl"

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RedirectPolicy":
        return cls(
            login_path=settings.login_path,
            landing_path=settings.authenticated_landing_path,
            callback_param=settings.callback_param,
        )


DEFAULT_POLICY = RedirectPolicy()


def resolve_access(
    pathname: str,
    is_authenticated: bool,
    policy: RedirectPolicy = DEFAULT_POLICY,
    routes: RouteTable = DEFAULT_ROUTE_TABLE,
) -> AccessResult:
    """
    Resolve the redirect, if any, for a request path.

    Precedence:
    1. Auth route while authenticated -> landing page
    2. Protected route while anonymous -> login, original path as callback
    3. Admin route while anonymous -> login
    4. Otherwise the request proceeds
    """
    if not isinstance(is_authenticated, bool):
        raise InvalidArgumentError("is_authenticated must be a bool")

    if routes.matches(RouteCategory.AUTH, pathname) and is_authenticated:
        return AccessResult(allow=False, redirect_to=policy.landing_path)

    if routes.matches(RouteCategory.PROTECTED, pathname) and not is_authenticated:
        return AccessResult(
            allow=False,
            redirect_to=policy.login_path,
            redirect_query={policy.callback_param: pathname},
        )

    if routes.matches(RouteCategory.ADMIN, pathname) and not is_authenticated:
        return AccessResult(allow=False, redirect_to=policy.login_path)

    return ALLOW

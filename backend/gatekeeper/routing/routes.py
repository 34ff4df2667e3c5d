"""
Route tables and path classification.

Each route category owns an ordered list of patterns. A pattern is either a
literal path (``/blog``) or a path ending in a single ``(.+)`` wildcard group
(``/blog/(.+)``). Patterns are compiled once and matched against the whole
pathname: ``/blog`` does not match ``/blog/(.+)`` and ``/bloggers`` matches
nothing.

Categories are independent predicates. A pathname may match no category (it
falls through to default handling); matching more than one category is a
configuration defect that ``RouteTable.find_overlaps`` reports.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import Enum
from itertools import combinations
from types import MappingProxyType
from typing import Final

from ..errors import InvalidArgumentError


class RouteCategory(str, Enum):
    PUBLIC = "public"
    AUTH = "auth"
    PROTECTED = "protected"
    ADMIN = "admin"
    WIDGET = "widget"
    API = "api"


# ============================================================================
# NAMED ROUTES
# ============================================================================

PUBLIC_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "HOME": "/",
    "LANDING": "/landing",
    "PRICING": "/pricing",
    "FEATURES": "/features",
    "ABOUT": "/about",
    "CONTACT": "/contact",
    "BLOG": "/blog",
    "LEGAL_PRIVACY": "/legal/privacy",
    "LEGAL_TERMS": "/legal/terms",
    "LEGAL_COOKIES": "/legal/cookies",
})

AUTH_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "LOGIN": "/login",
    "REGISTER": "/register",
    "FORGOT_PASSWORD": "/forgot-password",
    "RESET_PASSWORD": "/reset-password",
    "VERIFY_EMAIL": "/verify-email",
    # Landing page for provider callbacks; only /sso/<provider> is an auth route
    "SSO": "/sso",
})

DASHBOARD_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "OVERVIEW": "/overview",
    "INTERVIEWS": "/interviews",
    "INTERVIEWS_CREATE": "/interviews/create",
    "USERS": "/users",
    "USERS_ROLES": "/users/roles",
    "USERS_INVITE": "/users/invite",
    "ANALYTICS": "/analytics",
    "ANALYTICS_REPORTS": "/analytics/reports",
    "ANALYTICS_METRICS": "/analytics/metrics",
    "SETTINGS_PROFILE": "/settings/profile",
    "SETTINGS_TEAM": "/settings/team",
    "SETTINGS_INTEGRATIONS": "/settings/integrations",
    "SETTINGS_SECURITY": "/settings/security",
    "SETTINGS_PREFERENCES": "/settings/preferences",
    "SETTINGS_API_KEYS": "/settings/api-keys",
})

ADMIN_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "TENANTS": "/admin/tenants",
    "SYSTEM": "/admin/system",
    "MONITORING": "/admin/monitoring",
})

WIDGET_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "EMBED": "/embed",
    "PREVIEW": "/preview",
})

API_ROUTES: Final[Mapping[str, str]] = MappingProxyType({
    "AUTH_LOGIN": "/api/auth/signin",
    "AUTH_REGISTER": "/api/auth/signup",
    "AUTH_LOGOUT": "/api/auth/signout",
    "AUTH_SESSION": "/api/auth/session",
    "INTERVIEWS": "/api/interviews",
    "CANDIDATES": "/api/candidates",
    "USERS": "/api/users",
    "ANALYTICS": "/api/analytics",
    "UPLOAD": "/api/upload",
    "HEALTH": "/api/health",
    "TENANTS": "/api/tenants",
    "PERMISSIONS": "/api/permissions",
    "ROLES": "/api/roles",
    "ACCESS_EVALUATE": "/api/access/evaluate",
})


def interview_route(interview_id: str, section: str | None = None) -> str:
    base = f"{DASHBOARD_ROUTES['INTERVIEWS']}/{interview_id}"
    return f"{base}/{section}" if section else base


def user_route(user_id: str) -> str:
    return f"{DASHBOARD_ROUTES['USERS']}/{user_id}"


def tenant_embed_route(tenant_id: str) -> str:
    return f"{WIDGET_ROUTES['EMBED']}/{tenant_id}"


# ============================================================================
# ROUTE PATTERNS
# ============================================================================

WILDCARD: Final[str] = "(.+)"

ROUTE_PATTERNS: Final[Mapping[RouteCategory, tuple[str, ...]]] = MappingProxyType({
    RouteCategory.PUBLIC: (
        "/",
        "/landing",
        "/pricing",
        "/features",
        "/about",
        "/contact",
        "/blog",
        "/blog/(.+)",
        "/legal/(.+)",
    ),
    RouteCategory.AUTH: (
        "/login",
        "/register",
        "/forgot-password",
        "/reset-password",
        "/verify-email",
        "/sso/(.+)",
    ),
    RouteCategory.PROTECTED: (
        "/overview",
        "/interviews",
        "/interviews/(.+)",
        "/candidates",
        "/candidates/(.+)",
        "/users",
        "/users/(.+)",
        "/analytics",
        "/analytics/(.+)",
        "/settings",
        "/settings/(.+)",
    ),
    RouteCategory.ADMIN: ("/admin/(.+)",),
    RouteCategory.WIDGET: ("/embed", "/embed/(.+)", "/preview"),
    RouteCategory.API: ("/api/(.+)",),
})

DISJOINT_CATEGORY_PAIRS: Final[tuple[tuple[RouteCategory, RouteCategory], ...]] = tuple(
    combinations(RouteCategory, 2)
)


def _compile(pattern: str) -> re.Pattern[str]:
    if not pattern.startswith("/"):
        raise ValueError(f"Route pattern '{pattern}' must start with '/'")
    if pattern.count(WILDCARD) > 1:
        raise ValueError(f"Route pattern '{pattern}' has more than one wildcard")
    literal, wildcard, rest = pattern.partition(WILDCARD)
    if wildcard and rest:
        raise ValueError(f"Route pattern '{pattern}' must end with its wildcard")
    return re.compile(re.escape(literal) + (".+" if wildcard else ""))


def _sample_path(pattern: str) -> str:
    return pattern.replace(WILDCARD, "sample")


def _ensure_pathname(pathname: object) -> str:
    if not isinstance(pathname, str):
        raise InvalidArgumentError(
            f"pathname must be a string, got {type(pathname).__name__}"
        )
    return pathname


class RouteTable:
    """Precompiled, read-only pattern table keyed by route category."""

    def __init__(self, patterns: Mapping[RouteCategory, Iterable[str]] = ROUTE_PATTERNS) -> None:
        self.patterns: Mapping[RouteCategory, tuple[str, ...]] = MappingProxyType({
            RouteCategory(category): tuple(category_patterns)
            for category, category_patterns in patterns.items()
        })
        self._compiled: Mapping[RouteCategory, tuple[re.Pattern[str], ...]] = MappingProxyType({
            category: tuple(_compile(pattern) for pattern in category_patterns)
            for category, category_patterns in self.patterns.items()
        })

    def matches(self, category: RouteCategory, pathname: str) -> bool:
        pathname = _ensure_pathname(pathname)
        compiled = self._compiled.get(RouteCategory(category), ())
        return any(pattern.fullmatch(pathname) for pattern in compiled)

    def classify(self, pathname: str) -> frozenset[RouteCategory]:
        pathname = _ensure_pathname(pathname)
        return frozenset(
            category for category in self._compiled if self.matches(category, pathname)
        )

    def find_overlaps(
        self,
        pairs: Iterable[tuple[RouteCategory, RouteCategory]] = DISJOINT_CATEGORY_PAIRS,
    ) -> list[tuple[str, RouteCategory, RouteCategory]]:
        """
        Report patterns of one category that another category also matches.

        Wildcard patterns are checked through a sample expansion. Each entry is
        ``(pattern, owning_category, other_category)``.
        """
        overlaps: list[tuple[str, RouteCategory, RouteCategory]] = []
        for first, second in pairs:
            for owner, other in ((first, second), (second, first)):
                for pattern in self.patterns.get(owner, ()):
                    if self.matches(other, _sample_path(pattern)):
                        overlaps.append((pattern, owner, other))
        return overlaps


DEFAULT_ROUTE_TABLE: Final[RouteTable] = RouteTable()


def is_public_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.PUBLIC, pathname)


def is_auth_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.AUTH, pathname)


def is_protected_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.PROTECTED, pathname)


def is_admin_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.ADMIN, pathname)


def is_widget_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.WIDGET, pathname)


def is_api_route(pathname: str) -> bool:
    return DEFAULT_ROUTE_TABLE.matches(RouteCategory.API, pathname)

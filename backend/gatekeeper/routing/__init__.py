from .redirects import DEFAULT_POLICY, RedirectPolicy, resolve_access
from .routes import (
    DEFAULT_ROUTE_TABLE,
    DISJOINT_CATEGORY_PAIRS,
    ROUTE_PATTERNS,
    RouteCategory,
    RouteTable,
    is_admin_route,
    is_api_route,
    is_auth_route,
    is_protected_route,
    is_public_route,
    is_widget_route,
)

__all__ = [
    "DEFAULT_POLICY",
    "DEFAULT_ROUTE_TABLE",
    "DISJOINT_CATEGORY_PAIRS",
    "ROUTE_PATTERNS",
    "RedirectPolicy",
    "RouteCategory",
    "RouteTable",
    "is_admin_route",
    "is_api_route",
    "is_auth_route",
    "is_protected_route",
    "is_public_route",
    "is_widget_route",
    "resolve_access",
]

"""
Edge access gate.

Runs before routing and applies the default policy of each route category:
security headers on every response, embeddable CORS for widget routes,
credentialed CORS for API routes, and login/landing redirects from
``resolve_access``. Authentication here is only the presence of the auth
cookie; issuing and verifying it is the authentication layer's job.
"""
from __future__ import annotations

import logging
import uuid

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from .config import Settings
from .errors import InternalError, error_payload
from .routing.redirects import RedirectPolicy, resolve_access
from .routing.routes import DEFAULT_ROUTE_TABLE, RouteCategory, RouteTable

logger = logging.getLogger("gatekeeper.middleware")

SECURITY_HEADERS: dict[str, str] = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-XSS-Protection": "1; mode=block",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=(), payment=()",
}

WIDGET_CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

API_ALLOW_METHODS = "GET,DELETE,PATCH,POST,PUT,OPTIONS"
API_ALLOW_HEADERS = (
    "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
    "Content-MD5, Content-Type, Date, X-Api-Version, Authorization, X-Tenant-ID"
)


def tenant_slug_from_host(host: str | None, ignored: frozenset[str]) -> str | None:
    """First label of the host, unless it is a development or apex label.

    IP literals in brackets (IPv6) never carry a tenant.
    """
    if not host or host.startswith("["):
        return None
    subdomain = host.split(":", 1)[0].split(".", 1)[0].strip().lower()
    if not subdomain or subdomain in ignored:
        return None
    return subdomain


class AccessGateMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        settings: Settings,
        routes: RouteTable = DEFAULT_ROUTE_TABLE,
    ) -> None:
        super().__init__(app)
        self.routes = routes
        self.policy = RedirectPolicy.from_settings(settings)
        self.auth_cookie_name = settings.auth_cookie_name
        # O(1) origin lookup per request
        self.allowed_origins = frozenset(settings.allowed_origins)
        self.ignored_subdomains = frozenset(settings.ignored_tenant_subdomains)

    def _api_cors_headers(self, request: Request) -> dict[str, str]:
        headers = {
            "Access-Control-Allow-Methods": API_ALLOW_METHODS,
            "Access-Control-Allow-Headers": API_ALLOW_HEADERS,
        }
        origin = request.headers.get("origin")
        if origin and origin in self.allowed_origins:
            headers["Access-Control-Allow-Origin"] = origin
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def _tenant_headers(self, request: Request) -> dict[str, str]:
        headers: dict[str, str] = {}
        tenant_slug = tenant_slug_from_host(request.headers.get("host"), self.ignored_subdomains)
        request.state.tenant_slug = tenant_slug
        if tenant_slug:
            headers["X-Tenant-Slug"] = tenant_slug

        tenant_id = request.query_params.get("tenant")
        request.state.tenant_id = tenant_id
        if tenant_id:
            headers["X-Tenant-ID"] = tenant_id
        return headers

    async def _call_app(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        # Unhandled errors are answered here so the 500 still carries the gate headers
        try:
            return await call_next(request)
        except Exception:
            request_id = request.state.request_id
            logger.exception("Unhandled error path=%s request_id=%s", request.url.path, request_id)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_payload(InternalError.code, InternalError.message, request_id=request_id),
            )

    @staticmethod
    def _finish(response: Response, headers: dict[str, str]) -> Response:
        response.headers.update(headers)
        if headers.get("Access-Control-Allow-Origin", "*") != "*":
            response.headers.add_vary_header("Origin")
        return response

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        pathname = request.url.path
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        headers = {**SECURITY_HEADERS, "X-Request-ID": request_id}

        if self.routes.matches(RouteCategory.WIDGET, pathname):
            headers.update(WIDGET_CORS_HEADERS)
            headers["X-Frame-Options"] = "SAMEORIGIN"
            return self._finish(await self._call_app(request, call_next), headers)

        if self.routes.matches(RouteCategory.API, pathname):
            headers.update(self._api_cors_headers(request))
            if request.method == "OPTIONS":
                return self._finish(Response(status_code=status.HTTP_200_OK), headers)

        is_authenticated = bool(request.cookies.get(self.auth_cookie_name))
        result = resolve_access(pathname, is_authenticated, self.policy, self.routes)
        if not result.allow:
            location = result.location()
            logger.debug(
                "Redirecting path=%s authenticated=%s location=%s request_id=%s",
                pathname,
                is_authenticated,
                location,
                request_id,
            )
            response = RedirectResponse(location, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
            return self._finish(response, headers)

        headers.update(self._tenant_headers(request))
        return self._finish(await self._call_app(request, call_next), headers)

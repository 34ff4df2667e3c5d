from fastapi import APIRouter, Depends

from ..auth import decisions
from ..auth.registry import (
    ROLE_HIERARCHY,
    RolePermission,
    get_all_permissions,
    get_role_permissions,
)
from ..dependencies import get_redirect_policy, require_permission
from ..routing.redirects import RedirectPolicy, resolve_access
from ..routing.routes import DEFAULT_ROUTE_TABLE
from ..schemas.access import (
    AccessEvaluationRequest,
    AccessEvaluationResponse,
    PermissionCatalogResponse,
    RoleListResponse,
    RolePermissionsResponse,
)

router = APIRouter(prefix="/api")

require_role_read = require_permission(RolePermission.ROLE_READ.value)


@router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/permissions",
    response_model=PermissionCatalogResponse,
    dependencies=[Depends(require_role_read)],
    tags=["rbac"],
)
async def list_permissions() -> PermissionCatalogResponse:
    return PermissionCatalogResponse(groups=get_all_permissions())


@router.get(
    "/roles",
    response_model=RoleListResponse,
    dependencies=[Depends(require_role_read)],
    tags=["rbac"],
)
async def list_roles() -> RoleListResponse:
    return RoleListResponse(roles=[role.value for role in ROLE_HIERARCHY])


@router.get(
    "/roles/{role}/permissions",
    response_model=RolePermissionsResponse,
    dependencies=[Depends(require_role_read)],
    tags=["rbac"],
)
async def list_role_permissions(role: str) -> RolePermissionsResponse:
    return RolePermissionsResponse(role=role, permissions=get_role_permissions(role))


@router.post(
    "/access/evaluate",
    response_model=AccessEvaluationResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    tags=["rbac"],
)
async def evaluate_access(
    payload: AccessEvaluationRequest,
    policy: RedirectPolicy = Depends(get_redirect_policy),
) -> AccessEvaluationResponse:
    """Run the edge decision for a path and, optionally, a permission check."""
    result = resolve_access(payload.pathname, payload.is_authenticated, policy)

    permitted: bool | None = None
    if payload.required:
        held = decisions.resolve_permissions(payload.role, payload.permissions)
        check = decisions.has_all_permissions if payload.require_all else decisions.has_any_permission
        permitted = check(held, payload.required)

    return AccessEvaluationResponse(
        allow=result.allow,
        redirect_to=result.redirect_to,
        redirect_query=result.redirect_query,
        categories=sorted(category.value for category in DEFAULT_ROUTE_TABLE.classify(payload.pathname)),
        permitted=permitted,
    )

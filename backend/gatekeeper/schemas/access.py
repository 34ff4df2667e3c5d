from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field


class AccessResult(BaseModel):
    """Outcome of the edge access check for one request path."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    allow: bool
    redirect_to: str | None = Field(default=None, alias="redirectTo")
    redirect_query: dict[str, str] | None = Field(default=None, alias="redirectQuery")

    def location(self) -> str | None:
        if self.redirect_to is None:
            return None
        if not self.redirect_query:
            return self.redirect_to
        return f"{self.redirect_to}?{urlencode(self.redirect_query)}"


class Principal(BaseModel):
    """The actor behind a request, as resolved by the authentication layer."""

    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(default=False, alias="isAuthenticated")
    role: str | None = None
    permissions: list[str] = Field(default_factory=list)


class AccessEvaluationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    pathname: str = Field(..., min_length=1)
    is_authenticated: bool = Field(default=False, alias="isAuthenticated")
    role: str | None = None
    permissions: list[str] = Field(default_factory=list)
    required: list[str] = Field(default_factory=list)
    require_all: bool = Field(default=False, alias="requireAll")


class AccessEvaluationResponse(AccessResult):
    categories: list[str] = Field(default_factory=list)
    permitted: bool | None = None


class RolePermissionsResponse(BaseModel):
    role: str
    permissions: list[str]


class RoleListResponse(BaseModel):
    roles: list[str]


class PermissionCatalogResponse(BaseModel):
    groups: dict[str, list[str]]

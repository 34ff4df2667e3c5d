import json
import os
import threading
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean value")


def _parse_path(name: str, raw: str) -> str:
    value = raw.strip()
    if not value.startswith("/") or value.startswith("//"):
        raise ValueError(f"{name} must be an absolute path starting with '/'")
    return value


def _parse_origins(raw_allowed_origins: str) -> list[str]:
    # Support both CSV format and JSON array format
    if raw_allowed_origins.startswith("["):
        try:
            parsed_list = json.loads(raw_allowed_origins)
        except json.JSONDecodeError as exc:
            raise ValueError(f"ALLOWED_ORIGINS JSON is malformed: {exc}") from exc
        if not isinstance(parsed_list, list):
            raise ValueError("ALLOWED_ORIGINS JSON must be an array")
        allowed_origins = [
            origin.strip() for origin in parsed_list if isinstance(origin, str) and origin.strip()
        ]
    else:
        allowed_origins = [
            origin.strip() for origin in raw_allowed_origins.split(",") if origin.strip()
        ]

    if "*" in allowed_origins:
        raise ValueError(
            "ALLOWED_ORIGINS cannot contain '*' when credentialed requests are used"
        )

    for origin in allowed_origins:
        parsed = urlparse(origin)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError(
                "ALLOWED_ORIGINS must contain valid http/https origins with host"
            )
    return allowed_origins


class Settings(BaseModel):
    app_name: str = Field(default="PrepAI Gatekeeper")
    debug: bool = Field(default=False)
    login_path: str = Field(default="/login")
    authenticated_landing_path: str = Field(default="/dashboard")
    callback_param: str = Field(default="callbackUrl")
    auth_cookie_name: str = Field(default="auth-token")
    allowed_origins: list[str] = Field(default_factory=list)
    ignored_tenant_subdomains: list[str] = Field(
        default_factory=lambda: ["localhost", "127", "www"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls.model_fields

        callback_param = os.getenv("CALLBACK_PARAM", defaults["callback_param"].default).strip()
        if not callback_param:
            raise ValueError("CALLBACK_PARAM must not be empty")

        auth_cookie_name = os.getenv(
            "AUTH_COOKIE_NAME", defaults["auth_cookie_name"].default
        ).strip()
        if not auth_cookie_name:
            raise ValueError("AUTH_COOKIE_NAME must not be empty")

        raw_ignored = os.getenv("IGNORED_TENANT_SUBDOMAINS")
        if raw_ignored is None:
            ignored_tenant_subdomains = defaults["ignored_tenant_subdomains"].default_factory()
        else:
            ignored_tenant_subdomains = [
                label.strip().lower() for label in raw_ignored.split(",") if label.strip()
            ]

        return cls(
            app_name=os.getenv("APP_NAME", defaults["app_name"].default),
            debug=_parse_bool("DEBUG", os.getenv("DEBUG", "false")),
            login_path=_parse_path("LOGIN_PATH", os.getenv("LOGIN_PATH", defaults["login_path"].default)),
            authenticated_landing_path=_parse_path(
                "AUTHENTICATED_LANDING_PATH",
                os.getenv(
                    "AUTHENTICATED_LANDING_PATH",
                    defaults["authenticated_landing_path"].default,
                ),
            ),
            callback_param=callback_param,
            auth_cookie_name=auth_cookie_name,
            allowed_origins=_parse_origins(os.getenv("ALLOWED_ORIGINS", "").strip()),
            ignored_tenant_subdomains=ignored_tenant_subdomains,
        )


# Settings are created on first access so importing the package never reads
# or validates the environment.
_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_settings() -> Settings:
    """Get settings instance, creating it on first access.

    Uses double-checked locking so concurrent first callers build it once.

    Raises:
        ValueError: If environment variables are invalid
    """
    global _settings_instance

    if _settings_instance is not None:
        return _settings_instance

    with _settings_lock:
        if _settings_instance is None:
            _settings_instance = Settings.from_env()

    return _settings_instance


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


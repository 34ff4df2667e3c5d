import pytest

from gatekeeper.config import Settings, get_settings, reset_settings

# Tests for Settings.from_env() with different environment formats

ENV_VARS = (
    "APP_NAME",
    "DEBUG",
    "LOGIN_PATH",
    "AUTHENTICATED_LANDING_PATH",
    "CALLBACK_PARAM",
    "AUTH_COOKIE_NAME",
    "ALLOWED_ORIGINS",
    "IGNORED_TENANT_SUBDOMAINS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment() -> None:
    """Test that every setting has a usable default."""
    settings = Settings.from_env()

    assert settings.app_name == "PrepAI Gatekeeper"
    assert settings.debug is False
    assert settings.login_path == "/login"
    assert settings.authenticated_landing_path == "/dashboard"
    assert settings.callback_param == "callbackUrl"
    assert settings.auth_cookie_name == "auth-token"
    assert settings.allowed_origins == []
    assert settings.ignored_tenant_subdomains == ["localhost", "127", "www"]


def test_allowed_origins_csv_format(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that ALLOWED_ORIGINS can be parsed as CSV."""
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000,https://app.prepai.io")

    settings = Settings.from_env()

    assert settings.allowed_origins == ["http://localhost:3000", "https://app.prepai.io"]


def test_allowed_origins_json_array_format(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that ALLOWED_ORIGINS can be parsed as JSON array."""
    monkeypatch.setenv("ALLOWED_ORIGINS", '["http://localhost:3000", "https://app.prepai.io"]')

    settings = Settings.from_env()

    assert settings.allowed_origins == ["http://localhost:3000", "https://app.prepai.io"]


def test_allowed_origins_csv_with_whitespace(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", " http://localhost:3000 , ,http://localhost:8080 ")

    settings = Settings.from_env()

    assert settings.allowed_origins == ["http://localhost:3000", "http://localhost:8080"]


def test_allowed_origins_rejects_wildcard(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that ALLOWED_ORIGINS rejects wildcard when credentials are used."""
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://localhost:3000,*")

    with pytest.raises(ValueError, match=r"cannot contain '\*' when credentialed requests"):
        Settings.from_env()


def test_allowed_origins_rejects_malformed_json(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", '["http://localhost:3000"')

    with pytest.raises(ValueError, match="ALLOWED_ORIGINS JSON is malformed"):
        Settings.from_env()


def test_allowed_origins_rejects_json_object(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ALLOWED_ORIGINS", '[{"origin": "http://localhost:3000"}]')

    assert Settings.from_env().allowed_origins == []


def test_allowed_origins_rejects_invalid_url(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that invalid URLs in ALLOWED_ORIGINS raise an error."""
    monkeypatch.setenv("ALLOWED_ORIGINS", "not-a-url,http://localhost:3000")

    with pytest.raises(ValueError, match="must contain valid http/https origins"):
        Settings.from_env()


def test_redirect_paths_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGIN_PATH", " /signin ")
    monkeypatch.setenv("AUTHENTICATED_LANDING_PATH", "/overview")
    monkeypatch.setenv("CALLBACK_PARAM", "next")

    settings = Settings.from_env()

    assert settings.login_path == "/signin"
    assert settings.authenticated_landing_path == "/overview"
    assert settings.callback_param == "next"


@pytest.mark.parametrize("value", ["login", "https://evil.example/login", "//evil.example"])
def test_login_path_must_be_local(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    """Test that redirect targets cannot point off-site."""
    monkeypatch.setenv("LOGIN_PATH", value)

    with pytest.raises(ValueError, match="LOGIN_PATH must be an absolute path"):
        Settings.from_env()


def test_landing_path_must_be_local(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTHENTICATED_LANDING_PATH", "dashboard")

    with pytest.raises(ValueError, match="AUTHENTICATED_LANDING_PATH must be an absolute path"):
        Settings.from_env()


@pytest.mark.parametrize("name", ["CALLBACK_PARAM", "AUTH_COOKIE_NAME"])
def test_blank_names_rejected(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    monkeypatch.setenv(name, "   ")

    with pytest.raises(ValueError, match=f"{name} must not be empty"):
        Settings.from_env()


@pytest.mark.parametrize(
    "raw,expected",
    [("true", True), ("1", True), ("YES", True), ("off", False), ("0", False)],
)
def test_debug_flag(monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("DEBUG", raw)

    assert Settings.from_env().debug is expected


def test_debug_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "maybe")

    with pytest.raises(ValueError, match="DEBUG must be a boolean value"):
        Settings.from_env()


def test_ignored_tenant_subdomains(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IGNORED_TENANT_SUBDOMAINS", "localhost, WWW ,staging,")

    settings = Settings.from_env()

    assert settings.ignored_tenant_subdomains == ["localhost", "www", "staging"]


def test_get_settings_is_cached_until_reset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_NAME", "first")
    first = get_settings()
    monkeypatch.setenv("APP_NAME", "second")

    assert get_settings() is first

    reset_settings()
    assert get_settings().app_name == "second"

"""Shared test fixtures and configuration."""
import pytest

from gatekeeper.config import Settings, reset_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # Settings are cached process-wide; tests that set env vars must not leak them
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings() -> Settings:
    return Settings(allowed_origins=["http://localhost:3000"])

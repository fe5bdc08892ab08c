"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from giaycung_api import deps
from giaycung_api.adapters.memory import InMemoryBackend
from giaycung_api.settings import Settings

ADMIN_SECRET = "test-admin-secret"
ADMIN_EMAIL = "admin@giaycung.vn"
ADMIN_PASSWORD = "giaycung-pw"


def make_settings(**overrides) -> Settings:
    values = dict(
        storage_backend="memory",
        google_sheets_id="test_sheet_id",
        admin_token_secret=ADMIN_SECRET,
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
        shoes_storage="table",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def backend():
    """Empty in-memory spreadsheet; tabs are created on first header install."""
    return InMemoryBackend()


@pytest.fixture
def client(settings, backend):
    """TestClient wired to the in-memory backend and fake settings."""
    from giaycung_api.main import app

    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_backend] = lambda: backend
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_SECRET}

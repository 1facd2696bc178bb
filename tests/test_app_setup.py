"""
Tests for application wiring: lifespan, mounted routes, middleware, and
avoidance of deprecated APIs.
"""

import inspect
from pathlib import Path

import pytest


class TestLifespan:
    def test_main_does_not_use_on_event(self):
        """main.py should use the lifespan context manager, not @app.on_event."""
        from src import main
        source = inspect.getsource(main)
        assert "@app.on_event" not in source

    def test_app_has_lifespan(self):
        from src.main import app
        assert app.router.lifespan_context is not None


class TestRouteTable:
    @pytest.mark.parametrize("method, path", [
        ("POST", "/api/auth/register"),
        ("POST", "/api/auth/login"),
        ("POST", "/api/auth/verify"),
        ("GET", "/api/auth/profile"),
        ("PUT", "/api/auth/profile"),
        ("POST", "/api/auth/reset-password"),
        ("POST", "/api/auth/reset-password/confirm"),
        ("POST", "/api/users/{user_id}/change-password"),
        ("POST", "/api/users/{user_id}/change-email"),
        ("PUT", "/api/users/{user_id}/profile"),
        ("GET", "/api/cases"),
        ("POST", "/api/cases"),
        ("PUT", "/api/cases/{case_id}"),
        ("DELETE", "/api/cases/{case_id}"),
        ("GET", "/api/clients"),
        ("DELETE", "/api/clients/{client_id}"),
        ("GET", "/api/documents"),
        ("PUT", "/api/documents/{document_id}"),
        ("GET", "/api/tasks"),
        ("POST", "/api/tasks"),
        ("GET", "/health"),
    ])
    def test_route_is_mounted(self, method, path):
        from src.main import app
        paths = app.openapi()["paths"]
        assert path in paths
        assert method.lower() in paths[path]

    async def test_cors_preflight(self, client):
        response = await client.options(
            "/api/cases",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers


class TestNoUtcnow:
    """Source and tests should use datetime.now(timezone.utc), not utcnow()."""

    def test_source_files_do_not_use_utcnow(self):
        deprecated_call = "utc" + "now()"
        src_dir = Path(__file__).parent.parent / "src"
        violations = []

        for py_file in src_dir.rglob("*.py"):
            for i, line in enumerate(py_file.read_text(encoding="utf-8").splitlines(), 1):
                stripped = line.strip()
                if stripped.startswith("#"):
                    continue
                if deprecated_call in line:
                    violations.append(f"{py_file.name}:{i}: {stripped}")

        assert not violations, "Found deprecated utcnow() calls:\n" + "\n".join(violations)

    def test_test_files_do_not_use_utcnow(self):
        deprecated_call = "datetime." + "utcnow()"
        violations = []

        for py_file in Path(__file__).parent.rglob("*.py"):
            for i, line in enumerate(py_file.read_text(encoding="utf-8").splitlines(), 1):
                if deprecated_call in line and not line.strip().startswith("#"):
                    violations.append(f"{py_file.name}:{i}")

        assert not violations, "Found deprecated utcnow() calls in tests:\n" + "\n".join(violations)


class TestUnhandledErrors:
    async def test_unexpected_exception_returns_json_500(self, db, auth_headers, monkeypatch):
        """Errors outside the AppError taxonomy still get the standard error body."""
        from httpx import ASGITransport, AsyncClient

        from src.database import get_db
        from src.main import app
        from src.stores.clients import ClientStore

        async def broken_list(self, owner_id):
            raise RuntimeError("boom")

        async def override_get_db():
            yield db

        monkeypatch.setattr(ClientStore, "list_for_owner", broken_list)
        app.dependency_overrides[get_db] = override_get_db
        try:
            transport = ASGITransport(app=app, raise_app_exceptions=False)
            async with AsyncClient(transport=transport, base_url="http://test") as ac:
                response = await ac.get("/api/clients", headers=auth_headers)
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error", "error": "UNCLASSIFIED_ERROR"}


class TestRouteBackend:
    async def test_routes_use_database_backend_even_when_remote_is_configured(self, db, monkeypatch):
        from src.auth_backends import DirectAuthBackend
        from src.config import settings
        from src.routes.auth_routes import direct_backend

        monkeypatch.setattr(settings, "AUTH_BACKEND", "remote")
        monkeypatch.setattr(settings, "API_URL", "http://api.test")
        assert isinstance(direct_backend(db), DirectAuthBackend)

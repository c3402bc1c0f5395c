"""
Unit tests for the application factory: error handlers, middleware,
health check and session login against the in-memory store.
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.csrf import CSRF_COOKIE, CSRF_HEADER
from src.api.errors import ErrorKind
from src.api.main import create_app
from src.config.settings import Settings
from src.domain.exceptions import RepositoryError


def settings_with(settings: Settings, **overrides) -> Settings:
    return settings.model_copy(update=overrides)


class TestErrorKind:
    """Tests for the closed error enumeration."""

    @pytest.mark.parametrize(
        ("status_code", "kind"),
        [
            (400, ErrorKind.BAD_REQUEST),
            (401, ErrorKind.UNAUTHORIZED),
            (404, ErrorKind.NOT_FOUND),
            (418, ErrorKind.BAD_REQUEST),
            (500, ErrorKind.INTERNAL),
            (502, ErrorKind.INTERNAL),
            (503, ErrorKind.SERVICE_UNAVAILABLE),
        ],
    )
    def test_from_status(self, status_code: int, kind: ErrorKind) -> None:
        assert ErrorKind.from_status(status_code) is kind

    def test_members_carry_status_and_message(self) -> None:
        assert ErrorKind.NOT_FOUND.status_code == 404
        assert ErrorKind.INTERNAL.message == "An internal error occurred"


class TestErrorHandlers:
    """Every error is rendered as a structured JSON body."""

    def test_unknown_route_returns_404_body(self, client: TestClient) -> None:
        response = client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "NOT_FOUND"
        assert response.json()["error"]["status"] == 404

    def test_wrong_method_returns_405_body(self, client: TestClient) -> None:
        response = client.delete("/health")

        assert response.status_code == 405
        assert response.json()["error"]["kind"] == "METHOD_NOT_ALLOWED"

    def test_unhandled_error_includes_detail_in_development(self, app: FastAPI) -> None:
        @app.get("/boom")
        def boom() -> None:
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["kind"] == "INTERNAL"
        assert error["detail"] == "RuntimeError: kaboom"

    def test_unhandled_error_hides_detail_in_production(self, settings: Settings) -> None:
        app = create_app(settings_with(settings, environment="production"))

        @app.get("/boom")
        def boom() -> None:
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/boom")

        assert response.status_code == 500
        assert "detail" not in response.json()["error"]
        assert "kaboom" not in response.text


class TestHealth:
    def test_healthy(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_store_down_returns_503(self, app: FastAPI, client: TestClient) -> None:
        class BrokenStore:
            def ping(self) -> None:
                raise RepositoryError("down")

        app.state.repository = BrokenStore()

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["error"]["kind"] == "SERVICE_UNAVAILABLE"


class TestRequestLogging:
    def test_request_is_logged(self, client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="src.api.main"):
            client.get("/health")

        assert any("GET /health 200" in record.getMessage() for record in caplog.records)


class TestCSRF:
    """Tests for the double-submit cookie middleware."""

    @pytest.fixture
    def csrf_client(self, settings: Settings):
        app = create_app(settings_with(settings, csrf_enabled=True))
        with TestClient(app) as client:
            yield client

    def test_safe_request_issues_cookie(self, csrf_client: TestClient) -> None:
        response = csrf_client.get("/health")

        assert CSRF_COOKIE in response.cookies

    def test_cookie_is_stable_across_requests(self, csrf_client: TestClient) -> None:
        first = csrf_client.get("/health").cookies[CSRF_COOKIE]
        second = csrf_client.get("/health").cookies[CSRF_COOKIE]

        assert first == second

    def test_unsafe_request_without_header_is_rejected(self, csrf_client: TestClient) -> None:
        csrf_client.get("/health")

        response = csrf_client.post("/api/users/logout")

        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "FORBIDDEN"

    def test_unsafe_request_with_mismatched_header_is_rejected(
        self, csrf_client: TestClient
    ) -> None:
        csrf_client.get("/health")

        response = csrf_client.post("/api/users/logout", headers={CSRF_HEADER: "forged"})

        assert response.status_code == 403

    def test_unsafe_request_with_matching_header_passes(self, csrf_client: TestClient) -> None:
        token = csrf_client.get("/health").cookies[CSRF_COOKIE]

        response = csrf_client.post("/api/users/logout", headers={CSRF_HEADER: token})

        assert response.status_code == 200

    def test_confirmation_is_a_safe_request(self, csrf_client: TestClient) -> None:
        """Confirmation links opened from an email carry no CSRF header."""
        response = csrf_client.get("/api/users/register/confirm", params={"token": "nope"})

        assert response.status_code == 400


class TestCORS:
    def test_allowed_origin(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "http://localhost:4200"})

        assert response.headers["access-control-allow-origin"] == "http://localhost:4200"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_other_origin(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Origin": "http://evil.example"})

        assert "access-control-allow-origin" not in response.headers


class TestSessionLogin:
    """Login, logout and the login guard against the in-memory store."""

    def register(self, client: TestClient, email: str = "user@example.com") -> None:
        response = client.post(
            "/api/users/register", json={"email": email, "password": "password123"}
        )
        assert response.status_code == 201

    def test_me_requires_login(self, client: TestClient) -> None:
        response = client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json()["error"]["message"] == (
            "You must be logged in to view this resource"
        )

    def test_login_unknown_user(self, client: TestClient) -> None:
        response = client.post(
            "/api/users/login", json={"username": "ghost@example.com", "password": "x"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid username"

    def test_login_wrong_password(self, client: TestClient) -> None:
        self.register(client)

        response = client.post(
            "/api/users/login", json={"username": "user@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid password"

    def test_login_with_password_over_72_bytes_returns_422(self, client: TestClient) -> None:
        self.register(client)

        response = client.post(
            "/api/users/login", json={"username": "user@example.com", "password": "x" * 100}
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["param"] == "password"

    def test_login_me_logout(self, client: TestClient) -> None:
        self.register(client)

        login = client.post(
            "/api/users/login",
            json={"username": "USER@example.com", "password": "password123"},
        )
        assert login.status_code == 200
        assert login.json()["user"]["email"] == "user@example.com"
        assert "password_hash" not in login.text

        me = client.get("/api/users/me")
        assert me.status_code == 200
        assert me.json()["user"]["email"] == "user@example.com"

        assert client.post("/api/users/logout").status_code == 200
        assert client.get("/api/users/me").status_code == 401

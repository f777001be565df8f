# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the HTTP layer: envelopes, auth middleware and routing."""

import json

import httpx
import pytest
from fastapi import FastAPI, Request

from conftest import scalar_result, scalars_result
from src.api.dependencies import (
    envelope_response,
    get_db,
    get_invalidator,
    get_tenant_context,
)
from src.api.middleware.auth import AuthMiddleware
from src.api.v1 import router as v1_router
from src.core.config.settings import JWTSettings
from src.core.result import Err, ErrorKind, Ok
from src.domains.auth.jwt import JWTManager


@pytest.fixture
def jwt_manager() -> JWTManager:
    return JWTManager(JWTSettings(secret_key="test-secret"))


class TestEnvelopeResponse:
    """Tests for rendering results as HTTP responses."""

    @pytest.mark.parametrize(
        "kind,status_code",
        [
            (ErrorKind.VALIDATION, 400),
            (ErrorKind.UNAUTHENTICATED, 401),
            (ErrorKind.NOT_FOUND, 404),
            (ErrorKind.CONFLICT, 409),
            (ErrorKind.PRECONDITION, 409),
            (ErrorKind.NOT_IMPLEMENTED, 501),
            (ErrorKind.INFRASTRUCTURE, 500),
        ],
    )
    def test_error_status(self, kind: ErrorKind, status_code: int) -> None:
        response = envelope_response(Err(kind, "Something failed"))

        assert response.status_code == status_code
        assert json.loads(response.body) == {
            "success": False,
            "error": "Something failed",
            "kind": kind.value,
        }

    def test_created(self) -> None:
        response = envelope_response(Ok({"id": "x"}, message="Created"), created=True)

        assert response.status_code == 201
        assert json.loads(response.body) == {
            "success": True,
            "data": {"id": "x"},
            "message": "Created",
        }

    def test_ok_without_message(self) -> None:
        response = envelope_response(Ok([]))

        assert response.status_code == 200
        assert json.loads(response.body) == {"success": True, "data": []}


class TestAuthMiddleware:
    """Tests for bearer token handling."""

    @pytest.fixture
    def app(self, jwt_manager: JWTManager) -> FastAPI:
        app = FastAPI()
        app.add_middleware(AuthMiddleware, jwt_manager=jwt_manager)

        @app.get("/whoami")
        async def whoami(request: Request) -> dict:
            user = request.state.user
            return {"user_id": user.id if user else None, "admin": bool(user and user.is_admin)}

        return app

    async def _get(self, app: FastAPI, headers: dict[str, str] | None = None) -> dict:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/whoami", headers=headers or {})
        return response.json()

    @pytest.mark.asyncio
    async def test_valid_token(self, app, jwt_manager) -> None:
        token = jwt_manager.create_access_token("user-1", aamar_id="AAMAR1", role="ADMIN")

        body = await self._get(app, {"Authorization": f"Bearer {token.access_token}"})

        assert body == {"user_id": "user-1", "admin": True}

    @pytest.mark.asyncio
    async def test_invalid_token_continues_anonymous(self, app) -> None:
        body = await self._get(app, {"Authorization": "Bearer not-a-token"})

        assert body == {"user_id": None, "admin": False}

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_ignored(self, app, jwt_manager) -> None:
        token = jwt_manager.create_access_token("user-1")

        body = await self._get(app, {"Authorization": f"Basic {token.access_token}"})

        assert body["user_id"] is None


class TestRouting:
    """Tests for v1 routes with dependencies overridden."""

    @pytest.fixture
    def app(self, mock_db, mock_invalidator) -> FastAPI:
        app = FastAPI()
        app.include_router(v1_router)

        async def override_db():
            yield mock_db

        app.dependency_overrides[get_db] = override_db
        app.dependency_overrides[get_invalidator] = lambda: mock_invalidator
        return app

    async def _request(self, app: FastAPI, method: str, url: str, **kwargs) -> httpx.Response:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            return await client.request(method, url, **kwargs)

    @pytest.mark.asyncio
    async def test_no_session_is_unauthenticated(self, app, mock_db) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: None

        response = await self._request(app, "GET", "/api/v1/classes/stats")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Authentication required",
            "kind": "unauthenticated",
        }
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_class_stats(self, app, mock_db, tenant_context) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: tenant_context
        mock_db.execute.return_value = scalars_result([])

        response = await self._request(app, "GET", "/api/v1/classes/stats")

        assert response.status_code == 200
        assert response.json()["data"]["total_classes"] == 0

    @pytest.mark.asyncio
    async def test_create_validation_error_is_400(self, app, mock_db, tenant_context) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: tenant_context

        response = await self._request(app, "POST", "/api/v1/classes", json={"name": "Class 5"})

        assert response.status_code == 400
        assert response.json()["error"] == "Required fields are missing"

    @pytest.mark.asyncio
    async def test_routine_overlap_is_400(self, app, mock_db, tenant_context) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: tenant_context
        body = {
            "class_id": "class-1",
            "academic_year": "2024",
            "branch_id": "branch-1",
            "slots": [
                {"day": "Monday", "start_time": "09:00", "end_time": "10:00"},
                {"day": "Monday", "start_time": "09:30", "end_time": "10:30"},
            ],
        }

        response = await self._request(app, "PUT", "/api/v1/class-routines", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Routine slots overlap"
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_routine_is_404(self, app, mock_db, tenant_context) -> None:
        app.dependency_overrides[get_tenant_context] = lambda: tenant_context
        mock_db.execute.return_value = scalar_result(None)

        response = await self._request(app, "GET", "/api/v1/class-routines/class/class-1")

        assert response.status_code == 404
        assert response.json()["error"] == "Class routine not found"

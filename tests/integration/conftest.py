# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API integration tests.

The v1 router is mounted on a bare FastAPI app with the repository
dependency pointed at the in-memory repository. The operator is taken from
the ``X-Test-Role`` header and placed on ``request.state.user`` the way the
deployment's auth layer does.
"""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from src.api.dependencies import get_repository
from src.api.v1 import router as v1_router
from src.domains.auth import CurrentUser
from src.models.common import UserRole

ROLE_HEADER = "X-Test-Role"


@pytest.fixture
def app(repository) -> FastAPI:
    """Create test FastAPI app."""
    app = FastAPI()
    app.include_router(v1_router)

    @app.middleware("http")
    async def attach_operator(request: Request, call_next):
        role = request.headers.get(ROLE_HEADER)
        if role:
            request.state.user = CurrentUser(id=f"{role.lower()}-1", role=UserRole(role))
        return await call_next(request)

    app.dependency_overrides[get_repository] = lambda: repository
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create test client."""
    return TestClient(app)

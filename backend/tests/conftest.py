"""
Quillpost Backend — Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── make_token: Mints signed JWTs with the test secret
    ├── make_context: Builds RequestContext objects for guard unit tests
    ├── build_client: Factory for HTTPX AsyncClients with custom Settings
    ├── test_client: HTTPX AsyncClient against the default test app
    └── clear_articles (autouse): Empties the in-memory article store
"""

import os
import time
from typing import Any, Callable, Optional, Sequence

# Override settings for testing BEFORE any app imports
os.environ["JWT_SECRET_KEY"] = "quillpost-test-secret-0123456789abcdef"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ.pop("DEFAULT_TENANT_ID", None)

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from quillpost.config import Settings
from quillpost.context import AuthenticatedIdentity, RequestContext, TenantInfo, TenantSource
from quillpost.main import create_app
from quillpost.services.article_service import article_service

TEST_SECRET = os.environ["JWT_SECRET_KEY"]


@pytest.fixture(autouse=True)
def clear_articles():
    """The article store is a module-level singleton; isolate every test."""
    article_service._articles.clear()
    yield
    article_service._articles.clear()


@pytest.fixture
def make_token() -> Callable[..., str]:
    """
    Mints an HS256 access token.

    Usage:
        token = make_token(roles=["editor"], tenant_id="acme")
        expired = make_token(expires_in=-60)
        forged = make_token(secret="some-other-secret-0123456789abcdef")
    """

    def _make(
        sub: Optional[str] = "user-1",
        email: str = "ada@example.com",
        roles: Sequence[str] = ("user",),
        tenant_id: Optional[str] = None,
        expires_in: int = 3600,
        secret: str = TEST_SECRET,
        **extra: Any,
    ) -> str:
        now = int(time.time())
        claims = {"email": email, "roles": list(roles), "iat": now, "exp": now + expires_in}
        if sub is not None:
            claims["sub"] = sub
        if tenant_id is not None:
            claims["tenant_id"] = tenant_id
        claims.update(extra)
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make


@pytest.fixture
def make_context() -> Callable[..., RequestContext]:
    """Builds a RequestContext as it would look after the middleware ran."""

    def _make(
        correlation_id: str = "test-request-id",
        tenant_id: Optional[str] = None,
        roles: Optional[Sequence[str]] = None,
    ) -> RequestContext:
        context = RequestContext(correlation_id=correlation_id)
        if tenant_id is not None:
            context.tenant = TenantInfo(tenant_id=tenant_id, source=TenantSource.HEADER)
        if roles is not None:
            context.identity = AuthenticatedIdentity(
                user_id="user-1", email="ada@example.com", roles=tuple(roles)
            )
        return context

    return _make


@pytest.fixture
def build_client() -> Callable[..., AsyncClient]:
    """
    Factory for clients against an app built with custom Settings.

    Usage:
        async with build_client(default_tenant_id="main") as client:
            response = await client.get("/api/auth/me", headers=...)
    """

    def _build(base_url: str = "http://localhost", **overrides: Any) -> AsyncClient:
        config = Settings(jwt_secret_key=TEST_SECRET, **overrides)
        transport = ASGITransport(app=create_app(config))
        return AsyncClient(transport=transport, base_url=base_url)

    return _build


@pytest_asyncio.fixture
async def test_client(build_client):
    """
    Async HTTP client for the default test app (no default tenant).

    Base URL host is "localhost", so no subdomain tenant is derived unless a
    test overrides the Host header.
    """
    async with build_client() as client:
        yield client

"""Test fixtures — a fresh in-memory database per test.

Each test gets its own SQLite engine (aiosqlite, StaticPool so every
session sees the same in-memory database), the schema created from the
ORM metadata, and an AsyncSession that replaces the app's get_db.
Auth is NOT mocked: tests register and log in through the API and send
real bearer tokens, so the claim policy runs exactly as in production.
"""

import os

# Must be set before fornecedores.config is imported.
os.environ.setdefault("FORNECEDORES_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FORNECEDORES_BCRYPT_ROUNDS", "4")

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from fornecedores.config import settings
from fornecedores.db.engine import get_db
from fornecedores.db.models import Base
from fornecedores.main import app
from fornecedores.services.identity_service import IdentityService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "Secret#123"


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session on a brand-new in-memory schema."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session = AsyncSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(db_session):
    """HTTP client with the app's get_db pointed at the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


async def register(client, email: str, password: str = TEST_PASSWORD):
    return await client.post(
        "/register",
        json={"email": email, "password": password, "confirm_password": password},
    )


async def login(client, email: str, password: str = TEST_PASSWORD):
    return await client.post("/login", json={"email": email, "password": password})


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture()
async def auth_headers(client):
    """Bearer headers for a plain authenticated user (no claims)."""
    r = await register(client, unique_email("plain"))
    assert r.status_code == 200
    return bearer(r.json()["access_token"])


@pytest_asyncio.fixture()
async def delete_auth_headers(client, db_session):
    """Bearer headers for a user holding the delete-supplier claim.

    The claim is granted in the identity store, then the user logs in
    again so the new token carries it.
    """
    email = unique_email("admin")
    r = await register(client, email)
    assert r.status_code == 200

    await IdentityService(db_session).grant_claim(email, settings.delete_supplier_claim)

    r = await login(client, email)
    assert r.status_code == 200
    return bearer(r.json()["access_token"])

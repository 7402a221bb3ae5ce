"""Registration and login tests.

Covers:
1. Register → token, then login with the same credentials
2. Validation failures (malformed email, password mismatch) → 400, no user
3. Identity failures (duplicate email, weak password) → 400 with error codes
4. Login with bad credentials → 400
"""

import pytest
from sqlalchemy import func, select

from fornecedores.auth.jwt import verify_token
from fornecedores.db.models import User
from tests.conftest import TEST_PASSWORD, login, register, unique_email


async def _user_count(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(User))
    return result.scalar_one()


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_returns_token_and_login_succeeds(client):
    """A new user gets a token, and can log in afterwards."""
    email = unique_email("reg")
    r = await register(client, email)
    assert r.status_code == 200
    body = r.json()
    assert body["token_type"] == "bearer"
    assert body["expires_in"] > 0
    assert body["user_token"]["email"] == email

    payload = verify_token(body["access_token"])
    assert payload["email"] == email
    assert payload["sub"] == body["user_token"]["id"]

    r = await login(client, email)
    assert r.status_code == 200
    assert r.json()["user_token"]["id"] == body["user_token"]["id"]


@pytest.mark.asyncio
async def test_register_malformed_email(client, db_session):
    """An email without "@" is a validation error and creates nobody."""
    r = await client.post(
        "/register",
        json={
            "email": "not-an-email",
            "password": TEST_PASSWORD,
            "confirm_password": TEST_PASSWORD,
        },
    )
    assert r.status_code == 400
    problem = r.json()
    assert problem["status"] == 400
    assert "email" in problem["errors"]
    assert await _user_count(db_session) == 0


@pytest.mark.asyncio
async def test_register_password_mismatch(client, db_session):
    r = await client.post(
        "/register",
        json={
            "email": unique_email(),
            "password": TEST_PASSWORD,
            "confirm_password": "Other#123",
        },
    )
    assert r.status_code == 400
    assert "errors" in r.json()
    assert await _user_count(db_session) == 0


@pytest.mark.asyncio
async def test_register_missing_fields(client):
    r = await client.post("/register", json={"email": unique_email()})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert "password" in errors
    assert "confirm_password" in errors


@pytest.mark.asyncio
async def test_register_duplicate_email(client, db_session):
    """Registering the same email twice fails with DuplicateEmail."""
    email = unique_email("dup")
    assert (await register(client, email)).status_code == 200

    r = await register(client, email)
    assert r.status_code == 400
    codes = [e["code"] for e in r.json()["detail"]]
    assert codes == ["DuplicateEmail"]
    assert await _user_count(db_session) == 1


@pytest.mark.asyncio
async def test_register_email_is_case_insensitive(client):
    email = unique_email("case")
    assert (await register(client, email)).status_code == 200

    r = await register(client, email.upper())
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_register_weak_password_lists_every_rule(client, db_session):
    r = await register(client, unique_email("weak"), password="abcdef")
    assert r.status_code == 400
    codes = {e["code"] for e in r.json()["detail"]}
    assert codes == {
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    }
    assert await _user_count(db_session) == 0


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    email = unique_email("wrong")
    await register(client, email)

    r = await login(client, email, password="Wrong#999")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid user name or password"


@pytest.mark.asyncio
async def test_login_unknown_user(client):
    """Unknown email gets the same answer as a wrong password."""
    r = await login(client, "nobody@example.com")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid user name or password"


@pytest.mark.asyncio
async def test_login_malformed_body(client):
    r = await client.post("/login", json={"email": "x", "password": ""})
    assert r.status_code == 400
    errors = r.json()["errors"]
    assert "email" in errors
    assert "password" in errors


@pytest.mark.asyncio
async def test_login_token_carries_granted_claim(client, db_session):
    """Claims and roles granted in the identity store appear in the next token."""
    from fornecedores.services.identity_service import IdentityService

    email = unique_email("claims")
    await register(client, email)
    svc = IdentityService(db_session)
    await svc.grant_claim(email, "ExcluirFornecedor")
    await svc.assign_role(email, "admin")

    r = await login(client, email)
    body = r.json()
    payload = verify_token(body["access_token"])
    assert payload["claims"] == {"ExcluirFornecedor": "true"}
    assert payload["role"] == ["admin"]

    echoed = {(c["type"], c["value"]) for c in body["user_token"]["claims"]}
    assert ("ExcluirFornecedor", "true") in echoed
    assert ("role", "admin") in echoed

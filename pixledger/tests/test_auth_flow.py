"""
Integration tests for the Authentication Flow.

Verifies Register -> Login -> Me -> Logout and token revocation.
"""

import logging
from datetime import timedelta

import pytest
from jose import jwt
from sqlalchemy import select

from pixledger.app.core.config import settings
from pixledger.app.core.jwt import create_access_token, decode_access_token
from pixledger.app.models.audit_log import AuditLog
from pixledger.app.models.enums import AccountType


REGISTER_PAYLOAD = {
    "name": "Maria Silva",
    "email": "Maria@Example.com",
    "password": "password123",
    "configuration": {"notifications": True, "language": "pt-BR"},
}


@pytest.mark.asyncio
async def test_register_returns_token_and_normal_account(client):
    response = await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["role"] == "NORMAL"
    assert data["email"] == "maria@example.com"
    assert data["access_token"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)

    response = await client.post("/v1/auth/register", json={**REGISTER_PAYLOAD, "email": "maria@example.com"})

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_EMAIL_TAKEN"


@pytest.mark.asyncio
async def test_register_validation_error(client):
    response = await client.post("/v1/auth/register", json={"name": "", "email": "not-an-email", "password": "1"})

    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_login_and_me(client):
    await client.post("/v1/auth/register", json={**REGISTER_PAYLOAD, "agent": {"persona": "saver"}})

    response = await client.post(
        "/v1/auth/login", json={"email": "maria@example.com", "password": "password123"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    me = response.json()
    assert me["name"] == "Maria Silva"
    assert me["balance"] == "0.00"
    assert me["score"] == 0
    assert me["configuration"] == {"notifications": True, "language": "pt-BR"}
    assert me["agent"] == {"persona": "saver"}
    assert me["pix_keys"] == []
    assert "password_hash" not in me


@pytest.mark.asyncio
async def test_login_wrong_password_is_audited(client, database):
    await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)

    response = await client.post(
        "/v1/auth/login", json={"email": "maria@example.com", "password": "wrong-password"}
    )

    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_UNAUTHORIZED"

    async with database.session() as session:
        result = await session.execute(select(AuditLog).where(AuditLog.action == "LOGIN_FAILED"))
        failures = result.scalars().all()
    assert len(failures) == 1
    assert failures[0].meta_data == {"reason": "Invalid password"}


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    response = await client.post(
        "/v1/auth/login", json={"email": "ghost@example.com", "password": "password123"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_protected_route_requires_token(client):
    response = await client.get("/v1/auth/me")
    assert response.status_code in (401, 403)

    response = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_token(client, redis_client):
    response = await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = await client.post("/v1/auth/logout", headers=headers)
    assert response.status_code == 204
    assert any(key.startswith("blacklist:token:") for key in redis_client.store)

    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"


@pytest.mark.asyncio
async def test_deleted_account_token_stops_working(client):
    response = await client.post("/v1/auth/register", json=REGISTER_PAYLOAD)
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = await client.delete("/v1/accounts/me", headers=headers)
    assert response.status_code == 204

    response = await client.get("/v1/auth/me", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health_and_root(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers

    response = await client.get("/")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_access_log_carries_correlation_id_and_account(client, make_account, auth_headers, caplog):
    account = await make_account("traced@example.com")
    headers = {**auth_headers(account), "X-Correlation-ID": "trace-123"}

    with caplog.at_level(logging.INFO, logger="pixledger.http"):
        response = await client.get("/v1/auth/me", headers=headers)

    assert response.headers["X-Correlation-ID"] == "trace-123"
    records = [r for r in caplog.records if r.name == "pixledger.http"]
    assert records[-1].correlation_id == "trace-123"
    assert records[-1].account_id == account.id
    assert f"account={account.id}" in records[-1].getMessage()


def test_access_token_claims():
    token = create_access_token(42, "claims@example.com", AccountType.ADMIN)

    claims = decode_access_token(token)

    assert claims["sub"] == "claims@example.com"
    assert claims["account_id"] == 42
    assert claims["role"] == "ADMIN"


def test_token_without_account_id_is_rejected():
    token = jwt.encode({"sub": "someone@example.com"}, settings.secret_key, algorithm=settings.algorithm)

    assert decode_access_token(token) is None


@pytest.mark.asyncio
async def test_expired_token_is_rejected(client, make_account):
    account = await make_account("expired@example.com")
    token = create_access_token(account.id, account.email, account.type, expires_delta=timedelta(seconds=-5))

    response = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401

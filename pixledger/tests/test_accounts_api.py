"""
Integration tests for account, PIX key and expense endpoints.
"""

import pytest

from pixledger.app.models.enums import AccountType


@pytest.mark.asyncio
async def test_pix_key_lifecycle(client, make_account, auth_headers):
    account = await make_account("keys@example.com", name="Keys")
    headers = auth_headers(account)

    response = await client.post("/v1/accounts/me/pix-keys", json={"key": "keys@example.com"}, headers=headers)
    assert response.status_code == 201
    assert response.json()["type"] == "EMAIL"

    response = await client.post(
        "/v1/accounts/me/pix-keys", json={"key": "lucky-alias", "type": "RANDOM"}, headers=headers
    )
    assert response.status_code == 201

    response = await client.get("/v1/accounts/me/pix-keys", headers=headers)
    assert [k["key"] for k in response.json()] == ["keys@example.com", "lucky-alias"]

    response = await client.get("/v1/accounts/pix/lucky-alias", headers=headers)
    assert response.status_code == 200
    assert response.json() == {
        "id": account.id,
        "name": "Keys",
        "pix_key": "lucky-alias",
        "pix_key_type": "RANDOM",
    }

    response = await client.delete("/v1/accounts/me/pix-keys/lucky-alias", headers=headers)
    assert response.status_code == 204

    response = await client.delete("/v1/accounts/me/pix-keys/lucky-alias", headers=headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_PIX_KEY_NOT_FOUND"


@pytest.mark.asyncio
async def test_pix_key_taken_by_another_account(client, make_account, auth_headers):
    await make_account("first@example.com", pix_keys=["popular"])
    second = await make_account("second@example.com")

    response = await client.post("/v1/accounts/me/pix-keys", json={"key": "popular"}, headers=auth_headers(second))

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_PIX_KEY_TAKEN"


@pytest.mark.asyncio
async def test_update_profile_and_agent(client, make_account, auth_headers, redis_client):
    account = await make_account("profile@example.com", balance="12.00")
    headers = auth_headers(account)

    response = await client.patch(
        "/v1/accounts/me",
        json={"name": "Renamed", "configuration": {"dark_mode": True}, "agent": {"goal": "save"}, "balance": "9999"},
        headers=headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["configuration"] == {"dark_mode": True}
    assert data["agent"] == {"goal": "save"}
    assert data["balance"] == "12.00"
    assert any(key.startswith("agent:profile:") for key in redis_client.store)


@pytest.mark.asyncio
async def test_get_account_ownership(client, make_account, auth_headers):
    owner = await make_account("owner@example.com")
    other = await make_account("other@example.com")
    admin = await make_account("admin@example.com", account_type=AccountType.ADMIN)

    assert (await client.get(f"/v1/accounts/{owner.id}", headers=auth_headers(owner))).status_code == 200
    assert (await client.get(f"/v1/accounts/{owner.id}", headers=auth_headers(other))).status_code == 403
    assert (await client.get(f"/v1/accounts/{owner.id}", headers=auth_headers(admin))).status_code == 200
    response = await client.get("/v1/accounts/99999", headers=auth_headers(admin))
    assert response.status_code == 404
    assert response.json()["error_code"] == "ERR_NOT_FOUND_001"
    assert response.json()["details"] == {"resource": "Account", "id": 99999}


@pytest.mark.asyncio
async def test_admin_endpoints(client, make_account, auth_headers):
    normal = await make_account("normal@example.com")
    admin = await make_account("admin@example.com", account_type=AccountType.ADMIN)

    response = await client.get("/v1/accounts", headers=auth_headers(normal))
    assert response.status_code == 403

    response = await client.get("/v1/accounts", headers=auth_headers(admin))
    assert response.status_code == 200
    assert {a["email"] for a in response.json()} == {"normal@example.com", "admin@example.com"}

    response = await client.patch(f"/v1/accounts/{normal.id}/score", json={"score": 750}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["score"] == 750

    response = await client.patch(f"/v1/accounts/{normal.id}/score", json={"score": 1001}, headers=auth_headers(admin))
    assert response.status_code == 422

    response = await client.patch(f"/v1/accounts/{normal.id}/score", json={"score": 10}, headers=auth_headers(normal))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_expense_endpoints(client, make_account, auth_headers):
    owner = await make_account("owner@example.com")
    other = await make_account("other@example.com")
    headers = auth_headers(owner)

    response = await client.post(
        "/v1/expenses",
        json={"amount": "89.90", "description": "Internet", "execution_date": "2025-04-10T10:00:00Z", "is_recurring": True},
        headers=headers,
    )
    assert response.status_code == 201
    expense = response.json()
    assert expense["status"] == "PENDING"
    assert expense["amount"] == "89.90"

    response = await client.patch(f"/v1/expenses/{expense['id']}", json={"status": "SUCCESS"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "SUCCESS"

    response = await client.get("/v1/expenses?status=SUCCESS", headers=headers)
    assert [e["id"] for e in response.json()] == [expense["id"]]
    response = await client.get("/v1/expenses?status=PENDING", headers=headers)
    assert response.json() == []

    response = await client.get(f"/v1/expenses/{expense['id']}", headers=auth_headers(other))
    assert response.status_code == 403

    response = await client.post(
        "/v1/expenses",
        json={"amount": "-1", "description": "Bad", "execution_date": "2025-04-10T10:00:00Z"},
        headers=headers,
    )
    assert response.status_code == 422

    response = await client.delete(f"/v1/expenses/{expense['id']}", headers=headers)
    assert response.status_code == 204
    response = await client.get(f"/v1/expenses/{expense['id']}", headers=headers)
    assert response.status_code == 404

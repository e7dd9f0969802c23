"""
Failure Injection Tests.

Validates resilience against component failures: uncommitted work is rolled
back, write failures surface as opaque errors, and Redis outages degrade
instead of breaking requests.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from pixledger.app.core.exceptions import AgentProfileUnavailableError, LedgerWriteError
from pixledger.app.core.token_revocation import is_token_revoked, revoke_token
from pixledger.app.domain.ledger.ledger_service import LedgerService
from pixledger.app.models.enums import TransactionType
from pixledger.app.models.transaction import Transaction
from pixledger.app.services.account_store import AccountStore
from pixledger.app.services.agent_profiles import AgentProfileStore
from pixledger.app.services.transaction_log import TransactionLog


class BrokenRedis:
    """Redis client whose every call fails."""

    async def _fail(self, *args, **kwargs):
        raise ConnectionError("redis is down")

    get = set = setex = delete = exists = ping = _fail


async def test_unit_of_work_without_commit_rolls_back(database, make_account, balance_of):
    account = await make_account("uow@example.com", balance="10.00")

    async with database.unit_of_work() as uow:
        await AccountStore(uow.session).update_balance(account.id, Decimal("99.00"))

    assert await balance_of(account.id) == Decimal("10.00")


async def test_unit_of_work_rolls_back_on_exception(database, make_account, balance_of):
    account = await make_account("uow@example.com", balance="10.00")

    with pytest.raises(RuntimeError):
        async with database.unit_of_work() as uow:
            await AccountStore(uow.session).update_balance(account.id, Decimal("99.00"))
            raise RuntimeError("crash after write")

    assert await balance_of(account.id) == Decimal("10.00")


async def test_unit_of_work_commit_persists(database, make_account, balance_of):
    account = await make_account("uow@example.com", balance="10.00")

    async with database.unit_of_work() as uow:
        await AccountStore(uow.session).update_balance(account.id, Decimal("99.00"))
        await uow.commit()

    assert uow.committed
    assert await balance_of(account.id) == Decimal("99.00")


async def test_unit_of_work_session_unavailable_outside_block(database):
    uow = database.unit_of_work()
    with pytest.raises(RuntimeError):
        uow.session

    async with uow:
        pass

    with pytest.raises(RuntimeError):
        uow.session


async def test_negative_balance_rejected_by_check_constraint(database, make_account):
    account = await make_account("check@example.com", balance="10.00")

    with pytest.raises(SQLAlchemyError):
        async with database.unit_of_work() as uow:
            await AccountStore(uow.session).update_balance(account.id, Decimal("-1.00"))


async def test_ledger_write_failure_is_wrapped_and_rolled_back(database, locks, make_account, balance_of, mocker):
    account = await make_account("ledger@example.com", balance="10.00")
    mocker.patch.object(TransactionLog, "create", side_effect=SQLAlchemyError("disk full"))

    with pytest.raises(LedgerWriteError) as exc_info:
        await LedgerService(database, locks).record_entry(account.id, TransactionType.CREDIT, Decimal("5.00"))

    assert exc_info.value.error_code == "ERR_LEDGER_WRITE_FAILED"
    assert isinstance(exc_info.value.__cause__, SQLAlchemyError)
    assert await balance_of(account.id) == Decimal("10.00")

    async with database.session() as session:
        count = (await session.execute(select(func.count(Transaction.id)))).scalar_one()
    assert count == 0


async def test_agent_profile_degrades_when_redis_is_down():
    store = AgentProfileStore(BrokenRedis())

    assert await store.get("some-document") == {}
    assert await store.delete("some-document") is False


async def test_token_revocation_fails_open_when_redis_is_down():
    redis_client = BrokenRedis()

    assert await revoke_token(redis_client, "token", 1) is False
    assert await is_token_revoked(redis_client, "token") is False


async def test_unhandled_app_error_returns_opaque_body(client, make_account, auth_headers, mocker):
    sender = await make_account("sender@example.com", balance="10.00")
    await make_account("recipient@example.com", pix_keys=["recipient@pix"])
    mocker.patch.object(TransactionLog, "create", side_effect=SQLAlchemyError("secret database detail"))

    response = await client.post(
        "/v1/transfers/pix",
        json={"recipient_pix_key": "recipient@pix", "amount": "1.00"},
        headers=auth_headers(sender),
    )

    assert response.status_code == 500
    body = response.json()
    assert body["error_code"] == "ERR_TRANSFER_FAILED"
    assert "secret" not in response.text


async def test_agent_profile_save_raises_typed_error_when_redis_is_down():
    store = AgentProfileStore(BrokenRedis())

    with pytest.raises(AgentProfileUnavailableError) as exc_info:
        await store.save({"persona": "saver"})

    assert isinstance(exc_info.value.__cause__, ConnectionError)


async def test_profile_update_with_agent_fails_cleanly_when_redis_is_down(
    app, client, database, make_account, auth_headers
):
    account = await make_account("agentless@example.com", name="Before")
    app.state.redis = BrokenRedis()

    response = await client.patch(
        "/v1/accounts/me",
        json={"name": "After", "agent": {"persona": "saver"}},
        headers=auth_headers(account),
    )

    assert response.status_code == 503
    assert response.json()["error_code"] == "ERR_AGENT_PROFILE_UNAVAILABLE"
    async with database.session() as session:
        stored = await AccountStore(session).find_by_id(account.id)
    assert stored.name == "Before"
    assert stored.agent_document_id is None


async def test_failed_registration_leaves_no_agent_document(client, redis_client, make_account):
    await make_account("taken@example.com")

    response = await client.post(
        "/v1/auth/register",
        json={"name": "Late", "email": "taken@example.com", "password": "password123", "agent": {"x": 1}},
    )

    assert response.status_code == 409
    assert not [key for key in redis_client.store if key.startswith("agent:profile:")]


async def test_failed_profile_update_removes_new_agent_document(client, redis_client, make_account, auth_headers):
    await make_account("taken@example.com")
    account = await make_account("mover@example.com")

    response = await client.patch(
        "/v1/accounts/me",
        json={"email": "taken@example.com", "agent": {"x": 1}},
        headers=auth_headers(account),
    )

    assert response.status_code == 409
    assert not [key for key in redis_client.store if key.startswith("agent:profile:")]

"""
Centralized Test Configuration.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport

from pixledger.app.main import create_app
from pixledger.app.core.jwt import create_access_token
from pixledger.app.core.security import get_password_hash
from pixledger.app.db.session import Database
from pixledger.app.domain.ledger.account_locks import AccountLockRegistry
from pixledger.app.models.enums import AccountType
from pixledger.app.services.account_store import AccountStore


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}
        self._closed = False

    async def ping(self):
        if self._closed:
            return False
        return True

    async def get(self, key):
        if self._closed:
            return None
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        if self._closed:
            return False
        self.store[key] = value
        return True

    async def setex(self, key, ttl, value):
        return await self.set(key, value, ex=ttl)

    async def delete(self, key):
        if self._closed:
            return 0
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def exists(self, key):
        if self._closed:
            return 0
        return 1 if key in self.store else 0

    async def flushdb(self):
        if not self._closed:
            self.store = {}

    async def aclose(self):
        self._closed = True
        self.store = {}


# File-backed SQLite: concurrent sessions get their own connections
@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'pixledger_test.db'}")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
def redis_client():
    return MockRedis()


@pytest.fixture
def locks():
    return AccountLockRegistry()


@pytest.fixture
def app(database, redis_client):
    return create_app(database=database, redis_client=redis_client)


@pytest.fixture
async def client(app):
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def make_account(database):
    """Factory creating a committed account, optionally with PIX keys."""

    async def _make(
        email,
        balance="0.00",
        name=None,
        pix_keys=(),
        account_type=AccountType.NORMAL,
        password="secret123",
    ):
        async with database.session() as session:
            store = AccountStore(session)
            account = await store.create(
                name=name or email.split("@")[0].title(),
                email=email,
                password_hash=get_password_hash(password),
                account_type=account_type,
                balance=Decimal(balance),
            )
            for key in pix_keys:
                await store.add_pix_key(account.id, key)
            await session.commit()
            return account

    return _make


@pytest.fixture
def auth_headers():
    def _headers(account):
        token = create_access_token(account.id, account.email, account.type)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def balance_of(database):
    """Read an account balance through a fresh session."""

    async def _balance(account_id):
        async with database.session() as session:
            account = await AccountStore(session).find_by_id(account_id)
            return account.balance

    return _balance

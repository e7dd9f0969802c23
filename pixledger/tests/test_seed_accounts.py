"""
Seeding script tests.
"""

from decimal import Decimal

from pixledger.app.models.enums import AccountType
from pixledger.app.services.account_store import AccountStore
from pixledger.seed_accounts import seed_accounts


async def test_seed_accounts_is_idempotent(database, balance_of):
    assert await seed_accounts(database) is True
    assert await seed_accounts(database) is False

    async with database.session() as session:
        store = AccountStore(session)
        accounts = await store.list_all()
        admin = await store.find_by_email("admin@pixledger.dev")
        alice = await store.find_by_pix_key("+5511900000001")

    assert len(accounts) == 3
    assert admin.type == AccountType.ADMIN
    assert await balance_of(alice.id) == Decimal("500.00")

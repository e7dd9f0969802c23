"""
Database seeding script for initial accounts.

Creates an ADMIN account and two funded NORMAL accounts with PIX keys for
testing and development. Run this script after the database is reachable.
"""

import asyncio
from decimal import Decimal

from pixledger.app.core.config import settings
from pixledger.app.core.security import get_password_hash
from pixledger.app.db.session import Database
from pixledger.app.domain.ledger.account_locks import AccountLockRegistry
from pixledger.app.domain.ledger.ledger_service import LedgerService
from pixledger.app.models.enums import AccountType, TransactionType
from pixledger.app.services.account_store import AccountStore

SEED_ACCOUNTS = [
    # email, name, password, type, opening deposit, pix keys
    ("admin@pixledger.dev", "Admin", "admin123", AccountType.ADMIN, Decimal("0.00"), []),
    ("alice@pixledger.dev", "Alice", "alice123", AccountType.NORMAL, Decimal("500.00"), ["alice@pixledger.dev", "+5511900000001"]),
    ("bob@pixledger.dev", "Bob", "bob12345", AccountType.NORMAL, Decimal("250.00"), ["bob@pixledger.dev"]),
]


async def seed_accounts(database: Database) -> bool:
    """
    Seed initial accounts.

    Opening balances are recorded as CREDIT entries so every balance matches
    its ledger. Returns False when the ADMIN account already exists.
    """
    async with database.session() as db:
        print("🌱 Starting account seeding...")

        store = AccountStore(db)
        if await store.find_by_email("admin@pixledger.dev") is not None:
            print("ℹ️  ADMIN account already exists, skipping seeding")
            return False

        created = []
        for email, name, password, account_type, _, pix_keys in SEED_ACCOUNTS:
            account = await store.create(
                name=name,
                email=email,
                password_hash=get_password_hash(password),
                account_type=account_type,
            )
            for key in pix_keys:
                await store.add_pix_key(account.id, key)
            created.append(account)
            print(f"✅ Created {account_type.value} account ({email} / {password})")

        await db.commit()

    ledger = LedgerService(database, AccountLockRegistry())
    for account, (_, _, _, _, deposit, _) in zip(created, SEED_ACCOUNTS):
        if deposit > 0:
            await ledger.record_entry(account.id, TransactionType.CREDIT, deposit, details="Opening deposit")
            print(f"💰 Deposited {deposit} into {account.email}")

    print("\n🎉 Account seeding completed successfully!")
    return True


async def main():
    database = Database(settings.database_url, echo=settings.db_echo)
    try:
        await database.create_all()
        await seed_accounts(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())

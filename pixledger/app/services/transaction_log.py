"""
Transaction log.

Append-only ledger of DEBIT/CREDIT entries. Rows are created and read here;
the only mutation after insert is the details/category edit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixledger.app.core.exceptions import InvalidInputError
from pixledger.app.core.money import quantize_money
from pixledger.app.db.types import utcnow
from pixledger.app.models.enums import TransactionCategory, TransactionType
from pixledger.app.models.transaction import Transaction

logger = logging.getLogger(__name__)


@dataclass
class LedgerEntryDraft:
    """A ledger entry that has not been written yet."""

    type: TransactionType
    amount: Decimal
    account_id: int
    details: Optional[str] = None
    category: TransactionCategory = TransactionCategory.OTHER
    date: datetime = field(default_factory=utcnow)


class TransactionLog:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: LedgerEntryDraft) -> Transaction:
        """
        Append an entry to the ledger.

        Flushes so the returned row carries its id, but does not commit.

        Raises:
            InvalidInputError: If the amount is not strictly positive
        """
        if entry.amount is None or entry.amount <= 0:
            raise InvalidInputError("Ledger entry amount must be positive", details={"amount": str(entry.amount)})

        transaction = Transaction(
            type=entry.type,
            amount=quantize_money(entry.amount),
            account_id=entry.account_id,
            details=entry.details,
            category=entry.category,
            date=entry.date,
        )
        self.session.add(transaction)
        await self.session.flush()

        logger.debug(
            "Ledger entry %s written: %s %s on account %s",
            transaction.id, entry.type.value, transaction.amount, entry.account_id,
        )
        return transaction

    async def find_by_id(self, transaction_id: int) -> Optional[Transaction]:
        result = await self.session.execute(select(Transaction).where(Transaction.id == transaction_id))
        return result.scalar_one_or_none()

    async def find_by_account_id(self, account_id: int) -> List[Transaction]:
        """Entries of one account, newest first."""
        result = await self.session.execute(
            select(Transaction)
            .where(Transaction.account_id == account_id)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        return list(result.scalars().all())

    async def update_details(
        self,
        transaction: Transaction,
        details: Optional[str] = None,
        category: Optional[TransactionCategory] = None,
    ) -> Transaction:
        """
        Edit the descriptive fields of an entry.

        Amount, type and account are not editable through any path.
        """
        if details is not None:
            transaction.details = details
        if category is not None:
            transaction.category = category
        await self.session.flush()
        return transaction

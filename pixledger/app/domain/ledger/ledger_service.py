"""
Ledger Service (Domain Logic).

Direct ledger entries: a deposit is a CREDIT, a withdrawal a DEBIT. The
balance change and the ledger row are written in one unit of work, so the
balance of an account always equals the sum of its entries.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from pixledger.app.core.exceptions import (
    AppException,
    InsufficientFundsError,
    InsufficientPermissionsError,
    InvalidInputError,
    LedgerWriteError,
    ResourceNotFoundError,
)
from pixledger.app.core.money import has_sub_cent_precision, quantize_money, to_decimal
from pixledger.app.db.session import Database
from pixledger.app.domain.ledger.account_locks import AccountLockRegistry
from pixledger.app.models.enums import TransactionCategory, TransactionType
from pixledger.app.models.transaction import Transaction
from pixledger.app.services.account_store import AccountStore
from pixledger.app.services.audit import AuditAction, log_event
from pixledger.app.services.transaction_log import LedgerEntryDraft, TransactionLog

logger = logging.getLogger(__name__)


def validate_amount(amount: Any) -> Decimal:
    """
    Parse a monetary amount: strictly positive, whole cents.

    Raises:
        InvalidInputError: If the amount is not a number, not positive, or
            has more than two decimal places
    """
    if amount is None:
        raise InvalidInputError("Amount is required")
    try:
        value = to_decimal(amount)
    except ValueError:
        raise InvalidInputError("Amount must be a number", details={"amount": str(amount)})
    if value <= 0:
        raise InvalidInputError("Amount must be positive", details={"amount": str(value)})
    if has_sub_cent_precision(value):
        raise InvalidInputError("Amount has more than two decimal places", details={"amount": str(value)})
    return quantize_money(value)


class LedgerService:

    def __init__(self, database: Database, locks: AccountLockRegistry):
        self.database = database
        self.locks = locks

    async def record_entry(
        self,
        account_id: int,
        entry_type: TransactionType,
        amount: Any,
        details: Optional[str] = None,
        category: TransactionCategory = TransactionCategory.OTHER,
    ) -> Transaction:
        """
        Record a deposit (CREDIT) or withdrawal (DEBIT) on one account.

        Raises:
            InvalidInputError: Bad amount or entry type
            ResourceNotFoundError: Unknown account
            InsufficientFundsError: Withdrawal larger than the locked balance
            LedgerWriteError: The write could not be committed (rolled back)
        """
        value = validate_amount(amount)
        try:
            entry_type = TransactionType(entry_type)
        except ValueError:
            raise InvalidInputError("Invalid transaction type", details={"type": str(entry_type)})

        async with self.locks.acquire(account_id):
            async with self.database.unit_of_work() as uow:
                accounts = AccountStore(uow.session)
                locked = await accounts.lock_for_update([account_id])
                account = locked.get(account_id)
                if account is None:
                    raise ResourceNotFoundError("Account", account_id)

                if entry_type == TransactionType.DEBIT:
                    if account.balance < value:
                        logger.warning(
                            "Withdrawal of %s rejected for account %s: insufficient funds",
                            value, account_id,
                        )
                        raise InsufficientFundsError(account_id)
                    new_balance = account.balance - value
                else:
                    new_balance = account.balance + value

                try:
                    await accounts.update_balance(account_id, new_balance)
                    transaction = await TransactionLog(uow.session).create(
                        LedgerEntryDraft(
                            type=entry_type,
                            amount=value,
                            account_id=account_id,
                            details=details,
                            category=category,
                        )
                    )
                    await log_event(
                        uow.session,
                        AuditAction.LEDGER_ENTRY_RECORDED,
                        actor_id=account_id,
                        actor_email=account.email,
                        target_account_id=account_id,
                        metadata={
                            "transaction_id": transaction.id,
                            "type": entry_type.value,
                            "amount": str(value),
                        },
                    )
                    await uow.commit()
                except AppException:
                    await uow.rollback()
                    raise
                except Exception as exc:
                    await uow.rollback()
                    logger.exception("Ledger entry for account %s failed, rolled back", account_id)
                    raise LedgerWriteError(exc) from exc

        logger.info(
            "Ledger entry %s recorded: %s %s on account %s",
            transaction.id, entry_type.value, value, account_id,
        )
        return transaction

    async def edit_entry(
        self,
        owner_id: int,
        transaction_id: int,
        details: Optional[str] = None,
        category: Optional[TransactionCategory] = None,
    ) -> Transaction:
        """
        Edit the details and/or category of one of the owner's entries.

        Raises:
            ResourceNotFoundError: Unknown transaction
            InsufficientPermissionsError: Transaction belongs to another account
        """
        async with self.database.unit_of_work() as uow:
            log = TransactionLog(uow.session)
            transaction = await log.find_by_id(transaction_id)
            if transaction is None:
                raise ResourceNotFoundError("Transaction", transaction_id)
            if transaction.account_id != owner_id:
                raise InsufficientPermissionsError(
                    "You do not own this transaction",
                    details={"transaction_id": transaction_id},
                )

            await log.update_details(transaction, details=details, category=category)
            await uow.commit()

        return transaction

"""
Transfer Engine (Domain Logic).

Moves money between two accounts addressed by a PIX key. One transfer is one
unit of work:

1. Validate input (sender id, alias, amount)
2. Resolve sender and recipient
3. Lock both accounts (ascending id) and re-read their balances
4. Check solvency against the locked balance
5. Debit sender, credit recipient
6. Append the DEBIT and CREDIT ledger entries and an audit row
7. Commit

Everything from step 5 on either commits together or not at all.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pixledger.app.core.exceptions import (
    InsufficientFundsError,
    InvalidInputError,
    PixKeyNotFoundError,
    SelfTransferError,
    SenderNotFoundError,
    TransferFailedError,
)
from pixledger.app.db.session import Database
from pixledger.app.db.types import utcnow
from pixledger.app.domain.ledger.account_locks import AccountLockRegistry
from pixledger.app.domain.ledger.ledger_service import validate_amount
from pixledger.app.models.enums import TransactionCategory, TransactionType
from pixledger.app.services.account_store import AccountStore
from pixledger.app.services.audit import AuditAction, log_event
from pixledger.app.services.transaction_log import LedgerEntryDraft, TransactionLog

logger = logging.getLogger(__name__)


@dataclass
class TransferResult:
    from_account_id: int
    to_account_id: int
    amount: Decimal
    description: Optional[str]
    debit_transaction_id: int
    credit_transaction_id: int
    created_at: datetime


class TransferEngine:

    def __init__(self, database: Database, locks: AccountLockRegistry):
        self.database = database
        self.locks = locks

    async def transfer_by_alias(
        self,
        sender_id: Any,
        recipient_alias: Optional[str],
        amount: Any,
        description: Optional[str] = None,
    ) -> TransferResult:
        """
        Transfer `amount` from `sender_id` to the owner of `recipient_alias`.

        Raises:
            InvalidInputError: Bad sender id, empty alias or bad amount
            SenderNotFoundError: Sender account does not exist
            PixKeyNotFoundError: Alias does not resolve to an account
            SelfTransferError: Alias belongs to the sender
            InsufficientFundsError: Locked sender balance is below `amount`
            TransferFailedError: Writing the transfer failed; nothing was persisted
        """
        if isinstance(sender_id, bool) or not isinstance(sender_id, int) or sender_id <= 0:
            raise InvalidInputError("Invalid sender id", details={"sender_id": str(sender_id)})

        alias = recipient_alias.strip() if isinstance(recipient_alias, str) else ""
        if not alias:
            raise InvalidInputError("Recipient PIX key is required")

        value = validate_amount(amount)

        logger.info("Transfer of %s from account %s to PIX key %s started", value, sender_id, alias)

        async with self.database.unit_of_work() as uow:
            accounts = AccountStore(uow.session)

            sender = await accounts.find_by_id(sender_id)
            if sender is None:
                logger.warning("Transfer rejected: sender %s not found", sender_id)
                raise SenderNotFoundError(sender_id)

            recipient = await accounts.find_by_pix_key(alias)
            if recipient is None:
                logger.warning("Transfer rejected: PIX key %s not found", alias)
                raise PixKeyNotFoundError(alias)

            if recipient.id == sender.id:
                logger.warning("Transfer rejected: account %s tried to pay itself", sender_id)
                raise SelfTransferError(sender_id)

            async with self.locks.acquire(sender.id, recipient.id):
                locked = await accounts.lock_for_update([sender.id, recipient.id])
                sender = locked.get(sender.id)
                recipient = locked.get(recipient.id)
                if sender is None:
                    raise SenderNotFoundError(sender_id)
                if recipient is None:
                    raise PixKeyNotFoundError(alias)

                sender_id, recipient_id = sender.id, recipient.id

                if sender.balance < value:
                    logger.warning(
                        "Transfer rejected: account %s has insufficient funds for %s",
                        sender_id, value,
                    )
                    raise InsufficientFundsError(sender_id)

                try:
                    await accounts.update_balance(sender.id, sender.balance - value)
                    await accounts.update_balance(recipient.id, recipient.balance + value)

                    created_at = utcnow()
                    log = TransactionLog(uow.session)
                    debit = await log.create(
                        LedgerEntryDraft(
                            type=TransactionType.DEBIT,
                            amount=value,
                            account_id=sender.id,
                            details=description or f"PIX transfer to {recipient.name}",
                            category=TransactionCategory.OTHER,
                            date=created_at,
                        )
                    )
                    credit = await log.create(
                        LedgerEntryDraft(
                            type=TransactionType.CREDIT,
                            amount=value,
                            account_id=recipient.id,
                            details=description or f"PIX transfer from {sender.name}",
                            category=TransactionCategory.OTHER,
                            date=created_at,
                        )
                    )
                    await log_event(
                        uow.session,
                        AuditAction.TRANSFER_COMPLETED,
                        actor_id=sender.id,
                        actor_email=sender.email,
                        target_account_id=recipient.id,
                        metadata={
                            "amount": str(value),
                            "pix_key": alias,
                            "debit_transaction_id": debit.id,
                            "credit_transaction_id": credit.id,
                        },
                    )
                    await uow.commit()
                except Exception as exc:
                    await uow.rollback()
                    # rollback expired the ORM rows; only plain values from here on
                    logger.exception(
                        "Transfer of %s from account %s to account %s failed, rolled back",
                        value, sender_id, recipient_id,
                    )
                    raise TransferFailedError(exc) from exc

        logger.info(
            "Transfer of %s from account %s to account %s completed (debit=%s, credit=%s)",
            value, sender_id, recipient_id, debit.id, credit.id,
        )
        return TransferResult(
            from_account_id=sender_id,
            to_account_id=recipient_id,
            amount=value,
            description=description,
            debit_transaction_id=debit.id,
            credit_transaction_id=credit.id,
            created_at=created_at,
        )

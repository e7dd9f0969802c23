"""
Ledger API endpoints.

Read the caller's ledger, record deposits and withdrawals, and edit the
descriptive fields of an entry. Entries are never deleted.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from pixledger.app.db.session import get_db
from pixledger.app.schemas.transaction import TransactionCreate, TransactionResponse, TransactionUpdate
from pixledger.app.core.dependencies import get_current_user, get_ledger_service
from pixledger.app.core.exceptions import ResourceNotFoundError
from pixledger.app.core.guards import ownership_guard
from pixledger.app.domain.ledger.ledger_service import LedgerService
from pixledger.app.services.transaction_log import TransactionLog

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=List[TransactionResponse])
async def list_my_transactions(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's ledger, newest first."""
    return await TransactionLog(db).find_by_account_id(current_user["account_id"])


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    transaction = await TransactionLog(db).find_by_id(transaction_id)
    if transaction is None:
        raise ResourceNotFoundError("Transaction", transaction_id)

    ownership_guard.enforce(transaction.account_id, current_user, "transaction")
    return transaction


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def record_transaction(
    entry: TransactionCreate,
    current_user: dict = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """
    Record a deposit (CREDIT) or withdrawal (DEBIT) on the caller's account.

    The balance moves in the same database transaction as the entry.
    """
    return await ledger.record_entry(
        account_id=current_user["account_id"],
        entry_type=entry.type,
        amount=entry.amount,
        details=entry.details,
        category=entry.category,
    )


@router.patch("/{transaction_id}", response_model=TransactionResponse)
async def edit_transaction(
    transaction_id: int,
    update_data: TransactionUpdate,
    current_user: dict = Depends(get_current_user),
    ledger: LedgerService = Depends(get_ledger_service)
):
    """Edit details and/or category. Amount, type and account cannot change."""
    return await ledger.edit_entry(
        owner_id=current_user["account_id"],
        transaction_id=transaction_id,
        details=update_data.details,
        category=update_data.category,
    )

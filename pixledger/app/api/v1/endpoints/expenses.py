"""
Expense API endpoints.

Scheduled expenses of the caller's account.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pixledger.app.db.session import get_db
from pixledger.app.models.enums import ExpenseStatus
from pixledger.app.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from pixledger.app.core.dependencies import get_current_user
from pixledger.app.services.expense_scheduler import ExpenseScheduler

router = APIRouter(prefix="/expenses", tags=["Expenses"])


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    status_filter: Optional[ExpenseStatus] = Query(None, alias="status"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's expenses, latest execution date first, optionally filtered by status."""
    return await ExpenseScheduler(db).list_for_account(current_user["account_id"], status=status_filter)


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_data: ExpenseCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ExpenseScheduler(db).create(current_user["account_id"], **expense_data.model_dump())


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ExpenseScheduler(db).get(current_user["account_id"], expense_id)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: int,
    update_data: ExpenseUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ExpenseScheduler(db).update(
        current_user["account_id"], expense_id, update_data.model_dump(exclude_unset=True)
    )


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ExpenseScheduler(db).delete(current_user["account_id"], expense_id)

"""
Expense scheduler.

CRUD over an account's scheduled expenses. Every operation is scoped to the
owner: an expense that belongs to someone else is a permission error, not a
lookup miss. Nothing here moves money.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixledger.app.core.exceptions import (
    InsufficientPermissionsError,
    InvalidInputError,
    ResourceNotFoundError,
)
from pixledger.app.core.money import has_sub_cent_precision, quantize_money, to_decimal
from pixledger.app.models.enums import ExpenseStatus
from pixledger.app.models.expense import Expense

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = {"is_recurring", "is_active", "amount", "description", "execution_date", "status"}


def _validate_amount(amount: Any) -> Decimal:
    try:
        value = to_decimal(amount)
    except ValueError:
        raise InvalidInputError("Expense amount must be a number", details={"amount": str(amount)})
    if value <= 0:
        raise InvalidInputError("Expense amount must be positive", details={"amount": str(value)})
    if has_sub_cent_precision(value):
        raise InvalidInputError("Expense amount has more than two decimal places", details={"amount": str(value)})
    return quantize_money(value)


def _validate_description(description: Optional[str]) -> str:
    if description is None or not description.strip():
        raise InvalidInputError("Expense description is required")
    return description.strip()


def _validate_status(status: Any) -> ExpenseStatus:
    try:
        return ExpenseStatus(status)
    except ValueError:
        raise InvalidInputError(
            "Invalid expense status",
            details={"status": str(status), "allowed": [s.value for s in ExpenseStatus]},
        )


class ExpenseScheduler:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_owned(self, owner_id: int, expense_id: int) -> Expense:
        expense = await self.session.get(Expense, expense_id)
        if expense is None:
            raise ResourceNotFoundError("Expense", expense_id)
        if expense.account_id != owner_id:
            raise InsufficientPermissionsError(
                "You do not own this expense",
                details={"expense_id": expense_id},
            )
        return expense

    async def create(
        self,
        owner_id: int,
        amount: Any,
        description: str,
        execution_date: datetime,
        is_recurring: bool = False,
        is_active: bool = True,
        status: Any = ExpenseStatus.PENDING,
    ) -> Expense:
        """Schedule a new expense for `owner_id`."""
        if execution_date is None:
            raise InvalidInputError("Expense execution date is required")

        expense = Expense(
            account_id=owner_id,
            amount=_validate_amount(amount),
            description=_validate_description(description),
            execution_date=execution_date,
            is_recurring=bool(is_recurring),
            is_active=bool(is_active),
            status=_validate_status(status),
        )
        self.session.add(expense)
        await self.session.commit()

        logger.info("Expense %s scheduled for account %s", expense.id, owner_id)
        return expense

    async def get(self, owner_id: int, expense_id: int) -> Expense:
        return await self._get_owned(owner_id, expense_id)

    async def list_for_account(self, owner_id: int, status: Optional[Any] = None) -> List[Expense]:
        """Expenses of one account, latest execution date first."""
        query = select(Expense).where(Expense.account_id == owner_id)
        if status is not None:
            query = query.where(Expense.status == _validate_status(status))
        query = query.order_by(Expense.execution_date.desc(), Expense.id.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, owner_id: int, expense_id: int, changes: Dict[str, Any]) -> Expense:
        """
        Apply a partial update.

        Only keys present in `changes` are touched; `None` values are skipped.
        The owning account cannot be changed.
        """
        expense = await self._get_owned(owner_id, expense_id)

        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError("Unknown expense fields", details={"fields": sorted(unknown)})

        for name, value in changes.items():
            if value is None:
                continue
            if name == "amount":
                value = _validate_amount(value)
            elif name == "description":
                value = _validate_description(value)
            elif name == "status":
                value = _validate_status(value)
            setattr(expense, name, value)

        await self.session.commit()
        return expense

    async def delete(self, owner_id: int, expense_id: int) -> None:
        expense = await self._get_owned(owner_id, expense_id)
        await self.session.delete(expense)
        await self.session.commit()
        logger.info("Expense %s deleted by account %s", expense_id, owner_id)

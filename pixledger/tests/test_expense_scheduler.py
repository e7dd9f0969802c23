"""
Expense scheduler tests: validation and ownership.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from pixledger.app.core.exceptions import (
    InsufficientPermissionsError,
    InvalidInputError,
    ResourceNotFoundError,
)
from pixledger.app.models.enums import ExpenseStatus
from pixledger.app.services.expense_scheduler import ExpenseScheduler

WHEN = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


async def test_create_defaults_to_pending(db_session, make_account):
    owner = await make_account("owner@example.com")

    expense = await ExpenseScheduler(db_session).create(owner.id, Decimal("120.00"), "Rent", WHEN, is_recurring=True)

    assert expense.id is not None
    assert expense.account_id == owner.id
    assert expense.status == ExpenseStatus.PENDING
    assert expense.is_recurring is True
    assert expense.is_active is True
    assert expense.amount == Decimal("120.00")


@pytest.mark.parametrize("amount,description,status", [
    (Decimal("0"), "Rent", ExpenseStatus.PENDING),
    (Decimal("-10"), "Rent", ExpenseStatus.PENDING),
    (Decimal("1.234"), "Rent", ExpenseStatus.PENDING),
    (Decimal("10"), "   ", ExpenseStatus.PENDING),
    (Decimal("10"), None, ExpenseStatus.PENDING),
    (Decimal("10"), "Rent", "CANCELLED"),
])
async def test_create_validation(db_session, make_account, amount, description, status):
    owner = await make_account("owner@example.com")

    with pytest.raises(InvalidInputError):
        await ExpenseScheduler(db_session).create(owner.id, amount, description, WHEN, status=status)


async def test_list_is_scoped_to_owner_and_ordered(db_session, make_account):
    owner = await make_account("owner@example.com")
    other = await make_account("other@example.com")
    scheduler = ExpenseScheduler(db_session)

    early = await scheduler.create(owner.id, Decimal("1.00"), "Early", WHEN)
    late = await scheduler.create(owner.id, Decimal("2.00"), "Late", WHEN + timedelta(days=5))
    await scheduler.create(other.id, Decimal("3.00"), "Not mine", WHEN)

    expenses = await scheduler.list_for_account(owner.id)

    assert [e.id for e in expenses] == [late.id, early.id]


async def test_list_filters_by_status(db_session, make_account):
    owner = await make_account("owner@example.com")
    scheduler = ExpenseScheduler(db_session)

    await scheduler.create(owner.id, Decimal("1.00"), "Pending", WHEN)
    done = await scheduler.create(owner.id, Decimal("2.00"), "Done", WHEN, status=ExpenseStatus.SUCCESS)

    expenses = await scheduler.list_for_account(owner.id, status="SUCCESS")

    assert [e.id for e in expenses] == [done.id]


async def test_other_account_cannot_read_update_or_delete(db_session, make_account):
    owner = await make_account("owner@example.com")
    intruder = await make_account("intruder@example.com")
    scheduler = ExpenseScheduler(db_session)
    expense = await scheduler.create(owner.id, Decimal("5.00"), "Gym", WHEN)

    with pytest.raises(InsufficientPermissionsError):
        await scheduler.get(intruder.id, expense.id)
    with pytest.raises(InsufficientPermissionsError):
        await scheduler.update(intruder.id, expense.id, {"amount": Decimal("1.00")})
    with pytest.raises(InsufficientPermissionsError):
        await scheduler.delete(intruder.id, expense.id)

    assert (await scheduler.get(owner.id, expense.id)).amount == Decimal("5.00")


async def test_missing_expense(db_session, make_account):
    owner = await make_account("owner@example.com")

    with pytest.raises(ResourceNotFoundError):
        await ExpenseScheduler(db_session).get(owner.id, 777)


async def test_update_applies_partial_changes(db_session, make_account):
    owner = await make_account("owner@example.com")
    scheduler = ExpenseScheduler(db_session)
    expense = await scheduler.create(owner.id, Decimal("5.00"), "Gym", WHEN)

    updated = await scheduler.update(owner.id, expense.id, {"status": "FAILED", "description": "Gym (annual)"})

    assert updated.status == ExpenseStatus.FAILED
    assert updated.description == "Gym (annual)"
    assert updated.amount == Decimal("5.00")


async def test_update_validates_and_rejects_unknown_fields(db_session, make_account):
    owner = await make_account("owner@example.com")
    scheduler = ExpenseScheduler(db_session)
    expense = await scheduler.create(owner.id, Decimal("5.00"), "Gym", WHEN)

    with pytest.raises(InvalidInputError):
        await scheduler.update(owner.id, expense.id, {"amount": Decimal("-1")})
    with pytest.raises(InvalidInputError):
        await scheduler.update(owner.id, expense.id, {"account_id": 999})


async def test_delete(db_session, make_account):
    owner = await make_account("owner@example.com")
    scheduler = ExpenseScheduler(db_session)
    expense = await scheduler.create(owner.id, Decimal("5.00"), "Gym", WHEN)

    await scheduler.delete(owner.id, expense.id)

    with pytest.raises(ResourceNotFoundError):
        await scheduler.get(owner.id, expense.id)

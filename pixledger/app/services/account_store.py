"""
Account store.

Data access for accounts and their PIX keys. Every method works on the
session it was constructed with and only flushes, never commits: callers
decide the transaction boundary (a request session or a unit of work).
"""

import logging
import re
import uuid
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pixledger.app.core.exceptions import DuplicateEmailError, DuplicatePixKeyError
from pixledger.app.core.money import ZERO, quantize_money
from pixledger.app.models.account import Account, PixKey
from pixledger.app.models.enums import AccountType, PixKeyType

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^\d+$")
_PHONE = re.compile(r"^\+\d{8,15}$")


def infer_pix_key_type(key: str) -> PixKeyType:
    """
    Guess the descriptive type of a PIX key from its shape.

    Only used when the caller did not say; the type is never validated.
    """
    if "@" in key:
        return PixKeyType.EMAIL
    if _PHONE.match(key):
        return PixKeyType.PHONE
    if _DIGITS.match(key) and len(key) in (11, 14):  # CPF / CNPJ
        return PixKeyType.DOCUMENT
    try:
        uuid.UUID(key)
        return PixKeyType.RANDOM
    except ValueError:
        return PixKeyType.OTHER


class AccountStore:

    def __init__(self, session: AsyncSession):
        self.session = session

    # Lookups

    async def find_by_id(self, account_id: int) -> Optional[Account]:
        result = await self.session.execute(select(Account).where(Account.id == account_id))
        return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[Account]:
        """Case-insensitive email lookup."""
        result = await self.session.execute(
            select(Account).where(func.lower(Account.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def find_by_pix_key(self, key: str) -> Optional[Account]:
        """Resolve a PIX key (exact match) to the account that owns it."""
        result = await self.session.execute(
            select(Account).join(PixKey, PixKey.account_id == Account.id).where(PixKey.key == key)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Account]:
        result = await self.session.execute(select(Account).order_by(Account.id))
        return list(result.scalars().all())

    async def lock_for_update(self, account_ids: Iterable[int]) -> Dict[int, Account]:
        """
        Re-read accounts with row locks, in ascending id order.

        `populate_existing` overwrites whatever the identity map already holds,
        so the balances returned are the ones committed before the lock was
        granted. On SQLite `FOR UPDATE` is not emitted; the in-process
        `AccountLockRegistry` provides the exclusion there.
        """
        ids = sorted(set(account_ids))
        result = await self.session.execute(
            select(Account)
            .where(Account.id.in_(ids))
            .order_by(Account.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {account.id: account for account in result.scalars().all()}

    # Mutations

    async def create(
        self,
        name: str,
        email: str,
        password_hash: str,
        account_type: AccountType = AccountType.NORMAL,
        balance: Decimal = ZERO,
        score: int = 0,
        configuration: Optional[Dict[str, Any]] = None,
        agent_document_id: Optional[str] = None,
    ) -> Account:
        """
        Insert a new account.

        Raises:
            DuplicateEmailError: If the email is already registered
        """
        email = email.strip().lower()
        if await self.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        account = Account(
            type=account_type,
            name=name.strip(),
            email=email,
            password_hash=password_hash,
            balance=quantize_money(balance),
            score=score,
            configuration=dict(configuration or {}),
            agent_document_id=agent_document_id,
            pix_keys=[],
        )
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent registration
            raise DuplicateEmailError(email) from exc
        return account

    async def update_profile(
        self,
        account: Account,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        configuration: Optional[Dict[str, Any]] = None,
        score: Optional[int] = None,
        account_type: Optional[AccountType] = None,
    ) -> Account:
        """
        Update non-financial account fields.

        There is deliberately no balance parameter: balances only move through
        `update_balance` inside a unit of work.
        """
        if name is not None:
            account.name = name.strip()
        if email is not None:
            email = email.strip().lower()
            existing = await self.find_by_email(email)
            if existing is not None and existing.id != account.id:
                raise DuplicateEmailError(email)
            account.email = email
        if password_hash is not None:
            account.password_hash = password_hash
        if configuration is not None:
            account.configuration = dict(configuration)
        if score is not None:
            account.score = score
        if account_type is not None:
            account.type = account_type
        await self.session.flush()
        return account

    async def update_balance(self, account_id: int, new_balance: Decimal) -> None:
        """
        Set an account balance.

        Unconditional: the caller has already computed and validated the new
        value while holding the account lock. The CHECK constraint still
        rejects a negative balance at flush time.
        """
        account = await self.session.get(Account, account_id)
        if account is None:
            raise LookupError(f"Account {account_id} vanished during balance update")
        account.balance = quantize_money(new_balance)
        await self.session.flush()

    async def delete(self, account: Account) -> None:
        """Delete an account; keys, ledger rows and expenses cascade."""
        await self.session.delete(account)
        await self.session.flush()

    # PIX keys

    async def add_pix_key(self, account_id: int, key: str, key_type: Optional[PixKeyType] = None) -> PixKey:
        """
        Register a PIX key for an account.

        Raises:
            DuplicatePixKeyError: If the key exists on any account, this one included
        """
        key = key.strip()
        existing = await self.session.execute(select(PixKey.id).where(PixKey.key == key))
        if existing.scalar_one_or_none() is not None:
            raise DuplicatePixKeyError(key)

        pix_key = PixKey(
            account_id=account_id,
            key=key,
            type=key_type or infer_pix_key_type(key),
        )
        self.session.add(pix_key)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # The UNIQUE index caught a concurrent insert of the same key
            raise DuplicatePixKeyError(key) from exc

        account = await self.session.get(Account, account_id)
        if account is not None:
            await self.session.refresh(account, attribute_names=["pix_keys"])
        return pix_key

    async def remove_pix_key(self, account_id: int, key: str) -> bool:
        """
        Remove a PIX key from an account.

        Returns:
            True if removed, False if this account has no such key
        """
        result = await self.session.execute(
            select(PixKey).where(PixKey.account_id == account_id, PixKey.key == key.strip())
        )
        pix_key = result.scalar_one_or_none()
        if pix_key is None:
            return False

        await self.session.delete(pix_key)
        await self.session.flush()

        account = await self.session.get(Account, account_id)
        if account is not None:
            await self.session.refresh(account, attribute_names=["pix_keys"])
        return True

    async def find_pix_key(self, key: str) -> Optional[PixKey]:
        result = await self.session.execute(select(PixKey).where(PixKey.key == key))
        return result.scalar_one_or_none()

    async def list_pix_keys(self, account_id: int) -> List[PixKey]:
        result = await self.session.execute(
            select(PixKey).where(PixKey.account_id == account_id).order_by(PixKey.id)
        )
        return list(result.scalars().all())

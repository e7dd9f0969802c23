"""
Per-account locks for the current process.

The read-balance / write-balance sequence of an account is a critical
section. Row locks (`SELECT ... FOR UPDATE`) cover it across processes on
PostgreSQL; this registry covers it inside one process, including on
backends that have no row locks.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List


class AccountLockRegistry:
    """
    One `asyncio.Lock` per account id.

    Locks are always taken in ascending id order, so two operations touching
    the same pair of accounts from opposite directions cannot deadlock.
    """

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        # tasks holding or waiting on each lock
        self._users: Dict[int, int] = {}

    def _checkout(self, account_id: int) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[account_id] = lock
        self._users[account_id] = self._users.get(account_id, 0) + 1
        return lock

    def _checkin(self, account_id: int) -> None:
        remaining = self._users[account_id] - 1
        if remaining:
            self._users[account_id] = remaining
        else:
            del self._users[account_id]
            del self._locks[account_id]

    @asynccontextmanager
    async def acquire(self, *account_ids: int) -> AsyncIterator[List[int]]:
        """
        Hold the locks of `account_ids` for the duration of the block.

        A lock is dropped from the registry once nobody holds or waits on it.
        """
        ordered = sorted(set(account_ids))
        checked_out: List[int] = []
        held: List[asyncio.Lock] = []
        try:
            for account_id in ordered:
                lock = self._checkout(account_id)
                checked_out.append(account_id)
                await lock.acquire()
                held.append(lock)
            yield ordered
        finally:
            for lock in reversed(held):
                lock.release()
            for account_id in reversed(checked_out):
                self._checkin(account_id)

    def is_locked(self, account_id: int) -> bool:
        lock = self._locks.get(account_id)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._locks)

"""Account Lock Manager

In-process mutual exclusion keyed by account id. Every ledger mutation runs
inside ``hold(...)`` for the accounts it touches so that read-modify-write
sequences on the same ledger never interleave.

Locks for several accounts are always taken in sorted id order, so two
transfers in opposite directions cannot deadlock.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

logger = logging.getLogger(__name__)


class LockTimeoutError(Exception):
    """Raised when an account lock could not be acquired in time"""

    def __init__(self, account_id: str, timeout: float):
        self.account_id = account_id
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout}s waiting for lock on account {account_id}")


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class AccountLockManager:
    """
    Per-account asyncio locks created on demand

    An entry is dropped as soon as no task holds or waits for it, so the
    table only ever contains accounts with operations in flight.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._entries: Dict[str, _Entry] = {}

    def _checkout(self, account_id: str) -> _Entry:
        entry = self._entries.get(account_id)
        if entry is None:
            entry = self._entries[account_id] = _Entry()
        entry.users += 1
        return entry

    def _checkin(self, account_id: str, entry: _Entry) -> None:
        entry.users -= 1
        if entry.users == 0:
            del self._entries[account_id]

    def is_locked(self, account_id: str) -> bool:
        entry = self._entries.get(account_id)
        return entry is not None and entry.lock.locked()

    @property
    def active_accounts(self) -> int:
        return len(self._entries)

    @asynccontextmanager
    async def hold(self, *account_ids: str) -> AsyncIterator[None]:
        """
        Hold the locks of all given accounts for the duration of the block

        Args:
            *account_ids: Accounts to lock (duplicates are collapsed)

        Raises:
            LockTimeoutError: If any lock is not acquired within self.timeout
        """
        ordered = sorted(set(account_ids))
        acquired: List[tuple] = []
        try:
            for account_id in ordered:
                entry = self._checkout(account_id)
                try:
                    if self.timeout is None:
                        await entry.lock.acquire()
                    else:
                        await asyncio.wait_for(entry.lock.acquire(), self.timeout)
                except asyncio.TimeoutError:
                    self._checkin(account_id, entry)
                    logger.warning(f"Lock wait on account {account_id} exceeded {self.timeout}s")
                    raise LockTimeoutError(account_id, self.timeout)
                except BaseException:
                    self._checkin(account_id, entry)
                    raise
                acquired.append((account_id, entry))
            yield
        finally:
            for account_id, entry in reversed(acquired):
                entry.lock.release()
                self._checkin(account_id, entry)

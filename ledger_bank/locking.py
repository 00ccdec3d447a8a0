"""
Per-account mutation locks.

Balance changes on one account are serialized by an exclusive lock keyed by
account number. Locks for several accounts are always taken in ascending
account number order, so two transfers between the same pair of accounts in
opposite directions cannot deadlock.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .errors import StoreTimeoutError


class _LockEntry:
    """A lock plus the number of threads holding or waiting on it."""

    __slots__ = ('lock', 'users')

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class AccountLockManager:
    """Hands out one exclusive lock per account number."""

    def __init__(self, timeout: float = 10.0):
        """
        Initialize the lock manager.

        Args:
            timeout: Seconds to wait for each account lock before giving up
        """
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._guard = threading.Lock()
        self._locks: Dict[str, _LockEntry] = {}

    def _checkout(self, account_number: str) -> _LockEntry:
        with self._guard:
            entry = self._locks.get(account_number)
            if entry is None:
                entry = self._locks[account_number] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, account_number: str) -> None:
        with self._guard:
            entry = self._locks[account_number]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[account_number]

    @contextmanager
    def hold(self, *account_numbers: str, timeout: Optional[float] = None) -> Iterator[None]:
        """
        Hold the locks for the given accounts for the duration of the block.

        Args:
            account_numbers: Accounts to lock; duplicates are locked once
            timeout: Per-lock wait in seconds, the manager default if omitted

        Raises:
            StoreTimeoutError: If a lock could not be acquired in time
        """
        wait = self.timeout if timeout is None else timeout
        held = []
        try:
            for account_number in sorted(set(account_numbers)):
                entry = self._checkout(account_number)
                if not entry.lock.acquire(timeout=wait):
                    self._checkin(account_number)
                    self.logger.warning(f"Timed out waiting for lock on account {account_number}")
                    raise StoreTimeoutError(
                        f"Timed out after {wait}s waiting for account {account_number}"
                    )
                held.append((account_number, entry))
            yield
        finally:
            for account_number, entry in reversed(held):
                entry.lock.release()
                self._checkin(account_number)

    def is_locked(self, account_number: str) -> bool:
        """Check if some thread currently holds the account's lock."""
        with self._guard:
            entry = self._locks.get(account_number)
            return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        """Number of accounts with a live lock entry."""
        with self._guard:
            return len(self._locks)

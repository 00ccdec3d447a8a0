"""
Storage interfaces for the account ledger.

Defines the contracts the ledger engine needs from its account and
transaction stores, and a thread-safe in-memory implementation used for
testing and embedding. The SQLite implementation lives in database.py.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from .errors import AccountNotFoundError, DuplicateAccountNumberError, StoreTimeoutError
from .models import Account, Transaction


class AccountStore(ABC):
    """Durable keyed storage for account records."""

    @abstractmethod
    def create_account(self, account: Account) -> Account:
        """
        Insert a new account.

        Raises:
            DuplicateAccountNumberError: If the account number is already taken
        """

    @abstractmethod
    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Fetch an account snapshot, or None if there is no such account."""

    @abstractmethod
    def update_account(self, account: Account) -> Account:
        """
        Replace the stored account with the given snapshot.

        Raises:
            AccountNotFoundError: If the account does not exist
        """

    @abstractmethod
    def delete_account(self, account_number: str) -> bool:
        """Delete an account. Returns False if it did not exist."""

    @abstractmethod
    def get_all_accounts(self) -> List[Account]:
        """Get all accounts."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Group the calls made inside the block into one store transaction (default no-op)."""
        yield


class TransactionStore(ABC):
    """Append-only storage for transaction records."""

    @abstractmethod
    def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        """Append a batch of records. Either all of them are stored or none."""

    def create_transaction(self, transaction: Transaction) -> Transaction:
        """Append a single record."""
        self.create_transactions([transaction])
        return transaction

    @abstractmethod
    def get_account_transactions(self, account_number: str) -> List[Transaction]:
        """Get records with the account as source or destination, oldest first."""


class InMemoryStore(AccountStore, TransactionStore):
    """
    In-memory account and transaction store.

    Account and Transaction are frozen, so the stored objects can be handed
    out directly without exposing stored state to mutation. Calls are
    serialized by one internal lock, which an atomic() block holds from start
    to finish. A call that cannot get it within `timeout` seconds raises
    StoreTimeoutError.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._accounts: Dict[str, Account] = {}
        self._transactions: List[Transaction] = []
        self._lock = threading.RLock()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        if not self._lock.acquire(timeout=self.timeout):
            self.logger.error("Timed out waiting for the in-memory store lock")
            raise StoreTimeoutError("Timed out waiting for the in-memory store")
        try:
            yield
        finally:
            self._lock.release()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Hold the store lock for the whole block so other threads never see a partial change."""
        with self._locked():
            yield

    def create_account(self, account: Account) -> Account:
        with self._locked():
            if account.account_number in self._accounts:
                raise DuplicateAccountNumberError(
                    f"Account {account.account_number} already exists"
                )
            self._accounts[account.account_number] = account
            return account

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        with self._locked():
            return self._accounts.get(account_number)

    def update_account(self, account: Account) -> Account:
        with self._locked():
            if account.account_number not in self._accounts:
                raise AccountNotFoundError(f"Account {account.account_number} does not exist")
            self._accounts[account.account_number] = account
            return account

    def delete_account(self, account_number: str) -> bool:
        with self._locked():
            return self._accounts.pop(account_number, None) is not None

    def get_all_accounts(self) -> List[Account]:
        with self._locked():
            return list(self._accounts.values())

    def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        with self._locked():
            self._transactions.extend(transactions)

    def get_account_transactions(self, account_number: str) -> List[Transaction]:
        with self._locked():
            return [txn for txn in self._transactions if txn.involves(account_number)]

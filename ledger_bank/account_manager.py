"""
Account manager for the account ledger.

This module contains the ledger engine: the business rules for accounts,
balances and the transaction log. Every balance change happens under the
affected accounts' locks. It is written together with its transaction
records, or rolled back.
"""

import logging
import random
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from .account_number import generate_account_number
from .errors import (
    AccountNotFoundError,
    DuplicateAccountNumberError,
    GenerationExhaustedError,
    InvalidAmountError,
    InvalidInputError,
    SameAccountError,
)
from .locking import AccountLockManager
from .models import Account, Amount, Transaction, TransactionType, ZERO, to_decimal
from .storage import AccountStore, TransactionStore


class AccountManager:
    """Manages bank account operations and business logic."""

    def __init__(self, account_store: AccountStore,
                 transaction_store: Optional[TransactionStore] = None,
                 lock_manager: Optional[AccountLockManager] = None,
                 max_generation_attempts: int = 5,
                 rng: Optional[random.Random] = None):
        """
        Initialize the ledger engine.

        Args:
            account_store: Store for account records
            transaction_store: Store for transaction records; defaults to
                account_store when one object implements both
            lock_manager: Per-account locks; a private manager if omitted
            max_generation_attempts: Account number collisions tolerated
                before create_account gives up
            rng: Random source for account numbers
        """
        self.accounts = account_store
        self.transactions = transaction_store if transaction_store is not None else account_store
        self.locks = lock_manager or AccountLockManager()
        self.max_generation_attempts = max_generation_attempts
        self.rng = rng or random.Random()
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, store, config) -> 'AccountManager':
        """Build an engine over one store object using a LedgerConfig."""
        return cls(
            store,
            store,
            lock_manager=AccountLockManager(timeout=config.lock_timeout),
            max_generation_attempts=config.max_generation_attempts,
        )

    @staticmethod
    def _clean_name(holder_name: str) -> str:
        if not isinstance(holder_name, str) or not holder_name.strip():
            raise InvalidInputError("Holder name cannot be blank")
        return holder_name.strip()

    @staticmethod
    def _positive_amount(amount: Amount, action: str) -> Decimal:
        value = to_decimal(amount)
        if value <= ZERO:
            raise InvalidAmountError(f"{action} amount must be positive")
        return value

    def _apply(self, changes: Sequence[Tuple[Account, Account]],
               records: Sequence[Transaction]) -> None:
        """
        Persist account changes and their transaction records as one unit.

        Args:
            changes: (before, after) snapshot pairs, written in order
            records: Transaction records appended after all changes

        If any write fails, every account already written is restored to its
        before snapshot and the original error is re-raised.
        """
        written: List[Account] = []
        try:
            for before, after in changes:
                self.accounts.update_account(after)
                written.append(before)
            self.transactions.create_transactions(records)
        except Exception:
            self._compensate(written)
            raise

    def _compensate(self, snapshots: List[Account]) -> None:
        """Restore accounts to earlier snapshots, newest change first."""
        for snapshot in reversed(snapshots):
            try:
                self.accounts.update_account(snapshot)
            except Exception:
                self.logger.exception(
                    f"Failed to roll back account {snapshot.account_number} "
                    f"to balance {snapshot.balance}"
                )
            else:
                self.logger.warning(
                    f"Rolled back account {snapshot.account_number} to balance {snapshot.balance}"
                )

    def generate_account_number(self, holder_name: str) -> str:
        """Generate a candidate account number."""
        return generate_account_number(holder_name, self.rng)

    def create_account(self, holder_name: str) -> Account:
        """
        Create a new account with a zero balance.

        Raises:
            InvalidInputError: If the name is blank or has fewer than 3 letters
            GenerationExhaustedError: If every generated number was taken
        """
        name = self._clean_name(holder_name)

        for attempt in range(1, self.max_generation_attempts + 1):
            account = Account(account_number=self.generate_account_number(name), holder_name=name)
            try:
                created = self.accounts.create_account(account)
            except DuplicateAccountNumberError:
                self.logger.warning(
                    f"Account number {account.account_number} already taken "
                    f"(attempt {attempt} of {self.max_generation_attempts})"
                )
                continue

            self.logger.info(f"Created account {created.account_number} for {name}")
            return created

        raise GenerationExhaustedError(
            f"Could not generate a unique account number for {name!r} "
            f"after {self.max_generation_attempts} attempts"
        )

    def get_account(self, account_number: str) -> Account:
        """Get account by account number."""
        account = self.accounts.get_account_by_number(account_number)
        if account is None:
            raise AccountNotFoundError(f"Account {account_number} does not exist")
        return account

    def get_balance(self, account_number: str) -> Decimal:
        """Get account balance."""
        return self.get_account(account_number).balance

    def deposit(self, account_number: str, amount: Amount) -> Account:
        """Deposit money to an account."""
        value = self._positive_amount(amount, "Deposit")

        with self.locks.hold(account_number), self.accounts.atomic():
            account = self.get_account(account_number)
            updated = account.deposited(value)
            self._apply(
                [(account, updated)],
                [Transaction(TransactionType.DEPOSIT, value, source_account=account_number)]
            )

        self.logger.info(f"Deposited {value} to {account_number}, balance {updated.balance}")
        return updated

    def withdraw(self, account_number: str, amount: Amount) -> Account:
        """Withdraw money from an account."""
        value = self._positive_amount(amount, "Withdrawal")

        with self.locks.hold(account_number), self.accounts.atomic():
            account = self.get_account(account_number)
            updated = account.withdrawn(value)
            self._apply(
                [(account, updated)],
                [Transaction(TransactionType.WITHDRAW, value, source_account=account_number)]
            )

        self.logger.info(f"Withdrew {value} from {account_number}, balance {updated.balance}")
        return updated

    def transfer(self, from_account: str, to_account: str, amount: Amount) -> None:
        """
        Transfer money between accounts.

        The source is debited and the destination credited as one unit. The
        log gets the WITHDRAW and DEPOSIT legs plus one TRANSFER record
        naming both accounts. Both accounts are checked before anything is
        written; a failed write rolls the other leg back.

        Raises:
            InvalidAmountError: If the amount is not positive
            SameAccountError: If both account numbers are equal
            AccountNotFoundError: If either account does not exist
            InsufficientBalanceError: If the source balance is too low
        """
        value = self._positive_amount(amount, "Transfer")
        if from_account == to_account:
            raise SameAccountError("Cannot transfer to the same account")

        with self.locks.hold(from_account, to_account), self.accounts.atomic():
            source = self.get_account(from_account)
            destination = self.get_account(to_account)
            debited = source.withdrawn(value)
            credited = destination.deposited(value)
            self._apply(
                [(source, debited), (destination, credited)],
                [
                    Transaction(TransactionType.WITHDRAW, value, source_account=from_account),
                    Transaction(TransactionType.DEPOSIT, value, source_account=to_account),
                    Transaction(TransactionType.TRANSFER, value,
                                source_account=from_account, destination_account=to_account),
                ]
            )

        self.logger.info(f"Transferred {value} from {from_account} to {to_account}")

    def update_holder_name(self, account_number: str, new_name: str) -> Account:
        """Change the holder name of an account."""
        name = self._clean_name(new_name)

        with self.locks.hold(account_number), self.accounts.atomic():
            account = self.get_account(account_number)
            updated = self.accounts.update_account(account.renamed(name))

        self.logger.info(f"Renamed holder of {account_number} to {name}")
        return updated

    def delete_account(self, account_number: str) -> None:
        """Delete an account. Its transaction history is kept."""
        with self.locks.hold(account_number), self.accounts.atomic():
            self.get_account(account_number)
            if not self.accounts.delete_account(account_number):
                raise AccountNotFoundError(f"Account {account_number} does not exist")

        self.logger.info(f"Deleted account {account_number}")

    def list_accounts(self) -> List[Account]:
        """Get all accounts."""
        return self.accounts.get_all_accounts()

    def transactions_for(self, account_number: str) -> List[Transaction]:
        """Get the account's transaction history, oldest first."""
        return self.transactions.get_account_transactions(account_number)

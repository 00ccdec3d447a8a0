"""
Database manager for the account ledger.

This module stores accounts and transactions in SQLite. Money is kept as
integer minor units. Driver errors are logged and re-raised as the ledger's
store errors.
"""

import sqlite3
import logging
import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional, Sequence

from .errors import (
    AccountNotFoundError,
    DuplicateAccountNumberError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
)
from .models import (
    Account,
    Transaction,
    TransactionStatus,
    TransactionType,
    from_minor_units,
    to_minor_units,
)
from .storage import AccountStore, TransactionStore


ACCOUNT_COLUMNS = "account_number, holder_name, balance_minor, created_at"
TRANSACTION_COLUMNS = """transaction_id, transaction_type, amount_minor, status,
                         source_account, destination_account, timestamp"""


class DatabaseManager(AccountStore, TransactionStore):
    """Manages database operations for the ledger."""

    def __init__(self, db_path: str = "ledger.db", timeout: float = 5.0):
        """
        Initialize database manager.

        Args:
            db_path: Path to the SQLite file
            timeout: Seconds to wait on a locked database before failing
        """
        self.db_path = db_path
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._local = threading.local()
        self._init_database()

    def _store_error(self, action: str, error: sqlite3.Error) -> StoreError:
        """Log a driver error and translate it to a store error."""
        self.logger.error(f"Error {action}: {error}")
        message = str(error).lower()
        if isinstance(error, sqlite3.OperationalError) and ("locked" in message or "busy" in message):
            return StoreTimeoutError(f"Timed out {action}")
        return StoreUnavailableError(f"Database failure while {action}: {error}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection of the open atomic block, or a fresh one that commits on exit."""
        shared = getattr(self._local, 'conn', None)
        if shared is not None:
            yield shared
            return

        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """
        Run every call made inside the block in one IMMEDIATE transaction.

        Nested blocks join the outer transaction. The transaction rolls back
        if the block raises.
        """
        if getattr(self._local, 'conn', None) is not None:
            yield
            return

        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise self._store_error("opening database", e) from e
        try:
            conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            conn.close()
            raise self._store_error("starting transaction", e) from e

        self._local.conn = conn
        try:
            yield
        except BaseException:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                self.logger.error(f"Error rolling back transaction: {e}")
            raise
        else:
            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise self._store_error("committing transaction", e) from e
        finally:
            self._local.conn = None
            conn.close()

    def _init_database(self):
        """Initialize database tables."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                # Create accounts table
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS accounts (
                        account_number TEXT PRIMARY KEY,
                        holder_name TEXT NOT NULL,
                        balance_minor INTEGER NOT NULL DEFAULT 0 CHECK (balance_minor >= 0),
                        created_at TIMESTAMP
                    )
                """)

                # Create transactions table; no foreign keys so history outlives accounts
                cursor.execute("""
                    CREATE TABLE IF NOT EXISTS transactions (
                        seq INTEGER PRIMARY KEY AUTOINCREMENT,
                        transaction_id TEXT UNIQUE NOT NULL,
                        transaction_type TEXT NOT NULL,
                        amount_minor INTEGER NOT NULL CHECK (amount_minor > 0),
                        status TEXT NOT NULL,
                        source_account TEXT,
                        destination_account TEXT,
                        timestamp TIMESTAMP
                    )
                """)
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_transactions_source ON transactions (source_account)"
                )
                cursor.execute(
                    "CREATE INDEX IF NOT EXISTS idx_transactions_destination "
                    "ON transactions (destination_account)"
                )
        except sqlite3.Error as e:
            raise self._store_error("initializing database", e) from e

    @staticmethod
    def _row_to_account(row) -> Account:
        return Account(
            account_number=row[0],
            holder_name=row[1],
            balance=from_minor_units(row[2]),
            created_at=datetime.fromisoformat(row[3]) if row[3] else None
        )

    @staticmethod
    def _row_to_transaction(row) -> Transaction:
        return Transaction(
            transaction_id=row[0],
            transaction_type=TransactionType(row[1]),
            amount=from_minor_units(row[2]),
            status=TransactionStatus(row[3]),
            source_account=row[4],
            destination_account=row[5],
            timestamp=datetime.fromisoformat(row[6]) if row[6] else None
        )

    def create_account(self, account: Account) -> Account:
        """Create a new account in the database."""
        try:
            with self._connect() as conn:
                conn.execute(f"""
                    INSERT INTO accounts ({ACCOUNT_COLUMNS})
                    VALUES (?, ?, ?, ?)
                """, (
                    account.account_number,
                    account.holder_name,
                    to_minor_units(account.balance),
                    account.created_at.isoformat()
                ))
                return account
        except sqlite3.IntegrityError as e:
            raise DuplicateAccountNumberError(
                f"Account {account.account_number} already exists"
            ) from e
        except sqlite3.Error as e:
            raise self._store_error("creating account", e) from e

    def get_account_by_number(self, account_number: str) -> Optional[Account]:
        """Get account by account number."""
        try:
            with self._connect() as conn:
                row = conn.execute(f"""
                    SELECT {ACCOUNT_COLUMNS}
                    FROM accounts WHERE account_number = ?
                """, (account_number,)).fetchone()
                return self._row_to_account(row) if row else None
        except sqlite3.Error as e:
            raise self._store_error("getting account by number", e) from e

    def update_account(self, account: Account) -> Account:
        """Write the holder name and balance of an account."""
        try:
            with self._connect() as conn:
                cursor = conn.execute("""
                    UPDATE accounts SET holder_name = ?, balance_minor = ?
                    WHERE account_number = ?
                """, (account.holder_name, to_minor_units(account.balance), account.account_number))
                if cursor.rowcount == 0:
                    raise AccountNotFoundError(f"Account {account.account_number} does not exist")
                return account
        except sqlite3.Error as e:
            raise self._store_error("updating account", e) from e

    def delete_account(self, account_number: str) -> bool:
        """Delete an account. Its transactions are kept."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM accounts WHERE account_number = ?", (account_number,)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise self._store_error("deleting account", e) from e

    def get_all_accounts(self) -> List[Account]:
        """Get all accounts, oldest first."""
        try:
            with self._connect() as conn:
                rows = conn.execute(f"""
                    SELECT {ACCOUNT_COLUMNS}
                    FROM accounts ORDER BY created_at, rowid
                """).fetchall()
                return [self._row_to_account(row) for row in rows]
        except sqlite3.Error as e:
            raise self._store_error("getting all accounts", e) from e

    def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        """Append a batch of transaction records in one database transaction."""
        try:
            with self._connect() as conn:
                conn.executemany(f"""
                    INSERT INTO transactions ({TRANSACTION_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                """, [
                    (
                        txn.transaction_id,
                        txn.transaction_type.value,
                        to_minor_units(txn.amount),
                        txn.status.value,
                        txn.source_account,
                        txn.destination_account,
                        txn.timestamp.isoformat()
                    )
                    for txn in transactions
                ])
        except sqlite3.Error as e:
            raise self._store_error("creating transactions", e) from e

    def get_account_transactions(self, account_number: str) -> List[Transaction]:
        """Get transactions with the account as source or destination, oldest first."""
        try:
            with self._connect() as conn:
                rows = conn.execute(f"""
                    SELECT {TRANSACTION_COLUMNS}
                    FROM transactions
                    WHERE source_account = ? OR destination_account = ?
                    ORDER BY seq
                """, (account_number, account_number)).fetchall()
                return [self._row_to_transaction(row) for row in rows]
        except sqlite3.Error as e:
            raise self._store_error("getting transactions", e) from e

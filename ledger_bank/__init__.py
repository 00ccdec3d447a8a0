"""
Account Ledger

Bank account ledger with a CLI interface. Supports account creation, deposits,
withdrawals, transfers, holder-name updates and deletion, with every balance
change recorded in an append-only transaction log.
"""

__version__ = "0.1.0"

from typing import Optional

from .models import Account, Transaction, TransactionType, TransactionStatus
from .errors import (
    LedgerError,
    InvalidInputError,
    InvalidAmountError,
    SameAccountError,
    AccountNotFoundError,
    InsufficientBalanceError,
    GenerationExhaustedError,
    StoreError,
    StoreTimeoutError,
    StoreUnavailableError,
    DuplicateAccountNumberError,
)
from .config import LedgerConfig, get_config
from .storage import AccountStore, TransactionStore, InMemoryStore
from .database import DatabaseManager
from .locking import AccountLockManager
from .account_manager import AccountManager
from .cli import main


def create_ledger(db_path: Optional[str] = None,
                  config: Optional[LedgerConfig] = None) -> AccountManager:
    """
    Create an AccountManager backed by a SQLite database.

    Args:
        db_path: Path to the database file, the configured path if omitted
        config: Settings to use, the global configuration if omitted

    Returns:
        AccountManager instance
    """
    config = config or get_config()
    db_manager = DatabaseManager(db_path or config.db_path, timeout=config.store_timeout)
    return AccountManager.from_config(db_manager, config)


__all__ = [
    "Account",
    "Transaction",
    "TransactionType",
    "TransactionStatus",
    "LedgerError",
    "InvalidInputError",
    "InvalidAmountError",
    "SameAccountError",
    "AccountNotFoundError",
    "InsufficientBalanceError",
    "GenerationExhaustedError",
    "StoreError",
    "StoreTimeoutError",
    "StoreUnavailableError",
    "DuplicateAccountNumberError",
    "LedgerConfig",
    "get_config",
    "AccountStore",
    "TransactionStore",
    "InMemoryStore",
    "DatabaseManager",
    "AccountLockManager",
    "AccountManager",
    "create_ledger",
    "main"
]

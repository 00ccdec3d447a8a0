"""
Data models for the account ledger.

This module contains the value objects shared by the ledger engine and the
stores, plus the helpers that keep money exact. Amounts are Decimals with two
fractional digits in memory and integer minor units (cents) in storage.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

from .errors import InsufficientBalanceError, InvalidAmountError


CENT = Decimal('0.01')
ZERO = Decimal('0.00')
MINOR_UNITS = 100
# Largest amount whose cent value fits a signed 64-bit SQLite INTEGER
MAX_AMOUNT = Decimal(2 ** 63 - 1) / MINOR_UNITS

Amount = Union[Decimal, int, str, float]


class TransactionType(Enum):
    """Types of transactions."""
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER = "TRANSFER"


class TransactionStatus(Enum):
    """Outcome of a transaction."""
    SUCCESS = "SUCCESS"


def to_decimal(value: Amount) -> Decimal:
    """
    Convert an amount to a Decimal with exactly two fractional digits.

    Args:
        value: Decimal, int, numeric string or float

    Returns:
        The amount quantized to cents

    Raises:
        InvalidAmountError: If the value is not numeric, not finite, has
            more than two fractional digits or is too large to store
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Invalid amount: {value!r}")

    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid amount: {value!r}") from None

    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {value}")

    try:
        quantized = value.quantize(CENT)
    except InvalidOperation:
        raise InvalidAmountError(f"Amount out of range: {value}") from None

    if quantized != value:
        raise InvalidAmountError(f"Amount {value} has more than two decimal places")

    if abs(quantized) > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount {value} exceeds the maximum of {MAX_AMOUNT}")

    return quantized


def to_minor_units(amount: Amount) -> int:
    """Convert an amount to an integer number of cents."""
    return int(to_decimal(amount) * MINOR_UNITS)


def from_minor_units(units: int) -> Decimal:
    """Convert an integer number of cents back to a Decimal amount."""
    return (Decimal(units) / MINOR_UNITS).quantize(CENT)


def generate_transaction_id() -> str:
    """Generate a unique transaction id."""
    return f"TXN-{uuid.uuid4().hex[:16].upper()}"


@dataclass(frozen=True)
class Account:
    """
    Snapshot of a bank account.

    Instances are immutable. A balance or name change produces a new snapshot
    that only takes effect once a store persists it.
    """

    account_number: str
    holder_name: str
    balance: Decimal = ZERO
    created_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize the snapshot after creation."""
        if self.created_at is None:
            object.__setattr__(self, 'created_at', datetime.now())

        # Ensure balance is a two-place Decimal
        object.__setattr__(self, 'balance', to_decimal(self.balance))

    def can_withdraw(self, amount: Decimal) -> bool:
        """Check if a debit leaves the balance non-negative."""
        return self.balance - to_decimal(amount) >= ZERO

    def deposited(self, amount: Decimal) -> 'Account':
        """Return a snapshot with the amount added to the balance."""
        return replace(self, balance=self.balance + to_decimal(amount))

    def withdrawn(self, amount: Decimal) -> 'Account':
        """Return a snapshot with the amount taken from the balance."""
        amount = to_decimal(amount)
        if not self.can_withdraw(amount):
            raise InsufficientBalanceError(
                f"Insufficient balance in account {self.account_number}: "
                f"{self.balance} available, {amount} requested"
            )
        return replace(self, balance=self.balance - amount)

    def renamed(self, holder_name: str) -> 'Account':
        """Return a snapshot with a new holder name."""
        return replace(self, holder_name=holder_name)


@dataclass(frozen=True)
class Transaction:
    """Write-once record of a completed balance change."""

    transaction_type: TransactionType
    amount: Decimal
    source_account: Optional[str] = None
    destination_account: Optional[str] = None
    status: TransactionStatus = TransactionStatus.SUCCESS
    transaction_id: str = field(default_factory=generate_transaction_id)
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        """Initialize transaction after creation."""
        if self.timestamp is None:
            object.__setattr__(self, 'timestamp', datetime.now())

        object.__setattr__(self, 'amount', to_decimal(self.amount))

    def involves(self, account_number: str) -> bool:
        """Check if the account is the source or destination."""
        return account_number in (self.source_account, self.destination_account)

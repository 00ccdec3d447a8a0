"""
Exceptions for the account ledger.

Every failure the ledger can report derives from LedgerError. Each class
carries its own exit code so the command line can map it to a distinct
process status.
"""


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    exit_code = 1


class InvalidInputError(LedgerError):
    """Raised when a holder name is blank or too short."""
    exit_code = 10


class InvalidAmountError(LedgerError):
    """Raised when an amount is zero, negative or not a valid money value."""
    exit_code = 11


class SameAccountError(LedgerError):
    """Raised when a transfer names the same account on both sides."""
    exit_code = 12


class AccountNotFoundError(LedgerError):
    """Raised when no account exists with the given number."""
    exit_code = 13


class InsufficientBalanceError(LedgerError):
    """Raised when a debit would take a balance below zero."""
    exit_code = 14


class GenerationExhaustedError(LedgerError):
    """Raised when every account number attempt collided with an existing one."""
    exit_code = 15


class StoreError(LedgerError):
    """Base exception for failures reported by a store."""
    exit_code = 17


class StoreTimeoutError(StoreError):
    """Raised when a store or an account lock did not answer in time. Safe to retry."""
    exit_code = 16


class StoreUnavailableError(StoreError):
    """Raised when a store cannot complete a call."""
    exit_code = 17


class DuplicateAccountNumberError(StoreError):
    """
    Raised by a store when an account number is already taken.

    The engine retries on it, so it only escapes when a store is used
    directly.
    """
    exit_code = 18

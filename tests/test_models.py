"""
Tests for the models module.

This module contains tests for the Account and Transaction value objects
and the money helpers.
"""

import re
from dataclasses import FrozenInstanceError
from datetime import datetime
from decimal import Decimal

import pytest

from ledger_bank.errors import InsufficientBalanceError, InvalidAmountError
from ledger_bank.models import (
    Account,
    Transaction,
    TransactionStatus,
    TransactionType,
    MAX_AMOUNT,
    ZERO,
    from_minor_units,
    to_decimal,
    to_minor_units,
)


class TestMoneyHelpers:
    """Test Decimal and minor unit conversions."""

    def test_to_decimal_pads_to_cents(self):
        """Test that whole amounts gain two fractional digits."""
        assert str(to_decimal("10")) == "10.00"
        assert str(to_decimal(7)) == "7.00"
        assert str(to_decimal(Decimal("1.5"))) == "1.50"

    def test_to_decimal_from_float_goes_through_str(self):
        """Test that floats are converted without binary noise."""
        assert to_decimal(0.1) == Decimal("0.10")
        assert to_decimal(19.99) == Decimal("19.99")

    def test_to_decimal_strips_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert to_decimal("  42.50 ") == Decimal("42.50")

    @pytest.mark.parametrize("value", ["abc", "", "1.2.3", "NaN", "Infinity", "-Infinity", True])
    def test_to_decimal_rejects_non_numbers(self, value):
        """Test that non-numeric and non-finite values are rejected."""
        with pytest.raises(InvalidAmountError):
            to_decimal(value)

    def test_to_decimal_rejects_sub_cent_precision(self):
        """Test that amounts finer than one cent are rejected."""
        with pytest.raises(InvalidAmountError, match="more than two decimal places"):
            to_decimal("1.005")

    def test_to_decimal_range_limit(self):
        """Test that amounts must fit a 64-bit count of cents."""
        assert to_minor_units(MAX_AMOUNT) == 2 ** 63 - 1

        for value in (10 ** 17, "92233720368547758.08", Decimal("-92233720368547758.08")):
            with pytest.raises(InvalidAmountError, match="exceeds the maximum"):
                to_decimal(value)

    def test_balance_cannot_grow_past_range_limit(self):
        """Test that a deposit pushing the balance out of range is rejected."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance=MAX_AMOUNT)

        with pytest.raises(InvalidAmountError):
            account.deposited(Decimal("0.01"))

    def test_to_decimal_accepts_trailing_zeros(self):
        """Test that extra zero digits are not treated as sub-cent precision."""
        assert to_decimal("3.1400") == Decimal("3.14")

    def test_minor_units_conversion(self):
        """Test conversion to and from cents."""
        assert to_minor_units(Decimal("1234.56")) == 123456
        assert to_minor_units("0.01") == 1
        assert from_minor_units(123456) == Decimal("1234.56")
        assert str(from_minor_units(0)) == "0.00"

    def test_repeated_small_amounts_do_not_drift(self):
        """Test that summing cents stays exact."""
        total = ZERO
        for _ in range(10):
            total += to_decimal(0.1)
        assert total == Decimal("1.00")


class TestAccount:
    """Test Account value object."""

    def test_account_defaults(self):
        """Test default balance and creation timestamp."""
        account = Account(account_number="ALI1234", holder_name="Alice")

        assert account.balance == Decimal("0.00")
        assert isinstance(account.created_at, datetime)

    def test_account_normalizes_balance(self):
        """Test that balance is converted to a two-place Decimal."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance=100)

        assert isinstance(account.balance, Decimal)
        assert str(account.balance) == "100.00"

    def test_account_is_immutable(self):
        """Test that snapshot fields cannot be reassigned."""
        account = Account(account_number="ALI1234", holder_name="Alice")

        with pytest.raises(FrozenInstanceError):
            account.balance = Decimal("1000.00")

    def test_deposited_returns_new_snapshot(self):
        """Test that a deposit leaves the original snapshot alone."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance="10.00")
        updated = account.deposited(Decimal("5.25"))

        assert updated.balance == Decimal("15.25")
        assert account.balance == Decimal("10.00")
        assert updated.account_number == account.account_number
        assert updated.created_at == account.created_at

    def test_withdrawn_down_to_zero(self):
        """Test that the full balance can be withdrawn."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance="10.00")

        assert account.withdrawn(Decimal("10.00")).balance == ZERO

    def test_withdrawn_insufficient_balance(self):
        """Test that overdrawing raises."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance="10.00")

        with pytest.raises(InsufficientBalanceError, match="10.00 available"):
            account.withdrawn(Decimal("10.01"))

    def test_can_withdraw(self):
        """Test balance sufficiency check."""
        account = Account(account_number="ALI1234", holder_name="Alice", balance="50.00")

        assert account.can_withdraw(Decimal("50.00")) is True
        assert account.can_withdraw(Decimal("50.01")) is False

    def test_renamed(self):
        """Test holder name change on a copy."""
        account = Account(account_number="ALI1234", holder_name="Alice")
        renamed = account.renamed("Alicia")

        assert renamed.holder_name == "Alicia"
        assert account.holder_name == "Alice"
        assert renamed.account_number == "ALI1234"


class TestTransaction:
    """Test Transaction value object."""

    def test_transaction_defaults(self):
        """Test generated id, status and timestamp."""
        txn = Transaction(TransactionType.DEPOSIT, Decimal("150"), source_account="ALI1234")

        assert re.fullmatch(r"TXN-[0-9A-F]{16}", txn.transaction_id)
        assert txn.status == TransactionStatus.SUCCESS
        assert txn.destination_account is None
        assert txn.amount == Decimal("150.00")
        assert isinstance(txn.timestamp, datetime)

    def test_transaction_ids_are_unique(self):
        """Test that every record gets its own id."""
        ids = {
            Transaction(TransactionType.DEPOSIT, Decimal("1"), source_account="A").transaction_id
            for _ in range(100)
        }
        assert len(ids) == 100

    def test_transaction_is_write_once(self):
        """Test that a record cannot be changed."""
        txn = Transaction(TransactionType.WITHDRAW, Decimal("5"), source_account="ALI1234")

        with pytest.raises(FrozenInstanceError):
            txn.amount = Decimal("500")

    def test_involves(self):
        """Test source and destination matching."""
        txn = Transaction(TransactionType.TRANSFER, Decimal("5"),
                          source_account="BOB1000", destination_account="CAR2000")

        assert txn.involves("BOB1000")
        assert txn.involves("CAR2000")
        assert not txn.involves("ALI3000")

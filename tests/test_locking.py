"""
Tests for the locking module.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from ledger_bank.errors import StoreTimeoutError
from ledger_bank.locking import AccountLockManager


class TestAccountLockManager:
    """Test per-account locks."""

    @pytest.fixture
    def locks(self):
        """Create a lock manager with a short timeout."""
        return AccountLockManager(timeout=0.2)

    def test_hold_and_release(self, locks):
        """Test that a lock is held inside the block and released after."""
        with locks.hold("ALI1000"):
            assert locks.is_locked("ALI1000")
            assert len(locks) == 1

        assert not locks.is_locked("ALI1000")
        assert len(locks) == 0

    def test_duplicate_numbers_locked_once(self, locks):
        """Test that naming an account twice does not self-deadlock."""
        with locks.hold("ALI1000", "ALI1000"):
            assert locks.is_locked("ALI1000")
            assert len(locks) == 1

    def test_released_on_exception(self, locks):
        """Test that an exception in the block releases the lock."""
        with pytest.raises(RuntimeError):
            with locks.hold("ALI1000", "BOB2000"):
                raise RuntimeError("boom")

        assert not locks.is_locked("ALI1000")
        assert not locks.is_locked("BOB2000")
        assert len(locks) == 0

    def test_acquired_in_sorted_order(self, locks):
        """Test that locks are taken in ascending account number order."""
        order = []
        original = locks._checkout

        def recording_checkout(account_number):
            order.append(account_number)
            return original(account_number)

        locks._checkout = recording_checkout
        with locks.hold("ZED9000", "ALI1000", "MAX5000"):
            pass

        assert order == ["ALI1000", "MAX5000", "ZED9000"]

    def test_timeout_raises_store_timeout(self, locks):
        """Test that a lock held elsewhere times out instead of blocking."""
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("ALI1000"):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            assert held.wait(5)
            with pytest.raises(StoreTimeoutError, match="ALI1000"):
                with locks.hold("ALI1000", timeout=0.05):
                    pass
        finally:
            release.set()
            thread.join(5)

        assert len(locks) == 0

    def test_timeout_releases_locks_already_taken(self, locks):
        """Test that a partial acquisition is undone on timeout."""
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("BOB2000"):
                held.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            assert held.wait(5)
            with pytest.raises(StoreTimeoutError):
                with locks.hold("ALI1000", "BOB2000", timeout=0.05):
                    pass
            assert not locks.is_locked("ALI1000")
        finally:
            release.set()
            thread.join(5)

    def test_opposite_order_holds_do_not_deadlock(self):
        """Test that pairs requested in opposite orders all complete."""
        locks = AccountLockManager(timeout=5)
        counter = {"value": 0}

        def work(first, second):
            for _ in range(200):
                with locks.hold(first, second):
                    counter["value"] += 1

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [
                pool.submit(work, "ALI1000", "BOB2000"),
                pool.submit(work, "BOB2000", "ALI1000"),
                pool.submit(work, "ALI1000", "BOB2000"),
                pool.submit(work, "BOB2000", "ALI1000"),
            ]
            for future in futures:
                future.result(timeout=30)

        assert counter["value"] == 800
        assert len(locks) == 0

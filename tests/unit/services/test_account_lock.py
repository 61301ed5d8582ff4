"""Unit tests for AccountLockManager"""

import asyncio
import pytest

from src.app.services.account_lock import AccountLockManager, LockTimeoutError


@pytest.mark.asyncio
class TestAccountLockManager:

    async def test_hold_locks_and_releases(self):
        locks = AccountLockManager()

        async with locks.hold("acct_a", "acct_b"):
            assert locks.is_locked("acct_a")
            assert locks.is_locked("acct_b")

        assert not locks.is_locked("acct_a")
        assert locks.active_accounts == 0

    async def test_duplicate_ids_are_collapsed(self):
        locks = AccountLockManager(timeout=0.1)

        async with locks.hold("acct_a", "acct_a"):
            assert locks.active_accounts == 1

    async def test_same_account_operations_do_not_interleave(self):
        locks = AccountLockManager()
        events = []

        async def worker(name):
            async with locks.hold("acct_a"):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(worker("one"), worker("two"))

        assert events in (
            ["one-start", "one-end", "two-start", "two-end"],
            ["two-start", "two-end", "one-start", "one-end"],
        )

    async def test_opposite_order_does_not_deadlock(self):
        locks = AccountLockManager(timeout=1.0)
        done = []

        async def transfer(a, b):
            async with locks.hold(a, b):
                await asyncio.sleep(0.01)
                done.append((a, b))

        await asyncio.gather(*(transfer("acct_a", "acct_b") if i % 2 else transfer("acct_b", "acct_a") for i in range(10)))

        assert len(done) == 10
        assert locks.active_accounts == 0

    async def test_timeout_raises_and_cleans_up(self):
        locks = AccountLockManager(timeout=0.01)

        async with locks.hold("acct_a"):
            with pytest.raises(LockTimeoutError) as exc_info:
                async with locks.hold("acct_a"):
                    pass
            assert exc_info.value.account_id == "acct_a"

        assert locks.active_accounts == 0

    async def test_exception_in_block_releases_lock(self):
        locks = AccountLockManager()

        with pytest.raises(ValueError):
            async with locks.hold("acct_a"):
                raise ValueError("boom")

        assert not locks.is_locked("acct_a")
        assert locks.active_accounts == 0

"""Keyed in-process locks with bounded waits."""

import asyncio

import pytest

from credit_auction.core.locks import AuctionLocks, KeyedLocks
from credit_auction.modules.common import AuctionBusy


class TestKeyedLocks:
    async def test_same_key_is_serialized(self):
        locks = KeyedLocks("enquiry", timeout=1.0)
        order = []

        async def worker(name):
            async with locks.hold("enq-1"):
                order.append(f"{name}:in")
                await asyncio.sleep(0.01)
                order.append(f"{name}:out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a:in", "a:out", "b:in", "b:out"]

    async def test_different_keys_do_not_block(self):
        locks = KeyedLocks("wallet", timeout=0.05)

        async with locks.hold("broker-a"):
            async with locks.hold("broker-b"):
                assert locks.locked("broker-a")
                assert locks.locked("broker-b")

    async def test_timeout_raises_busy(self):
        locks = KeyedLocks("enquiry", timeout=0.02)

        async with locks.hold("enq-1"):
            with pytest.raises(AuctionBusy) as excinfo:
                async with locks.hold("enq-1"):
                    pass

        assert excinfo.value.resource == "enquiry:enq-1"
        assert excinfo.value.timeout == 0.02

    async def test_explicit_timeout_overrides_default(self):
        locks = KeyedLocks("enquiry", timeout=30.0)

        async with locks.hold("enq-1"):
            with pytest.raises(AuctionBusy):
                async with locks.hold("enq-1", timeout=0.01):
                    pass

    async def test_idle_entries_are_evicted(self):
        locks = KeyedLocks("wallet")

        async with locks.hold("broker-a"):
            assert len(locks) == 1
        assert len(locks) == 0
        assert not locks.locked("broker-a")

    async def test_entry_released_after_error(self):
        locks = KeyedLocks("wallet", timeout=0.05)

        with pytest.raises(RuntimeError):
            async with locks.hold("broker-a"):
                raise RuntimeError("boom")

        async with locks.hold("broker-a"):
            assert locks.locked("broker-a")
        assert len(locks) == 0


def test_auction_locks_share_timeout():
    locks = AuctionLocks.create(timeout=1.5)

    assert locks.enquiries.namespace == "enquiry"
    assert locks.wallets.namespace == "wallet"
    assert locks.enquiries.timeout == locks.wallets.timeout == 1.5

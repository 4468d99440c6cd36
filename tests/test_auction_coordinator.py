"""Auction coordinator: placement, displacement refunds, compensation and serialization."""

import asyncio
import sqlite3
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from credit_auction.core.locks import AuctionLocks
from credit_auction.modules.auction import (
    AuctionBusy,
    AuctionPlacementFailed,
    BidNotHigherThanCurrent,
    EnquiryClosed,
    InvalidBidAmount,
)
from credit_auction.modules.bids import BidService, BidStatus
from credit_auction.modules.common import utcnow
from credit_auction.modules.enquiries import EnquiryNotFound, EnquiryService
from credit_auction.modules.wallets import InsufficientFunds, WalletService


@pytest.fixture
async def funded(session, fund):
    async def _funded(*brokers, amount=1000):
        for broker in brokers:
            await fund(broker, amount)
        await session.commit()

    return _funded


class TestPlacement:
    async def test_first_bid_takes_rank_one(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1")
        await funded("broker-a")

        result = await coordinator.place_bid("broker-a", "enq-1", 100)

        assert result.bid.rank == 1
        assert result.bid.is_on_leaderboard is True
        assert result.refunded_brokers == 0
        assert result.debited == 100
        assert await wallets.get_balance("broker-a") == 900

    async def test_displaced_bidder_is_refunded(self, coordinator, open_enquiry, funded, wallets, bids):
        await open_enquiry("enq-1", top_n=1)
        await funded("broker-a", "broker-b")

        first = await coordinator.place_bid("broker-a", "enq-1", 100)
        assert await wallets.get_balance("broker-a") == 900

        result = await coordinator.place_bid("broker-b", "enq-1", 150)

        assert result.refunded_brokers == 1
        assert result.displaced_bid_ids == [first.bid.id]
        assert result.bid.rank == 1
        assert await wallets.get_balance("broker-a") == 1000
        assert await wallets.get_balance("broker-b") == 850
        displaced = await bids.get_bid(first.bid.id)
        assert displaced.status is BidStatus.REFUNDED
        refunds = await wallets.list_transactions("broker-a", type="refund")
        assert refunds.transactions[0].reference == f"bid:{first.bid.id}"

    async def test_only_the_bid_falling_out_is_refunded(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1", top_n=2)
        await funded("broker-a", "broker-b", "broker-c")

        await coordinator.place_bid("broker-a", "enq-1", 100)
        await coordinator.place_bid("broker-b", "enq-1", 150)
        result = await coordinator.place_bid("broker-c", "enq-1", 200)

        assert result.refunded_brokers == 1
        assert await wallets.get_balance("broker-a") == 1000
        assert await wallets.get_balance("broker-b") == 850
        info = await coordinator.bid_info("enq-1", "broker-b")
        assert [entry.broker_id for entry in info.leaderboard] == ["broker-c", "broker-b"]
        assert info.my_bid.rank == 2

    async def test_bid_below_full_leaderboard_stays_unranked(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1", top_n=1)
        await funded("broker-a", "broker-b")

        await coordinator.place_bid("broker-a", "enq-1", 200)
        result = await coordinator.place_bid("broker-b", "enq-1", 100)

        assert result.bid.rank is None
        assert result.bid.status is BidStatus.ACTIVE
        assert result.refunded_brokers == 0
        assert await wallets.get_balance("broker-a") == 800

    async def test_raise_charges_only_the_delta(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1")
        await funded("broker-a")

        first = await coordinator.place_bid("broker-a", "enq-1", 100)
        raised = await coordinator.place_bid("broker-a", "enq-1", 130)

        assert raised.bid.id == first.bid.id
        assert raised.bid.credits_used == 130
        assert raised.debited == 30
        assert await wallets.get_balance("broker-a") == 870
        debits = await wallets.list_transactions("broker-a", type="bid_debit")
        assert [tx.amount for tx in debits.transactions] == [-30, -100]

    async def test_raising_own_bid_refunds_nobody(self, coordinator, open_enquiry, funded):
        await open_enquiry("enq-1", top_n=1)
        await funded("broker-a")

        await coordinator.place_bid("broker-a", "enq-1", 100)
        result = await coordinator.place_bid("broker-a", "enq-1", 500)

        assert result.refunded_brokers == 0
        assert result.bid.rank == 1


class TestBidInfo:
    async def test_simulated_rank_for_a_prospective_bid(self, coordinator, open_enquiry, funded):
        await open_enquiry("enq-1", top_n=2)
        await funded("broker-a", "broker-b", "broker-c")
        await coordinator.place_bid("broker-a", "enq-1", 200)
        await coordinator.place_bid("broker-b", "enq-1", 100)

        top = await coordinator.bid_info("enq-1", "broker-c", amount=201)
        tied = await coordinator.bid_info("enq-1", "broker-c", amount=100)
        plain = await coordinator.bid_info("enq-1", "broker-c")

        assert top.simulated_rank == 1
        assert tied.simulated_rank is None
        assert plain.simulated_rank is None

    async def test_simulated_rank_ignores_own_bid(self, coordinator, open_enquiry, funded):
        await open_enquiry("enq-1", top_n=2)
        await funded("broker-a", "broker-b")
        await coordinator.place_bid("broker-a", "enq-1", 200)
        await coordinator.place_bid("broker-b", "enq-1", 100)

        info = await coordinator.bid_info("enq-1", "broker-a", amount=150)

        assert info.simulated_rank == 1


class TestRejections:
    async def test_insufficient_funds_aborts_cleanly(self, coordinator, open_enquiry, funded, wallets, bids):
        await open_enquiry("enq-1")
        await funded("broker-a", amount=50)

        with pytest.raises(InsufficientFunds):
            await coordinator.place_bid("broker-a", "enq-1", 100)

        assert await wallets.get_balance("broker-a") == 50
        assert await bids.get_my_bid("broker-a", "enq-1") is None

    async def test_lower_or_equal_raise_is_rejected(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1")
        await funded("broker-a")
        await coordinator.place_bid("broker-a", "enq-1", 100)

        with pytest.raises(BidNotHigherThanCurrent) as excinfo:
            await coordinator.place_bid("broker-a", "enq-1", 100)

        assert excinfo.value.current == 100
        assert await wallets.get_balance("broker-a") == 900

    async def test_enquiry_past_deadline_rejects_bids(self, coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1", bidding_closes_at=utcnow() - timedelta(minutes=1))
        await funded("broker-a")

        with pytest.raises(EnquiryClosed):
            await coordinator.place_bid("broker-a", "enq-1", 100)

        assert await wallets.get_balance("broker-a") == 1000
        page = await wallets.list_transactions("broker-a")
        assert page.total == 1

    async def test_closed_enquiry_rejects_bids(self, coordinator, open_enquiry, funded):
        await open_enquiry("enq-1")
        await funded("broker-a")
        await coordinator.close_enquiry("enq-1")

        with pytest.raises(EnquiryClosed):
            await coordinator.place_bid("broker-a", "enq-1", 100)

    async def test_unknown_enquiry(self, coordinator):
        with pytest.raises(EnquiryNotFound):
            await coordinator.place_bid("broker-a", "missing", 100)

    @pytest.mark.parametrize("amount", [0, -10])
    async def test_non_positive_bid(self, coordinator, open_enquiry, amount):
        await open_enquiry("enq-1")

        with pytest.raises(InvalidBidAmount):
            await coordinator.place_bid("broker-a", "enq-1", amount)


class TestCompensation:
    async def test_failure_after_debit_is_reversed(self, coordinator, open_enquiry, funded, wallets, bids, monkeypatch):
        await open_enquiry("enq-1")
        await funded("broker-a")

        async def broken_apply_ranks(self, enquiry_id, ranks):
            raise RuntimeError("rank write failed")

        monkeypatch.setattr(BidService, "apply_ranks", broken_apply_ranks)

        with pytest.raises(AuctionPlacementFailed) as excinfo:
            await coordinator.place_bid("broker-a", "enq-1", 100)

        assert excinfo.value.compensated == 100
        assert await wallets.get_balance("broker-a") == 1000
        assert await bids.get_my_bid("broker-a", "enq-1") is None
        debit = (await wallets.list_transactions("broker-a", type="bid_debit")).transactions[0]
        refund = (await wallets.list_transactions("broker-a", type="refund")).transactions[0]
        assert refund.reference == f"tx:{debit.id}"
        assert (await wallets.audit("broker-a")).consistent

    async def test_busy_displaced_wallet_is_compensated(self, session, make_coordinator, open_enquiry, funded, wallets, bids):
        await open_enquiry("enq-1", top_n=1)
        await funded("broker-a", "broker-b")
        fast_locks = AuctionLocks.create(timeout=0.05)
        coordinator = make_coordinator(session, coordinator_locks=fast_locks)
        first = await coordinator.place_bid("broker-a", "enq-1", 100)

        async with fast_locks.wallets.hold("broker-a"):
            with pytest.raises(AuctionBusy):
                await coordinator.place_bid("broker-b", "enq-1", 150)

        assert await wallets.get_balance("broker-b") == 1000
        assert await wallets.get_balance("broker-a") == 900
        still_active = await bids.get_bid(first.bid.id)
        assert still_active.status is BidStatus.ACTIVE
        assert still_active.rank == 1


class TestSerialization:
    async def test_enquiry_lock_timeout(self, session, make_coordinator, open_enquiry, funded, wallets):
        await open_enquiry("enq-1")
        await funded("broker-a")
        fast_locks = AuctionLocks.create(timeout=0.05)
        coordinator = make_coordinator(session, coordinator_locks=fast_locks)

        async with fast_locks.enquiries.hold("enq-1"):
            with pytest.raises(AuctionBusy):
                await coordinator.place_bid("broker-a", "enq-1", 100)

        assert await wallets.get_balance("broker-a") == 1000

    async def test_concurrent_bids_on_one_enquiry(self, session_factory, make_coordinator, open_enquiry, funded):
        await open_enquiry("enq-1", top_n=1)
        brokers = ["broker-a", "broker-b", "broker-c"]
        await funded(*brokers)

        async def place(broker_id, amount):
            async with session_factory() as db:
                return await make_coordinator(db).place_bid(broker_id, "enq-1", amount)

        await asyncio.gather(place("broker-a", 100), place("broker-b", 200), place("broker-c", 150))

        async with session_factory() as db:
            wallets = WalletService.with_session(db, signup_bonus=0)
            active = await BidService.with_session(db).get_active_bids("enq-1")
            ranked = [bid for bid in active if bid.rank is not None]
            assert [bid.broker_id for bid in ranked] == ["broker-b"]
            assert len({bid.broker_id for bid in active}) == len(active)
            balances = [await wallets.get_balance(broker) for broker in brokers]
            assert sum(balances) + sum(bid.credits_used for bid in active) == 3000
            for broker in brokers:
                assert (await wallets.audit(broker)).consistent

    async def test_concurrent_bids_from_one_broker(self, session_factory, make_coordinator, open_enquiry, funded):
        await open_enquiry("enq-1")
        await funded("broker-a")

        async def place(amount):
            async with session_factory() as db:
                return await make_coordinator(db).place_bid("broker-a", "enq-1", amount)

        outcomes = await asyncio.gather(place(100), place(150), return_exceptions=True)

        assert not [o for o in outcomes if isinstance(o, Exception) and not isinstance(o, BidNotHigherThanCurrent)]
        async with session_factory() as db:
            active = await BidService.with_session(db).get_active_bids("enq-1")
            balance = await WalletService.with_session(db, signup_bonus=0).get_balance("broker-a")
        assert len(active) == 1
        assert balance == 1000 - active[0].credits_used

    async def test_concurrent_bids_on_different_enquiries(self, session_factory, make_coordinator, open_enquiry, funded):
        await open_enquiry("enq-1")
        await open_enquiry("enq-2")
        await funded("broker-a", "broker-b")

        async def place(broker_id, enquiry_id, amount):
            async with session_factory() as db:
                return await make_coordinator(db).place_bid(broker_id, enquiry_id, amount)

        outcomes = await asyncio.gather(
            place("broker-a", "enq-1", 100),
            place("broker-b", "enq-2", 120),
            return_exceptions=True,
        )

        assert not [o for o in outcomes if isinstance(o, Exception) and not isinstance(o, AuctionBusy)]
        async with session_factory() as db:
            wallets = WalletService.with_session(db, signup_bonus=0)
            bid_store = BidService.with_session(db)
            for broker, enquiry_id in (("broker-a", "enq-1"), ("broker-b", "enq-2")):
                audit = await wallets.audit(broker)
                assert audit.consistent
                bid = await bid_store.get_active_bid(broker, enquiry_id)
                staked = bid.credits_used if bid is not None else 0
                assert audit.balance == 1000 - staked

    async def test_refund_into_wallet_debited_concurrently(
        self, session, session_factory, make_coordinator, open_enquiry, funded
    ):
        await open_enquiry("enq-1", top_n=1)
        await open_enquiry("enq-2")
        await funded("broker-a", "broker-b")
        await make_coordinator(session).place_bid("broker-a", "enq-1", 100)

        async def place(broker_id, enquiry_id, amount):
            async with session_factory() as db:
                return await make_coordinator(db).place_bid(broker_id, enquiry_id, amount)

        outcomes = await asyncio.gather(
            place("broker-b", "enq-1", 150),
            place("broker-a", "enq-2", 50),
            return_exceptions=True,
        )

        assert not [o for o in outcomes if isinstance(o, Exception) and not isinstance(o, AuctionBusy)]
        async with session_factory() as db:
            wallets = WalletService.with_session(db, signup_bonus=0)
            active = await BidService.with_session(db).get_active_bids("enq-1")
            active += await BidService.with_session(db).get_active_bids("enq-2")
            for broker in ("broker-a", "broker-b"):
                audit = await wallets.audit(broker)
                assert audit.consistent
                staked = sum(bid.credits_used for bid in active if bid.broker_id == broker)
                assert audit.balance == 1000 - staked

    async def test_locked_database_surfaces_as_busy(self, coordinator, open_enquiry, funded, wallets, monkeypatch):
        await open_enquiry("enq-1")
        await funded("broker-a")

        async def locked(self, enquiry_id):
            raise OperationalError("BEGIN IMMEDIATE", {}, sqlite3.OperationalError("database is locked"))

        monkeypatch.setattr(EnquiryService, "require", locked)

        with pytest.raises(AuctionBusy) as excinfo:
            await coordinator.place_bid("broker-a", "enq-1", 100)

        assert excinfo.value.resource == "enquiry:enq-1"
        assert await wallets.get_balance("broker-a") == 1000

"""Bid store: one active bid per broker and enquiry, refunds and ranks."""

import pytest

from credit_auction.modules.bids import BidNotFound, BidStatus
from credit_auction.modules.common import ensure_utc


@pytest.fixture
async def enquiry(open_enquiry):
    return await open_enquiry("enq-1")


class TestUpsert:
    async def test_raise_updates_bid_in_place(self, bids, enquiry):
        first = await bids.upsert_bid("broker-a", enquiry.id, 100)
        raised = await bids.upsert_bid("broker-a", enquiry.id, 130)

        assert raised.id == first.id
        assert raised.credits_used == 130
        assert ensure_utc(raised.created_at) == ensure_utc(first.created_at)
        assert await bids.count_bids(enquiry.id) == 1

    async def test_refunded_bid_frees_the_slot(self, bids, enquiry):
        first = await bids.upsert_bid("broker-a", enquiry.id, 100)
        await bids.mark_refunded(first.id)

        second = await bids.upsert_bid("broker-a", enquiry.id, 120)

        assert second.id != first.id
        active = await bids.get_active_bids(enquiry.id)
        assert [bid.id for bid in active] == [second.id]

    async def test_non_positive_credits_rejected(self, bids, enquiry):
        with pytest.raises(ValueError):
            await bids.upsert_bid("broker-a", enquiry.id, 0)


class TestQueries:
    async def test_active_bids_are_ordered_by_credits(self, bids, enquiry):
        await bids.upsert_bid("broker-a", enquiry.id, 100)
        await bids.upsert_bid("broker-b", enquiry.id, 300)
        await bids.upsert_bid("broker-c", enquiry.id, 200)

        active = await bids.get_active_bids(enquiry.id)

        assert [bid.broker_id for bid in active] == ["broker-b", "broker-c", "broker-a"]

    async def test_my_bid_falls_back_to_refunded(self, bids, enquiry):
        bid = await bids.upsert_bid("broker-a", enquiry.id, 100)
        await bids.mark_refunded(bid.id)

        mine = await bids.get_my_bid("broker-a", enquiry.id)

        assert mine is not None
        assert mine.status is BidStatus.REFUNDED
        assert mine.refunded_at is not None
        assert await bids.get_my_bid("broker-z", enquiry.id) is None


class TestRefundAndRanks:
    async def test_mark_refunded_is_idempotent(self, bids, enquiry):
        bid = await bids.upsert_bid("broker-a", enquiry.id, 100)
        await bids.apply_ranks(enquiry.id, {bid.id: 1})

        await bids.mark_refunded(bid.id)
        await bids.mark_refunded(bid.id)

        stored = await bids.get_bid(bid.id)
        assert stored.status is BidStatus.REFUNDED
        assert stored.rank is None
        assert stored.is_on_leaderboard is False
        assert await bids.count_bids(enquiry.id) == 0

    async def test_mark_refunded_unknown_bid(self, bids):
        with pytest.raises(BidNotFound):
            await bids.mark_refunded("missing")

    async def test_apply_ranks_clears_unranked_bids(self, bids, enquiry):
        a = await bids.upsert_bid("broker-a", enquiry.id, 100)
        b = await bids.upsert_bid("broker-b", enquiry.id, 200)
        await bids.apply_ranks(enquiry.id, {a.id: 1, b.id: 2})

        await bids.apply_ranks(enquiry.id, {b.id: 1})

        stored_a = await bids.get_bid(a.id)
        stored_b = await bids.get_bid(b.id)
        assert (stored_a.rank, stored_a.is_on_leaderboard) == (None, False)
        assert (stored_b.rank, stored_b.is_on_leaderboard) == (1, True)

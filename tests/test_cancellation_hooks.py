"""Enquiry close and cancel, with both cancellation policies."""

import pytest

from credit_auction.modules.auction import (
    EnquiryClosed,
    RefundActiveBids,
    RetainActiveBids,
    resolve_cancellation_hook,
)
from credit_auction.modules.bids import BidStatus
from credit_auction.modules.enquiries import CANCELLED, CLOSED, EnquiryNotFound


@pytest.fixture
async def auction(session, fund, open_enquiry, make_coordinator):
    await open_enquiry("enq-1", top_n=2)
    for broker in ("broker-a", "broker-b"):
        await fund(broker, 1000)
    await session.commit()

    async def _auction(hook):
        coordinator = make_coordinator(session, hook=hook)
        await coordinator.place_bid("broker-a", "enq-1", 100)
        await coordinator.place_bid("broker-b", "enq-1", 200)
        return coordinator

    return _auction


class TestCancellation:
    async def test_retain_policy_leaves_bids_alone(self, auction, wallets, bids):
        coordinator = await auction(RetainActiveBids())

        outcome = await coordinator.cancel_enquiry("enq-1")

        assert outcome.enquiry.status == CANCELLED
        assert outcome.retained_bids == 2
        assert outcome.refunded_bids == 0
        assert len(await bids.get_active_bids("enq-1")) == 2
        assert await wallets.get_balance("broker-a") == 900

    async def test_refund_policy_returns_every_stake(self, auction, wallets, bids):
        coordinator = await auction(RefundActiveBids())

        outcome = await coordinator.cancel_enquiry("enq-1")

        assert outcome.refunded_bids == 2
        assert await bids.get_active_bids("enq-1") == []
        assert await wallets.get_balance("broker-a") == 1000
        assert await wallets.get_balance("broker-b") == 1000
        mine = await bids.get_my_bid("broker-b", "enq-1")
        assert mine.status is BidStatus.REFUNDED

    async def test_cancelling_twice_runs_the_hook_once(self, auction, wallets):
        coordinator = await auction(RefundActiveBids())

        await coordinator.cancel_enquiry("enq-1")
        second = await coordinator.cancel_enquiry("enq-1")

        assert second.refunded_bids == 0
        assert await wallets.get_balance("broker-a") == 1000

    async def test_cancelled_enquiry_rejects_bids(self, auction):
        coordinator = await auction(RetainActiveBids())
        await coordinator.cancel_enquiry("enq-1")

        with pytest.raises(EnquiryClosed):
            await coordinator.place_bid("broker-a", "enq-1", 300)

    async def test_cancel_unknown_enquiry(self, coordinator):
        with pytest.raises(EnquiryNotFound):
            await coordinator.cancel_enquiry("missing")


class TestClose:
    async def test_close_keeps_final_ranking(self, auction, bids):
        coordinator = await auction(RetainActiveBids())

        enquiry = await coordinator.close_enquiry("enq-1")

        assert enquiry.status == CLOSED
        active = await bids.get_active_bids("enq-1")
        assert [(bid.broker_id, bid.rank) for bid in active] == [("broker-b", 1), ("broker-a", 2)]

    async def test_closed_enquiry_can_still_be_cancelled(self, auction):
        coordinator = await auction(RefundActiveBids())
        await coordinator.close_enquiry("enq-1")

        outcome = await coordinator.cancel_enquiry("enq-1")

        assert outcome.enquiry.status == CANCELLED
        assert outcome.refunded_bids == 2


class TestPolicyResolution:
    def test_known_policies(self):
        assert isinstance(resolve_cancellation_hook("retain"), RetainActiveBids)
        assert isinstance(resolve_cancellation_hook("refund"), RefundActiveBids)

    def test_unknown_policy(self):
        with pytest.raises(ValueError):
            resolve_cancellation_hook("forfeit")

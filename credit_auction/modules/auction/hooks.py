"""What happens to outstanding bids when an enquiry is cancelled.

The policy is chosen by ``AUCTION__CANCELLATION_POLICY``; callers may also
hand the coordinator any object satisfying :class:`CancellationHook`.
"""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

from credit_auction.modules.bids import BidRecord, BidService
from credit_auction.modules.enquiries import EnquiryRecord
from credit_auction.modules.wallets import AlreadyRefunded, WalletService

from .models import CancellationOutcome, bid_reference

logger = logging.getLogger(__name__)


class CancellationHook(Protocol):
    async def __call__(
        self,
        enquiry: EnquiryRecord,
        bids: Sequence[BidRecord],
        *,
        wallets: WalletService,
        bid_store: BidService,
    ) -> CancellationOutcome:
        ...


class RetainActiveBids:
    async def __call__(
        self,
        enquiry: EnquiryRecord,
        bids: Sequence[BidRecord],
        *,
        wallets: WalletService,
        bid_store: BidService,
    ) -> CancellationOutcome:
        if bids:
            logger.info("Enquiry %s cancelled; %s active bids retained", enquiry.id, len(bids))
        return CancellationOutcome(enquiry=enquiry, retained_bids=len(bids))


class RefundActiveBids:
    async def __call__(
        self,
        enquiry: EnquiryRecord,
        bids: Sequence[BidRecord],
        *,
        wallets: WalletService,
        bid_store: BidService,
    ) -> CancellationOutcome:
        refunded = 0
        for bid in bids:
            try:
                await wallets.refund(
                    bid.broker_id,
                    bid.credits_used,
                    bid_reference(bid.id),
                    description=f"Refund for cancelled enquiry {enquiry.id}",
                )
            except AlreadyRefunded:
                logger.warning("Bid %s on enquiry %s was already refunded", bid.id, enquiry.id)
            await bid_store.mark_refunded(bid.id)
            refunded += 1
        logger.info("Enquiry %s cancelled; refunded %s active bids", enquiry.id, refunded)
        return CancellationOutcome(enquiry=enquiry, refunded_bids=refunded)


CANCELLATION_HOOKS: dict[str, type] = {
    "retain": RetainActiveBids,
    "refund": RefundActiveBids,
}


def resolve_cancellation_hook(policy: str) -> CancellationHook:
    try:
        return CANCELLATION_HOOKS[policy]()
    except KeyError:
        raise ValueError(f"Unknown cancellation policy: {policy}") from None

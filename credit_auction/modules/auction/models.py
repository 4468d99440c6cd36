"""Result types returned by the auction coordinator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from credit_auction.modules.bids.models import BidRecord
from credit_auction.modules.enquiries.models import EnquiryRecord


def bid_reference(bid_id: str) -> str:
    return f"bid:{bid_id}"


def debit_reference(transaction_id: str) -> str:
    return f"tx:{transaction_id}"


@dataclass(slots=True)
class PlaceBidResult:
    bid: BidRecord
    refunded_brokers: int
    debited: int
    displaced_bid_ids: list[str] = field(default_factory=list)


@dataclass(slots=True)
class MyBidResult:
    has_bid: bool
    bid: Optional[BidRecord]


@dataclass(slots=True)
class CancellationOutcome:
    enquiry: EnquiryRecord
    refunded_bids: int = 0
    retained_bids: int = 0

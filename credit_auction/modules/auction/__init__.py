"""Auction coordinator exports"""

from .exceptions import (
    AuctionBusy,
    AuctionError,
    AuctionPlacementFailed,
    BidNotHigherThanCurrent,
    EnquiryClosed,
    InvalidBidAmount,
)
from .hooks import CANCELLATION_HOOKS, CancellationHook, RefundActiveBids, RetainActiveBids, resolve_cancellation_hook
from .models import CancellationOutcome, MyBidResult, PlaceBidResult, bid_reference, debit_reference
from .service import AuctionCoordinator

__all__ = [
    "AuctionBusy",
    "AuctionCoordinator",
    "AuctionError",
    "AuctionPlacementFailed",
    "BidNotHigherThanCurrent",
    "CANCELLATION_HOOKS",
    "CancellationHook",
    "CancellationOutcome",
    "EnquiryClosed",
    "InvalidBidAmount",
    "MyBidResult",
    "PlaceBidResult",
    "RefundActiveBids",
    "RetainActiveBids",
    "bid_reference",
    "debit_reference",
    "resolve_cancellation_hook",
]

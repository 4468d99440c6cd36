"""Auction coordinator specific exceptions."""

from credit_auction.modules.common.exceptions import AuctionBusy, DomainError


class AuctionError(DomainError):
    """Base class for bid placement errors."""

    code = "auction_error"


class InvalidBidAmount(AuctionError):
    """Bids must commit a positive whole number of credits."""

    code = "invalid_bid_amount"


class EnquiryClosed(AuctionError):
    """The enquiry is no longer accepting bids."""

    code = "enquiry_closed"

    def __init__(self, enquiry_id: str, status: str) -> None:
        self.enquiry_id = enquiry_id
        self.status = status
        super().__init__(f"Enquiry {enquiry_id} is not open for bidding ({status})")


class BidNotHigherThanCurrent(AuctionError):
    """A raise must exceed the broker's current active bid."""

    code = "bid_not_higher"

    def __init__(self, current: int, requested: int) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"New bid {requested} must be higher than your current bid of {current}")


class AuctionPlacementFailed(AuctionError):
    """Placement failed after the debit; the debit has been reversed."""

    code = "auction_placement_failed"

    def __init__(self, enquiry_id: str, compensated: int) -> None:
        self.enquiry_id = enquiry_id
        self.compensated = compensated
        super().__init__(
            f"Bid on enquiry {enquiry_id} could not be recorded; {compensated} credits were returned"
        )


__all__ = [
    "AuctionBusy",
    "AuctionError",
    "AuctionPlacementFailed",
    "BidNotHigherThanCurrent",
    "EnquiryClosed",
    "InvalidBidAmount",
]

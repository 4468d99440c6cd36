"""Bid store specific exceptions."""

from credit_auction.modules.common.exceptions import DomainError


class BidError(DomainError):
    """Base class for bid store errors."""

    code = "bid_error"


class BidNotFound(BidError):
    """The requested bid does not exist."""

    code = "bid_not_found"

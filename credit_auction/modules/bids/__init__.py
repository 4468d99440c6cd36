"""Bid store exports"""

from .exceptions import BidError, BidNotFound
from .models import BidRecord, BidStatus
from .service import BidService

__all__ = [
    "BidError",
    "BidNotFound",
    "BidRecord",
    "BidService",
    "BidStatus",
]

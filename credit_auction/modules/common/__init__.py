"""Shared domain helpers."""

from .clock import ensure_utc, utcnow
from .exceptions import AuctionBusy, DomainError, DuplicateKeyError

__all__ = [
    "AuctionBusy",
    "DomainError",
    "DuplicateKeyError",
    "ensure_utc",
    "utcnow",
]

"""Repository protocol for bids."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from credit_auction.db.models import Bid as BidModel


class BidRepository(Protocol):
    async def get_bid(self, bid_id: str) -> BidModel | None:
        ...

    async def get_active_bid(self, broker_id: str, enquiry_id: str) -> BidModel | None:
        ...

    async def get_latest_bid(self, broker_id: str, enquiry_id: str) -> BidModel | None:
        ...

    async def create_bid(self, *, broker_id: str, enquiry_id: str, credits_used: int) -> BidModel:
        ...

    async def update_credits(self, bid_id: str, credits_used: int) -> BidModel | None:
        ...

    async def list_active_bids(self, enquiry_id: str) -> Sequence[BidModel]:
        ...

    async def count_active_bids(self, enquiry_id: str) -> int:
        ...

    async def mark_refunded(self, bid_id: str, refunded_at: datetime) -> bool:
        ...

    async def set_rank(self, bid_id: str, rank: int | None) -> None:
        ...

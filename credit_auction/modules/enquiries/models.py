"""Domain models for enquiries open to bidding."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from credit_auction.modules.common.clock import ensure_utc

OPEN = "open"
CLOSED = "closed"
CANCELLED = "cancelled"


@dataclass(slots=True)
class EnquiryRecord:
    id: str
    status: str
    owner_id: Optional[str] = None
    bidding_closes_at: Optional[datetime] = None
    top_n: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def accepts_bids(self, now: datetime) -> bool:
        if self.status != OPEN:
            return False
        closes_at = ensure_utc(self.bidding_closes_at)
        return closes_at is None or ensure_utc(now) < closes_at

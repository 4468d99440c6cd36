"""Domain models for enquiry bids."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class BidStatus(str, Enum):
    ACTIVE = "ACTIVE"
    REFUNDED = "REFUNDED"


@dataclass(slots=True)
class BidRecord:
    id: str
    broker_id: str
    enquiry_id: str
    credits_used: int
    status: BidStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    rank: Optional[int] = None
    is_on_leaderboard: bool = False

    @property
    def is_active(self) -> bool:
        return self.status is BidStatus.ACTIVE

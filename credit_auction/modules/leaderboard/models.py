"""Derived leaderboard views; nothing here is persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from credit_auction.modules.bids.models import BidStatus


@dataclass(frozen=True, slots=True)
class LeaderboardEntry:
    rank: int
    broker_id: str
    credits_used: int
    bid_id: str
    created_at: datetime


@dataclass(slots=True)
class MyBidSummary:
    credits_used: int
    status: BidStatus
    rank: Optional[int] = None


@dataclass(slots=True)
class BidInfo:
    leaderboard: list[LeaderboardEntry]
    total_bids: int
    min_bid_to_enter_leaderboard: int
    min_bid_to_top_leaderboard: int
    my_bid: Optional[MyBidSummary] = None
    top_n: int = 4
    ranks: dict[str, int] = field(default_factory=dict)
    simulated_rank: Optional[int] = None

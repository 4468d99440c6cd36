"""Leaderboard engine exports"""

from .engine import (
    DEFAULT_TOP_N,
    compute_leaderboard,
    diff_displaced,
    order_bids,
    rank_bids,
    ranking_key,
    simulate_rank,
)
from .models import BidInfo, LeaderboardEntry, MyBidSummary

__all__ = [
    "DEFAULT_TOP_N",
    "BidInfo",
    "LeaderboardEntry",
    "MyBidSummary",
    "compute_leaderboard",
    "diff_displaced",
    "order_bids",
    "rank_bids",
    "ranking_key",
    "simulate_rank",
]

"""Pure leaderboard computation.

Ranking order is ``credits_used`` descending, then ``created_at`` ascending (the
earlier bid keeps a tie), then bid id ascending so equal timestamps still give a
stable answer. Everything here is a function of the bid snapshot it is handed.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Optional

from credit_auction.modules.bids.models import BidRecord
from credit_auction.modules.common.clock import ensure_utc

from .models import BidInfo, LeaderboardEntry, MyBidSummary

DEFAULT_TOP_N = 4


def ranking_key(bid: BidRecord) -> tuple[int, datetime, str]:
    return (-bid.credits_used, ensure_utc(bid.created_at), bid.id)


def order_bids(bids: Iterable[BidRecord]) -> list[BidRecord]:
    return sorted((bid for bid in bids if bid.is_active), key=ranking_key)


def rank_bids(bids: Iterable[BidRecord], top_n: int = DEFAULT_TOP_N) -> list[LeaderboardEntry]:
    if top_n < 1:
        raise ValueError("top_n must be at least 1")
    return [
        LeaderboardEntry(
            rank=position,
            broker_id=bid.broker_id,
            credits_used=bid.credits_used,
            bid_id=bid.id,
            created_at=bid.created_at,
        )
        for position, bid in enumerate(order_bids(bids)[:top_n], start=1)
    ]


def diff_displaced(
    old_top: Sequence[LeaderboardEntry],
    new_top: Sequence[LeaderboardEntry],
) -> set[str]:
    """Bids ranked before a placement that are no longer ranked after it."""
    return {entry.bid_id for entry in old_top} - {entry.bid_id for entry in new_top}


def compute_leaderboard(
    bids: Iterable[BidRecord],
    top_n: int = DEFAULT_TOP_N,
    *,
    my_bid: Optional[BidRecord] = None,
) -> BidInfo:
    ordered = order_bids(bids)
    leaderboard = rank_bids(ordered, top_n)
    ranks = {entry.bid_id: entry.rank for entry in leaderboard}

    if len(ordered) < top_n:
        min_to_enter = 1
    else:
        min_to_enter = leaderboard[top_n - 1].credits_used + 1
    min_to_top = leaderboard[0].credits_used + 1 if leaderboard else 1

    summary = None
    if my_bid is not None:
        summary = MyBidSummary(
            credits_used=my_bid.credits_used,
            status=my_bid.status,
            rank=ranks.get(my_bid.id) if my_bid.is_active else None,
        )

    return BidInfo(
        leaderboard=leaderboard,
        total_bids=len(ordered),
        min_bid_to_enter_leaderboard=min_to_enter,
        min_bid_to_top_leaderboard=min_to_top,
        my_bid=summary,
        top_n=top_n,
        ranks=ranks,
    )


def simulate_rank(
    leaderboard: Sequence[LeaderboardEntry],
    amount: int,
    top_n: int = DEFAULT_TOP_N,
) -> Optional[int]:
    """Rank a fresh bid of ``amount`` would take; it loses ties since it is newer."""
    if amount < 1:
        return None
    rank = 1
    for entry in leaderboard:
        if amount > entry.credits_used:
            break
        rank += 1
    return rank if rank <= top_n else None

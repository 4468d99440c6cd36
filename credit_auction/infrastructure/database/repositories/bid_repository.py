"""SQLAlchemy implementation for bids"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from sqlalchemy import asc, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import Bid
from credit_auction.modules.common.clock import utcnow

ACTIVE = "ACTIVE"
REFUNDED = "REFUNDED"


class SqlBidRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_bid(self, bid_id: str) -> Bid | None:
        stmt = select(Bid).where(Bid.id == bid_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_active_bid(self, broker_id: str, enquiry_id: str) -> Bid | None:
        stmt = (
            select(Bid)
            .where(Bid.broker_id == broker_id, Bid.enquiry_id == enquiry_id, Bid.status == ACTIVE)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_latest_bid(self, broker_id: str, enquiry_id: str) -> Bid | None:
        stmt = (
            select(Bid)
            .where(Bid.broker_id == broker_id, Bid.enquiry_id == enquiry_id)
            .order_by(desc(Bid.created_at), desc(Bid.id))
            .limit(1)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_bid(self, *, broker_id: str, enquiry_id: str, credits_used: int) -> Bid:
        now = utcnow()
        bid = Bid(
            broker_id=broker_id,
            enquiry_id=enquiry_id,
            credits_used=credits_used,
            status=ACTIVE,
            is_on_leaderboard=False,
            created_at=now,
            updated_at=now,
        )
        self.session.add(bid)
        await self.session.flush()
        return bid

    async def update_credits(self, bid_id: str, credits_used: int) -> Bid | None:
        stmt = (
            update(Bid)
            .where(Bid.id == bid_id, Bid.status == ACTIVE)
            .values(credits_used=credits_used, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_bid(bid_id)

    async def list_active_bids(self, enquiry_id: str) -> Sequence[Bid]:
        stmt = (
            select(Bid)
            .where(Bid.enquiry_id == enquiry_id, Bid.status == ACTIVE)
            .order_by(desc(Bid.credits_used), asc(Bid.created_at), asc(Bid.id))
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_active_bids(self, enquiry_id: str) -> int:
        stmt = select(func.count()).select_from(Bid).where(Bid.enquiry_id == enquiry_id, Bid.status == ACTIVE)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def mark_refunded(self, bid_id: str, refunded_at: datetime) -> bool:
        stmt = (
            update(Bid)
            .where(Bid.id == bid_id, Bid.status == ACTIVE)
            .values(
                status=REFUNDED,
                refunded_at=refunded_at,
                rank=None,
                is_on_leaderboard=False,
                updated_at=refunded_at,
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def set_rank(self, bid_id: str, rank: int | None) -> None:
        stmt = (
            update(Bid)
            .where(Bid.id == bid_id)
            .values(rank=rank, is_on_leaderboard=rank is not None)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.execute(stmt)

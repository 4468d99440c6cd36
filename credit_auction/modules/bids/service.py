"""Bid store domain service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import Bid as BidModel
from credit_auction.infrastructure.database.repositories.bid_repository import SqlBidRepository
from credit_auction.modules.common.clock import utcnow

from .exceptions import BidNotFound
from .models import BidRecord, BidStatus
from .repository import BidRepository


@dataclass(slots=True)
class BidService:
    repository: BidRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "BidService":
        return cls(SqlBidRepository(session))

    async def upsert_bid(self, broker_id: str, enquiry_id: str, credits_used: int) -> BidRecord:
        """Raise the broker's active bid in place, or open a new one."""
        if credits_used <= 0:
            raise ValueError("credits_used must be positive")
        existing = await self.repository.get_active_bid(broker_id, enquiry_id)
        if existing is not None:
            updated = await self.repository.update_credits(existing.id, credits_used)
            if updated is not None:
                return self._to_domain(updated)
        bid = await self.repository.create_bid(
            broker_id=broker_id,
            enquiry_id=enquiry_id,
            credits_used=credits_used,
        )
        return self._to_domain(bid)

    async def get_bid(self, bid_id: str) -> BidRecord | None:
        bid = await self.repository.get_bid(bid_id)
        return self._to_domain(bid) if bid else None

    async def get_active_bid(self, broker_id: str, enquiry_id: str) -> BidRecord | None:
        bid = await self.repository.get_active_bid(broker_id, enquiry_id)
        return self._to_domain(bid) if bid else None

    async def get_active_bids(self, enquiry_id: str) -> list[BidRecord]:
        rows = await self.repository.list_active_bids(enquiry_id)
        return [self._to_domain(row) for row in rows]

    async def count_bids(self, enquiry_id: str) -> int:
        return await self.repository.count_active_bids(enquiry_id)

    async def get_my_bid(self, broker_id: str, enquiry_id: str) -> BidRecord | None:
        bid = await self.repository.get_active_bid(broker_id, enquiry_id)
        if bid is None:
            bid = await self.repository.get_latest_bid(broker_id, enquiry_id)
        return self._to_domain(bid) if bid else None

    async def mark_refunded(self, bid_id: str) -> None:
        updated = await self.repository.mark_refunded(bid_id, utcnow())
        if not updated and await self.repository.get_bid(bid_id) is None:
            raise BidNotFound(f"Bid not found: {bid_id}")

    async def apply_ranks(self, enquiry_id: str, ranks: Mapping[str, int]) -> None:
        """Persist leaderboard positions; active bids missing from ``ranks`` become unranked."""
        for bid in await self.repository.list_active_bids(enquiry_id):
            rank = ranks.get(bid.id)
            if bid.rank != rank or bid.is_on_leaderboard != (rank is not None):
                await self.repository.set_rank(bid.id, rank)

    @staticmethod
    def _to_domain(model: BidModel) -> BidRecord:
        return BidRecord(
            id=model.id,
            broker_id=model.broker_id,
            enquiry_id=model.enquiry_id,
            credits_used=model.credits_used,
            status=BidStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
            refunded_at=model.refunded_at,
            rank=model.rank,
            is_on_leaderboard=bool(model.is_on_leaderboard),
        )

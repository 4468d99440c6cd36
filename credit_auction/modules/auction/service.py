"""Auction coordinator.

A placement is one unit of work under the enquiry lock: validate, debit the
bidder, upsert the bid, recompute the leaderboard, refund whoever fell out of
it, persist ranks, commit. Everything after the debit runs in a savepoint; if
it fails the debit is reversed with a compensating refund before the error
reaches the caller.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.core.config import get_settings
from credit_auction.core.locks import AuctionLocks
from credit_auction.infrastructure.database.session import is_lock_contention
from credit_auction.modules.bids import BidService
from credit_auction.modules.common.clock import utcnow
from credit_auction.modules.enquiries import CANCELLED, CLOSED, OPEN, EnquiryRecord, EnquiryService
from credit_auction.modules.leaderboard import (
    DEFAULT_TOP_N,
    BidInfo,
    LeaderboardEntry,
    compute_leaderboard,
    diff_displaced,
    rank_bids,
    simulate_rank,
)
from credit_auction.modules.wallets import AlreadyRefunded, CreditTransactionRecord, WalletService

from .exceptions import (
    AuctionBusy,
    AuctionPlacementFailed,
    BidNotHigherThanCurrent,
    EnquiryClosed,
    InvalidBidAmount,
)
from .hooks import CancellationHook, RetainActiveBids, resolve_cancellation_hook
from .models import CancellationOutcome, MyBidResult, PlaceBidResult, bid_reference, debit_reference

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuctionCoordinator:
    session: AsyncSession
    wallets: WalletService
    bids: BidService
    enquiries: EnquiryService
    locks: AuctionLocks
    top_n: int = DEFAULT_TOP_N
    cancellation_hook: CancellationHook = field(default_factory=RetainActiveBids)

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        locks: AuctionLocks | None = None,
        cancellation_hook: CancellationHook | None = None,
        top_n: int | None = None,
        signup_bonus: int | None = None,
    ) -> "AuctionCoordinator":
        settings = get_settings()
        if locks is None:
            locks = AuctionLocks.create(settings.auction.lock_timeout_seconds)
        if cancellation_hook is None:
            cancellation_hook = resolve_cancellation_hook(settings.auction.cancellation_policy)
        return cls(
            session=session,
            wallets=WalletService.with_session(session, locks=locks.wallets, signup_bonus=signup_bonus),
            bids=BidService.with_session(session),
            enquiries=EnquiryService.with_session(session),
            locks=locks,
            top_n=settings.auction.top_n if top_n is None else top_n,
            cancellation_hook=cancellation_hook,
        )

    async def place_bid(self, broker_id: str, enquiry_id: str, credits_used: int) -> PlaceBidResult:
        if not isinstance(credits_used, int) or isinstance(credits_used, bool) or credits_used <= 0:
            raise InvalidBidAmount("Bid must be a positive number of credits")

        async with self.locks.enquiries.hold(enquiry_id):
            async with self._contention_as_busy(enquiry_id):
                enquiry = await self.enquiries.require(enquiry_id)
                if not enquiry.accepts_bids(utcnow()):
                    raise EnquiryClosed(enquiry_id, enquiry.status if enquiry.status != OPEN else CLOSED)

                existing = await self.bids.get_active_bid(broker_id, enquiry_id)
                current = existing.credits_used if existing is not None else 0
                if existing is not None and credits_used <= current:
                    raise BidNotHigherThanCurrent(current, credits_used)

                top_n = enquiry.top_n or self.top_n
                before = rank_bids(await self.bids.get_active_bids(enquiry_id), top_n)
                charge = credits_used - current
                debit = await self.wallets.debit(
                    broker_id,
                    charge,
                    type="bid_debit",
                    description=f"Bid on enquiry {enquiry_id}",
                    reference=enquiry_id,
                )

            try:
                async with self.session.begin_nested():
                    result = await self._settle(broker_id, enquiry_id, credits_used, before, top_n)
            except Exception as exc:
                logger.exception(
                    "Bid by broker %s on enquiry %s failed after debit %s; reversing %s credits",
                    broker_id,
                    enquiry_id,
                    debit.id,
                    charge,
                )
                await self._compensate(broker_id, enquiry_id, debit)
                if isinstance(exc, AuctionBusy):
                    raise
                raise AuctionPlacementFailed(enquiry_id, charge) from exc

            result.debited = charge
            await self._commit(enquiry_id, charge)

        logger.info(
            "Broker %s bid %s credits on enquiry %s (charged %s, refunded %s brokers)",
            broker_id,
            credits_used,
            enquiry_id,
            charge,
            result.refunded_brokers,
        )
        return result

    async def bid_info(
        self,
        enquiry_id: str,
        broker_id: Optional[str] = None,
        amount: Optional[int] = None,
    ) -> BidInfo:
        """Leaderboard view, optionally with the rank a bid of ``amount`` would take."""
        enquiry = await self.enquiries.require(enquiry_id)
        top_n = enquiry.top_n or self.top_n
        bids = await self.bids.get_active_bids(enquiry_id)
        mine = await self.bids.get_my_bid(broker_id, enquiry_id) if broker_id else None
        info = compute_leaderboard(bids, top_n, my_bid=mine)
        if amount is not None:
            # the caller competes against everyone else, not against their own bid
            others = [bid for bid in bids if bid.broker_id != broker_id]
            info.simulated_rank = simulate_rank(rank_bids(others, top_n), amount, top_n)
        return info

    async def my_bid(self, broker_id: str, enquiry_id: str) -> MyBidResult:
        await self.enquiries.require(enquiry_id)
        bid = await self.bids.get_my_bid(broker_id, enquiry_id)
        return MyBidResult(has_bid=bid is not None, bid=bid)

    async def close_enquiry(self, enquiry_id: str) -> EnquiryRecord:
        async with self.locks.enquiries.hold(enquiry_id):
            async with self._contention_as_busy(enquiry_id):
                enquiry = await self.enquiries.close(enquiry_id)
                active = await self.bids.count_bids(enquiry_id)
                await self.session.commit()
        logger.info("Enquiry %s closed with %s active bids", enquiry_id, active)
        return enquiry

    async def cancel_enquiry(self, enquiry_id: str) -> CancellationOutcome:
        async with self.locks.enquiries.hold(enquiry_id):
            async with self._contention_as_busy(enquiry_id):
                current = await self.enquiries.require(enquiry_id)
                if current.status == CANCELLED:
                    return CancellationOutcome(enquiry=current)
                enquiry = await self.enquiries.cancel(enquiry_id)
                bids = await self.bids.get_active_bids(enquiry_id)
                outcome = await self.cancellation_hook(enquiry, bids, wallets=self.wallets, bid_store=self.bids)
                await self.session.commit()
        return outcome

    async def _settle(
        self,
        broker_id: str,
        enquiry_id: str,
        credits_used: int,
        before: list[LeaderboardEntry],
        top_n: int,
    ) -> PlaceBidResult:
        bid = await self.bids.upsert_bid(broker_id, enquiry_id, credits_used)
        info = compute_leaderboard(await self.bids.get_active_bids(enquiry_id), top_n)
        displaced = diff_displaced(before, info.leaderboard)

        refunded_brokers: set[str] = set()
        for entry in before:
            if entry.bid_id in displaced:
                await self._refund_displaced(entry, enquiry_id)
                refunded_brokers.add(entry.broker_id)

        await self.bids.apply_ranks(enquiry_id, info.ranks)
        placed = await self.bids.get_bid(bid.id)
        return PlaceBidResult(
            bid=placed or bid,
            refunded_brokers=len(refunded_brokers),
            debited=0,
            displaced_bid_ids=sorted(displaced),
        )

    async def _refund_displaced(self, entry: LeaderboardEntry, enquiry_id: str) -> None:
        try:
            await self.wallets.refund(
                entry.broker_id,
                entry.credits_used,
                bid_reference(entry.bid_id),
                description=f"Outbid on enquiry {enquiry_id}",
            )
        except AlreadyRefunded:
            logger.warning("Displaced bid %s on enquiry %s was already refunded", entry.bid_id, enquiry_id)
        await self.bids.mark_refunded(entry.bid_id)
        logger.info(
            "Refunded %s credits to broker %s, displaced from enquiry %s",
            entry.credits_used,
            entry.broker_id,
            enquiry_id,
        )

    async def _compensate(self, broker_id: str, enquiry_id: str, debit: CreditTransactionRecord) -> None:
        amount = -debit.amount
        try:
            await self.wallets.refund(
                broker_id,
                amount,
                debit_reference(debit.id),
                description=f"Reversal of failed bid on enquiry {enquiry_id}",
            )
            await self.session.commit()
        except Exception as exc:
            # the debit is still uncommitted, dropping the transaction undoes it
            await self.session.rollback()
            logger.error("Compensating refund for debit %s failed; transaction rolled back", debit.id)
            raise AuctionPlacementFailed(enquiry_id, amount) from exc

    async def _commit(self, enquiry_id: str, charge: int) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            logger.exception("Committing bid on enquiry %s failed; transaction rolled back", enquiry_id)
            raise AuctionPlacementFailed(enquiry_id, charge) from exc

    @asynccontextmanager
    async def _contention_as_busy(self, enquiry_id: str) -> AsyncIterator[None]:
        try:
            yield
        except AuctionBusy:
            await self.session.rollback()
            raise
        except OperationalError as exc:
            if not is_lock_contention(exc):
                raise
            await self.session.rollback()
            logger.warning("Database stayed locked while handling enquiry %s", enquiry_id)
            raise AuctionBusy(f"enquiry:{enquiry_id}", self.locks.enquiries.timeout) from exc

"""SQLAlchemy implementation for the wallet ledger"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.db.models import CreditTransaction, CreditWallet
from credit_auction.modules.common.clock import utcnow
from credit_auction.modules.common.exceptions import DuplicateKeyError


class SqlWalletRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def savepoint(self) -> AbstractAsyncContextManager:
        return self.session.begin_nested()

    async def get_wallet(self, broker_id: str, *, for_update: bool = False) -> CreditWallet | None:
        stmt = (
            select(CreditWallet)
            .where(CreditWallet.broker_id == broker_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def create_wallet(self, broker_id: str, opening_balance: int) -> tuple[CreditWallet, bool]:
        wallet = CreditWallet(
            broker_id=broker_id,
            balance=opening_balance,
            version=1 if opening_balance else 0,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(wallet)
                await self.session.flush()
        except IntegrityError:
            # another request created it first
            existing = await self.get_wallet(broker_id)
            if existing is None:
                raise
            return existing, False
        return wallet, True

    async def apply_delta(self, broker_id: str, delta: int) -> tuple[str, int, int] | None:
        """Atomically shift the balance, refusing to go below zero.

        Returns ``(wallet_id, balance, version)`` after the change, or ``None``
        when the wallet is missing or the change would overdraw it.
        """
        stmt = (
            update(CreditWallet)
            .where(CreditWallet.broker_id == broker_id)
            .where(CreditWallet.balance + delta >= 0)
            .values(
                balance=CreditWallet.balance + delta,
                version=CreditWallet.version + 1,
                updated_at=utcnow(),
            )
            .returning(CreditWallet.id, CreditWallet.balance, CreditWallet.version)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        row = result.first()
        if row is None:
            return None
        return row[0], row[1], row[2]

    async def add_transaction(
        self,
        *,
        wallet_id: str,
        broker_id: str,
        sequence: int,
        type: str,
        amount: int,
        balance_after: int,
        description: str | None,
        reference: str | None = None,
        idempotency_key: str | None = None,
        order_id: str | None = None,
        payment_id: str | None = None,
        pack_id: str | None = None,
        amount_paid_inr: int | None = None,
    ) -> CreditTransaction:
        tx = CreditTransaction(
            wallet_id=wallet_id,
            broker_id=broker_id,
            sequence=sequence,
            type=type,
            amount=amount,
            balance_after=balance_after,
            status="completed",
            description=description,
            reference=reference,
            idempotency_key=idempotency_key,
            order_id=order_id,
            payment_id=payment_id,
            pack_id=pack_id,
            amount_paid_inr=amount_paid_inr,
        )
        self.session.add(tx)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            if idempotency_key is None:
                raise
            raise DuplicateKeyError(idempotency_key) from exc
        return tx

    async def get_transaction_by_key(self, idempotency_key: str) -> CreditTransaction | None:
        stmt = select(CreditTransaction).where(CreditTransaction.idempotency_key == idempotency_key)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_transactions(
        self, broker_id: str, limit: int, offset: int, type: str | None = None
    ) -> Sequence[CreditTransaction]:
        stmt = select(CreditTransaction).where(CreditTransaction.broker_id == broker_id)
        if type:
            stmt = stmt.where(CreditTransaction.type == type)
        stmt = stmt.order_by(desc(CreditTransaction.sequence)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count_transactions(self, broker_id: str, type: str | None = None) -> int:
        stmt = select(func.count()).select_from(CreditTransaction).where(CreditTransaction.broker_id == broker_id)
        if type:
            stmt = stmt.where(CreditTransaction.type == type)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def replay_transactions(self, broker_id: str) -> Sequence[CreditTransaction]:
        stmt = (
            select(CreditTransaction)
            .where(CreditTransaction.broker_id == broker_id)
            .where(CreditTransaction.status == "completed")
            .order_by(CreditTransaction.sequence)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

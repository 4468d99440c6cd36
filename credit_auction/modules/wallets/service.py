"""Wallet ledger domain service.

Every balance change goes through :meth:`WalletService._apply`, which shifts the
balance with a guarded ``UPDATE`` and writes exactly one transaction row in the
same savepoint, so the log always replays to the stored balance.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from credit_auction.core.config import get_settings
from credit_auction.core.locks import KeyedLocks
from credit_auction.db.models import CreditTransaction as CreditTransactionModel, CreditWallet as CreditWalletModel
from credit_auction.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from credit_auction.infrastructure.database.session import is_lock_contention
from credit_auction.modules.common.exceptions import AuctionBusy, DuplicateKeyError

from .exceptions import AlreadyRefunded, IdempotencyConflict, InsufficientFunds, InvalidAmount, WalletNotFound
from .models import (
    TRANSACTION_TYPES,
    BalanceCheck,
    CreditTransactionRecord,
    PaymentCorrelation,
    TransactionPage,
    WalletAudit,
    WalletSnapshot,
)
from .repository import WalletRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WalletService:
    repository: WalletRepository
    locks: KeyedLocks = field(default_factory=lambda: KeyedLocks("wallet"))
    signup_bonus: int = 0

    @classmethod
    def with_session(
        cls,
        session: AsyncSession,
        *,
        locks: KeyedLocks | None = None,
        signup_bonus: int | None = None,
    ) -> "WalletService":
        settings = get_settings()
        if locks is None:
            locks = KeyedLocks("wallet", settings.auction.lock_timeout_seconds)
        if signup_bonus is None:
            signup_bonus = settings.credits.signup_bonus
        return cls(SqlWalletRepository(session), locks=locks, signup_bonus=signup_bonus)

    async def ensure_wallet(self, broker_id: str) -> WalletSnapshot:
        wallet = await self.repository.get_wallet(broker_id)
        if wallet is None:
            wallet = await self._open_wallet(broker_id)
        return self._to_snapshot(wallet)

    async def get_balance(self, broker_id: str) -> int:
        snapshot = await self.ensure_wallet(broker_id)
        return snapshot.balance

    async def check_balance(self, broker_id: str, amount: int) -> BalanceCheck:
        self._require_positive(amount)
        balance = await self.get_balance(broker_id)
        return BalanceCheck(has_enough=balance >= amount, required_amount=amount, balance=balance)

    async def credit(
        self,
        broker_id: str,
        amount: int,
        *,
        type: str = "purchase",
        description: Optional[str] = None,
        correlation: PaymentCorrelation | None = None,
        idempotency_key: Optional[str] = None,
    ) -> CreditTransactionRecord:
        self._require_positive(amount)
        if idempotency_key is None and correlation is not None and correlation.order_id:
            idempotency_key = f"{correlation.order_id}:{type}"
        if idempotency_key is not None:
            existing = await self.repository.get_transaction_by_key(idempotency_key)
            if existing is not None:
                logger.info("Credit %s for broker %s already applied", idempotency_key, broker_id)
                return self._replayed(existing, idempotency_key, broker_id)
        try:
            return await self._apply(
                broker_id,
                amount,
                type=type,
                description=description or "Credits added",
                idempotency_key=idempotency_key,
                correlation=correlation,
            )
        except DuplicateKeyError:
            existing = await self.repository.get_transaction_by_key(idempotency_key)  # type: ignore[arg-type]
            if existing is None:
                raise
            return self._replayed(existing, idempotency_key, broker_id)  # type: ignore[arg-type]

    async def debit(
        self,
        broker_id: str,
        amount: int,
        *,
        type: str = "debit",
        description: Optional[str] = None,
        reference: Optional[str] = None,
    ) -> CreditTransactionRecord:
        self._require_positive(amount)
        return await self._apply(
            broker_id,
            -amount,
            type=type,
            description=description or "Credits used",
            reference=reference,
        )

    async def refund(
        self,
        broker_id: str,
        amount: int,
        original_ref: str,
        *,
        description: Optional[str] = None,
        timeout: float | None = None,
    ) -> CreditTransactionRecord:
        self._require_positive(amount)
        key = f"refund:{original_ref}"
        if await self.repository.get_transaction_by_key(key) is not None:
            raise AlreadyRefunded(original_ref)
        try:
            return await self._apply(
                broker_id,
                amount,
                type="refund",
                description=description or "Credits refunded",
                reference=original_ref,
                idempotency_key=key,
                timeout=timeout,
            )
        except DuplicateKeyError as exc:
            raise AlreadyRefunded(original_ref) from exc

    async def adjust(self, broker_id: str, amount: int, *, description: Optional[str] = None) -> CreditTransactionRecord:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount == 0:
            raise InvalidAmount("Adjustment must be a non-zero integer")
        return await self._apply(
            broker_id,
            amount,
            type="admin_adjustment",
            description=description or "Admin adjustment",
        )

    async def list_transactions(
        self,
        broker_id: str,
        page: int = 1,
        limit: int = 20,
        type: Optional[str] = None,
    ) -> TransactionPage:
        page = max(page, 1)
        limit = max(limit, 1)
        total = await self.repository.count_transactions(broker_id, type)
        rows = await self.repository.list_transactions(broker_id, limit, (page - 1) * limit, type)
        return TransactionPage(
            transactions=[self._to_transaction(row) for row in rows],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit) if total else 0,
        )

    async def audit(self, broker_id: str) -> WalletAudit:
        wallet = await self.repository.get_wallet(broker_id)
        if wallet is None:
            raise WalletNotFound(f"No credit wallet for broker {broker_id}")
        rows = await self.repository.replay_transactions(broker_id)
        running = 0
        mismatched: list[int] = []
        for row in rows:
            running += row.amount
            if row.balance_after != running:
                mismatched.append(row.sequence)
        audit = WalletAudit(
            broker_id=broker_id,
            balance=wallet.balance,
            replayed_balance=running,
            transaction_count=len(rows),
            mismatched_sequences=mismatched,
        )
        if not audit.consistent:
            logger.error(
                "Wallet %s ledger mismatch: stored %s, replayed %s, bad sequences %s",
                broker_id,
                audit.balance,
                audit.replayed_balance,
                mismatched,
            )
        return audit

    async def _open_wallet(self, broker_id: str) -> CreditWalletModel:
        async with self.repository.savepoint():
            wallet, created = await self.repository.create_wallet(broker_id, self.signup_bonus)
            if created and self.signup_bonus > 0:
                await self.repository.add_transaction(
                    wallet_id=wallet.id,
                    broker_id=broker_id,
                    sequence=wallet.version,
                    type="signup_bonus",
                    amount=self.signup_bonus,
                    balance_after=self.signup_bonus,
                    description="Signup bonus",
                    idempotency_key=f"signup_bonus:{broker_id}",
                )
        if created:
            logger.info("Opened credit wallet for broker %s with %s bonus credits", broker_id, self.signup_bonus)
        return wallet

    async def _apply(
        self,
        broker_id: str,
        delta: int,
        *,
        type: str,
        description: str,
        reference: Optional[str] = None,
        idempotency_key: Optional[str] = None,
        correlation: PaymentCorrelation | None = None,
        timeout: float | None = None,
    ) -> CreditTransactionRecord:
        if type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {type}")
        correlation = correlation or PaymentCorrelation()
        async with self.locks.hold(broker_id, timeout=timeout):
            try:
                wallet = await self.repository.get_wallet(broker_id, for_update=True)
                if wallet is None:
                    wallet = await self._open_wallet(broker_id)
                if delta < 0 and wallet.balance < -delta:
                    logger.warning(
                        "Broker %s cannot cover %s credits (balance %s)", broker_id, -delta, wallet.balance
                    )
                    raise InsufficientFunds(broker_id, wallet.balance, -delta)
                async with self.repository.savepoint():
                    state = await self.repository.apply_delta(broker_id, delta)
                    if state is None:
                        current = await self.repository.get_wallet(broker_id)
                        raise InsufficientFunds(broker_id, current.balance if current else 0, -delta)
                    wallet_id, balance, version = state
                    tx = await self.repository.add_transaction(
                        wallet_id=wallet_id,
                        broker_id=broker_id,
                        sequence=version,
                        type=type,
                        amount=delta,
                        balance_after=balance,
                        description=description,
                        reference=reference,
                        idempotency_key=idempotency_key,
                        order_id=correlation.order_id,
                        payment_id=correlation.payment_id,
                        pack_id=correlation.pack_id,
                        amount_paid_inr=correlation.amount_paid_inr,
                    )
            except OperationalError as exc:
                if not is_lock_contention(exc):
                    raise
                logger.warning("Wallet %s stayed locked by another transaction", broker_id)
                raise AuctionBusy(f"wallet:{broker_id}", self.locks.timeout if timeout is None else timeout) from exc
        return self._to_transaction(tx)

    def _replayed(self, existing: CreditTransactionModel, key: str, broker_id: str) -> CreditTransactionRecord:
        if existing.broker_id != broker_id:
            logger.warning("Broker %s reused idempotency key %s of broker %s", broker_id, key, existing.broker_id)
            raise IdempotencyConflict(key, broker_id)
        return self._to_transaction(existing)

    @staticmethod
    def _require_positive(amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidAmount("Amount must be a positive integer")

    @staticmethod
    def _to_snapshot(model: CreditWalletModel) -> WalletSnapshot:
        return WalletSnapshot(
            wallet_id=model.id,
            broker_id=model.broker_id,
            balance=model.balance,
            updated_at=model.updated_at,
        )

    @staticmethod
    def _to_transaction(model: CreditTransactionModel) -> CreditTransactionRecord:
        return CreditTransactionRecord(
            id=model.id,
            wallet_id=model.wallet_id,
            broker_id=model.broker_id,
            sequence=model.sequence,
            type=model.type,
            amount=model.amount,
            balance_after=model.balance_after,
            status=model.status,
            description=model.description,
            created_at=model.created_at,
            reference=model.reference,
            order_id=model.order_id,
            payment_id=model.payment_id,
            pack_id=model.pack_id,
            amount_paid_inr=model.amount_paid_inr,
        )
